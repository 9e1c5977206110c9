"""
core/exceptions.py
------------------
Domain exceptions raised by the service layer.

Services never build HTTP responses; main.py maps these to status codes:
  FieldValidationError → 422 {"errors": {field: message}}
  NotFoundError        → 404
  ConflictError        → 409
"""

from pydantic import ValidationError


class NotFoundError(LookupError):
    """Referenced record does not exist or has been soft-deleted."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} '{entity_id}' not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(ValueError):
    """A conditional write affected no rows because the record moved on."""


class FieldValidationError(ValueError):
    """Input rejected before any write was attempted."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


def field_errors(errors: list[dict]) -> dict[str, str]:
    """
    Flatten pydantic error dicts into a {field: message} map.
    The field is the last string element of the error location; the first
    error reported for a field wins.
    """
    result: dict[str, str] = {}
    for error in errors:
        names = [part for part in error.get("loc", ()) if isinstance(part, str)]
        field = names[-1] if names else "form"
        if field in ("body", "query", "path"):
            field = "form"
        result.setdefault(field, error.get("msg", "Invalid value"))
    return result


def from_validation_error(exc: ValidationError) -> FieldValidationError:
    return FieldValidationError(field_errors(exc.errors()))
