"""
services/storage.py
-------------------
Local disk storage for proof-of-payment uploads.

Files land in settings.UPLOAD_DIR under a generated name; the stored path is
what Billing.filepath records. Writes run in the threadpool so the event
loop is never blocked on disk I/O.
"""

import os
import uuid
from pathlib import Path

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from portal.core.config import settings
from portal.core.exceptions import FieldValidationError
from portal.core.logging import get_logger

logger = get_logger(__name__)

_CHUNK_SIZE = 64 * 1024


def _stored_name(original: str | None) -> str:
    suffix = Path(original or "").suffix.lower()[:10]
    return f"{uuid.uuid4().hex}{suffix}"


def _write(upload: UploadFile, destination: Path, limit: int) -> int:
    written = 0
    with destination.open("wb") as out:
        while True:
            chunk = upload.file.read(_CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > limit:
                break
            out.write(chunk)
    return written


async def save_proof(upload: UploadFile) -> str:
    """
    Persist an uploaded proof file and return its stored path.
    Raises FieldValidationError when the file exceeds UPLOAD_MAX_BYTES.
    """
    directory = Path(settings.UPLOAD_DIR)
    await run_in_threadpool(directory.mkdir, parents=True, exist_ok=True)
    destination = directory / _stored_name(upload.filename)

    written = await run_in_threadpool(
        _write, upload, destination, settings.UPLOAD_MAX_BYTES
    )
    if written > settings.UPLOAD_MAX_BYTES:
        await discard(str(destination))
        raise FieldValidationError({"proof": "File is larger than the allowed size"})

    logger.info("Proof stored", path=str(destination), size=written)
    return str(destination)


async def discard(path: str) -> None:
    """Remove a stored file; a file that is already gone is fine."""
    try:
        await run_in_threadpool(os.remove, path)
    except FileNotFoundError:
        pass
