"""
api/routes/auth.py
------------------
Session endpoints. Forms are posted as application/x-www-form-urlencoded.

POST /register  — Create a tenant account and sign it in.
POST /login     — Exchange credentials for a session cookie.
POST /logout    — Clear the session cookie.
GET  /me        — Return the signed-in user with role and permissions.

Successful login/register/logout answer with 303 See Other; invalid forms
answer with 422 and a {field: message} map.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import from_validation_error
from portal.core.redirects import DEFAULT_REDIRECT
from portal.core.session import create_session, destroy_session
from portal.db.session import get_db
from portal.dependencies import CurrentUser
from portal.models.user import UserRole
from portal.schemas.user import LoginRequest, MeResponse, UserRead, UserRegister
from portal.services.user_service import UserService

router = APIRouter(tags=["Authentication"])

_TRUTHY = {"on", "true", "1", "yes"}


@router.post(
    "/login",
    status_code=status.HTTP_303_SEE_OTHER,
    summary="Sign in and receive a session cookie",
)
async def login(
    db: Annotated[AsyncSession, Depends(get_db)],
    email: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
    redirect_to: Annotated[str, Form(alias="redirectTo")] = DEFAULT_REDIRECT,
    remember: Annotated[Optional[str], Form()] = None,
):
    """
    Authenticate with email + password. With remember=on the cookie lives
    for seven days, otherwise for the short default lifetime.
    """
    try:
        form = LoginRequest(
            email=email,
            password=password,
            redirect_to=redirect_to,
            remember=(remember or "").lower() in _TRUTHY,
        )
    except ValidationError as exc:
        raise from_validation_error(exc)

    authenticated = await UserService.authenticate(db, form.email, form.password)
    if authenticated is None:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"errors": {"user": "Invalid email or password"}},
        )
    user, role_name = authenticated

    response = RedirectResponse(form.redirect_to, status_code=status.HTTP_303_SEE_OTHER)
    create_session(response, user.id, role_name, form.remember)
    return response


@router.post(
    "/register",
    status_code=status.HTTP_303_SEE_OTHER,
    summary="Register a tenant account",
)
async def register(
    db: Annotated[AsyncSession, Depends(get_db)],
    email: Annotated[str, Form()] = "",
    first_name: Annotated[str, Form(alias="firstName")] = "",
    last_name: Annotated[str, Form(alias="lastName")] = "",
    password: Annotated[str, Form()] = "",
    mobile: Annotated[str, Form()] = "",
    redirect_to: Annotated[str, Form(alias="redirectTo")] = DEFAULT_REDIRECT,
):
    try:
        form = UserRegister(
            email=email,
            first_name=first_name,
            last_name=last_name,
            password=password,
            mobile=mobile,
            redirect_to=redirect_to,
        )
    except ValidationError as exc:
        raise from_validation_error(exc)

    user = await UserService.register(db, form)

    response = RedirectResponse(form.redirect_to, status_code=status.HTTP_303_SEE_OTHER)
    create_session(response, user.id, UserRole.user.value, remember=False)
    return response


@router.post(
    "/logout",
    status_code=status.HTTP_303_SEE_OTHER,
    summary="Clear the session cookie",
)
async def logout():
    response = RedirectResponse(DEFAULT_REDIRECT, status_code=status.HTTP_303_SEE_OTHER)
    destroy_session(response)
    return response


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Get the currently signed-in user",
)
async def get_me(current_user: CurrentUser) -> MeResponse:
    return MeResponse(
        user=UserRead.model_validate(current_user.user),
        role=current_user.role_name,
        permissions=current_user.permissions,
    )
