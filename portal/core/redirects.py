"""
core/redirects.py
-----------------
Redirect helpers used by the authorization gate and the login flow.

Any "return to" path supplied by a client is passed through safe_redirect()
before it is placed in a Location header.
"""

from urllib.parse import urlencode

from fastapi import HTTPException, status

DEFAULT_REDIRECT = "/"
LOGIN_PATH = "/login"


def safe_redirect(to: object, default: str = DEFAULT_REDIRECT) -> str:
    """
    Return `to` if it is a same-origin absolute path, otherwise `default`.
    A leading "//" would be read by browsers as a protocol-relative URL.
    """
    if not to or not isinstance(to, str):
        return default
    if not to.startswith("/") or to.startswith("//"):
        return default
    return to


def login_url(redirect_to: str) -> str:
    query = urlencode({"redirectTo": safe_redirect(redirect_to)})
    return f"{LOGIN_PATH}?{query}"


def redirect_exception(location: str, set_cookie: str | None = None) -> HTTPException:
    """303 See Other, raised from dependencies to abort the request."""
    headers = {"Location": location}
    if set_cookie:
        headers["Set-Cookie"] = set_cookie
    return HTTPException(
        status_code=status.HTTP_303_SEE_OTHER,
        detail="Redirect",
        headers=headers,
    )
