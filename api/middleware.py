"""Route protection for page-level paths."""

from __future__ import annotations

import structlog
from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .auth import SESSION_COOKIE, Identity, load_identity, token_from_request
from .errors import Unauthenticated

# Initialize logger
logger = structlog.get_logger(__name__)

PROTECTED_ROUTES = ("/dashboard", "/notes", "/tags")
AUTH_ROUTES = ("/login", "/signup")
LOGIN_PATH = "/login"
HOME_PATH = "/dashboard"


def _matches(pathname: str, routes: tuple[str, ...]) -> bool:
    return any(pathname == route or pathname.startswith(f"{route}/") for route in routes)


def is_protected_route(pathname: str) -> bool:
    """True for a protected prefix itself or anything below it."""
    return _matches(pathname, PROTECTED_ROUTES)


def is_auth_route(pathname: str) -> bool:
    return _matches(pathname, AUTH_ROUTES)


def wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "")


class RouteGuardMiddleware(BaseHTTPMiddleware):
    """
    Redirects browsers between the login and main views.

    * a browser without a valid session asking for a protected path goes to
      ``/login``; API clients fall through and get the 401 envelope from the
      identity dependency
    * a signed-in user opening ``/login`` or ``/signup`` goes to ``/dashboard``

    "Signed in" means the same as for the API: a valid token naming an
    existing, active user. A stale session cookie is treated as anonymous and
    cleared.

    Protected responses are marked ``no-store`` so views are always rebuilt
    after a mutation.
    """

    async def dispatch(self, request: Request, call_next):
        pathname = request.url.path
        protected = is_protected_route(pathname)

        if not (protected or is_auth_route(pathname)):
            return await call_next(request)

        token = token_from_request(request)
        identity = await resolve_identity(token)
        stale_cookie = identity is None and token is not None and token == request.cookies.get(
            SESSION_COOKIE
        )

        if protected and identity is None and wants_html(request):
            logger.info("route_guard_redirect_login", path=pathname)
            response = RedirectResponse(LOGIN_PATH, status_code=307)
        elif not protected and identity is not None:
            logger.info("route_guard_redirect_home", path=pathname, user_id=identity.user_id)
            response = RedirectResponse(HOME_PATH, status_code=307)
        else:
            response = await call_next(request)

        if stale_cookie:
            response.delete_cookie(SESSION_COOKIE)
        if protected:
            response.headers["Cache-Control"] = "no-store"
        return response


async def resolve_identity(token: str | None) -> Identity | None:
    """The active user behind ``token``, or None for anonymous and stale sessions."""
    if not token:
        return None
    try:
        return await load_identity(token)
    except Unauthenticated:
        return None
