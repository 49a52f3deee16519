"""Actor resolution middleware for FastAPI."""

from __future__ import annotations

from typing import Awaitable, Callable

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from apps.helpdesk.dependencies.auth import resolve_user_from_token
from apps.helpdesk.response.envelope import error_body


class RBACMiddleware(BaseHTTPMiddleware):
    """Populate the request state with the authenticated user when a token is sent.

    Requests without an ``Authorization`` header pass through untouched; routes
    that need an actor reject them in ``get_current_user``.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        authorization = request.headers.get("Authorization")
        if authorization:
            scheme, _, credentials = authorization.partition(" ")
            if scheme.lower() != "bearer" or not credentials:
                return JSONResponse(status_code=401, content=error_body("Invalid authentication credentials"))
            try:
                request.state.user = resolve_user_from_token(credentials)
            except HTTPException as exc:
                return JSONResponse(status_code=exc.status_code, content=error_body(str(exc.detail)))

        return await call_next(request)
