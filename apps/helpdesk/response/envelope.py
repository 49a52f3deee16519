"""Uniform ``{success, data, message}`` response envelope."""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Operation successful"

DataT = TypeVar("DataT")


class Envelope(BaseModel, Generic[DataT]):
    success: bool = True
    data: DataT | None = None
    message: str = SUCCESS_MESSAGE


def ok(data: DataT, message: str = SUCCESS_MESSAGE) -> Envelope[DataT]:
    return Envelope(success=True, data=data, message=message)


def error_body(message: str) -> dict[str, Any]:
    return {"success": False, "data": None, "message": message}


def _validation_message(exc: RequestValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        text = str(error.get("msg", "Invalid value"))
        parts.append(f"{location}: {text}" if location else text)
    return ", ".join(parts) or "Invalid request"


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content=error_body(_validation_message(exc)))


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
