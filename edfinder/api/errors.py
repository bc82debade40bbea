"""Map package errors onto the proxy's ``{"error": ..., "details": ...}`` bodies."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from edfinder.errors import MissingParameterError, UpstreamExhaustedError


class ProxyError(Exception):
    """An error response with a stable, machine-readable ``error`` message."""

    def __init__(
        self, status_code: int, error: str, details: Optional[str] = None
    ) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details


def upstream_failure(message: str, exc: UpstreamExhaustedError) -> ProxyError:
    """A 500 carrying *message* and the last underlying upstream failure."""
    return ProxyError(500, message, exc.details or "All attempts failed")


def error_body(error: str, details: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": error}
    if details is not None:
        body["details"] = details
    return body


async def _proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.error, exc.details))


async def _missing_parameter_handler(
    request: Request, exc: MissingParameterError
) -> JSONResponse:
    return JSONResponse(status_code=400, content=error_body(exc.message))


async def _validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content=error_body("Invalid request parameters", details))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProxyError, _proxy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(MissingParameterError, _missing_parameter_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_handler)  # type: ignore[arg-type]
