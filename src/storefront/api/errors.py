"""Exception handlers that turn domain and checkout errors into HTTP responses.

Every error body has the same shape: ``{"status": <http code>, "message": <text>}``.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.domain import logger
from storefront.exceptions import (
    AuthenticityError,
    GatewayError,
    PaymentIncompleteError,
    PersistenceError,
)

STATUS_CODES = {
    ValidationError: 400,
    AuthenticityError: 400,
    ObjectNotFoundError: 404,
    PaymentIncompleteError: 409,
    ExpectedVersionError: 409,
    PersistenceError: 500,
    GatewayError: 502,
}


def _flatten(messages) -> str:
    """Join a Protean ``{field: [msg, ...]}`` error dict into one line."""
    if isinstance(messages, dict):
        parts = []
        for value in messages.values():
            parts.extend(value if isinstance(value, list) else [value])
        return "; ".join(str(part) for part in parts)
    return str(messages)


def error_message(exc: Exception) -> str:
    if isinstance(exc, (ValidationError, ObjectNotFoundError)):
        messages = getattr(exc, "messages", None)
        if not messages and exc.args:
            messages = exc.args[0]
        return _flatten(messages) if messages else str(exc)
    return getattr(exc, "message", None) or str(exc)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": status_code, "message": message})


def register_exception_handlers(app: FastAPI) -> None:
    def _make_handler(status_code: int):
        async def handler(request: Request, exc: Exception) -> JSONResponse:
            message = error_message(exc)
            log = logger.error if status_code >= 500 else logger.warning
            log("Request failed", path=request.url.path, status=status_code, error=message)
            return error_response(status_code, message)

        return handler

    for exc_class, status_code in STATUS_CODES.items():
        app.add_exception_handler(exc_class, _make_handler(status_code))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors())
        return error_response(422, details)
