"""Translate ordering errors into the HTTP error envelope.

Every failure leaves the API as ``{"success": false, "error": <kind>,
"message": ...}``. Unexpected exceptions are logged with their traceback and
reported with a generic message so internals never reach the client.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from shared.errors import ErrorKind, MarketError

logger = structlog.get_logger(__name__)

STATUS_CODES = {
    ErrorKind.INVALID_QUANTITY: 400,
    ErrorKind.EMPTY_CART: 400,
    ErrorKind.EMPTY_ORDER: 400,
    ErrorKind.INVALID_REFERENCE: 400,
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ITEM_NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INVALID_TRANSITION: 409,
    ErrorKind.TERMINAL_STATE: 409,
    ErrorKind.INVALID_STATE: 409,
    ErrorKind.INSUFFICIENT_STOCK: 409,
    ErrorKind.UNAVAILABLE: 503,
    ErrorKind.TIMEOUT: 504,
}


def error_body(kind: str, message: str, details: dict | None = None) -> dict:
    body = {"success": False, "error": kind, "message": message}
    if details:
        body["details"] = details
    return body


async def market_error_handler(request: Request, exc: MarketError) -> JSONResponse:
    status_code = STATUS_CODES.get(exc.kind, 400)
    log = logger.warning if status_code >= 500 else logger.info
    log("Request failed", path=request.url.path, error=exc.kind.value, message=exc.message)
    return JSONResponse(status_code=status_code, content=error_body(exc.kind.value, exc.message, exc.details))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = [
        {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]} for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=error_body(ErrorKind.INVALID_REQUEST.value, "Request validation failed", {"errors": problems}),
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error", path=request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=error_body("InternalError", "Internal server error"))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MarketError, market_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
