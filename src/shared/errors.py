"""Error taxonomy and the HTTP handlers that render it.

Domain code raises ``StorefrontError`` subclasses; routes let them propagate
and ``register_error_handlers`` turns them into ``{"message": ...}`` bodies.
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


class StorefrontError(Exception):
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None, **extra: Any):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message, **self.extra}


class ValidationFailed(StorefrontError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationRequired(StorefrontError):
    status_code = 401
    default_message = "Authentication required"


class PermissionDenied(StorefrontError):
    status_code = 403
    default_message = "Admin access required"


class NotFound(StorefrontError):
    status_code = 404
    default_message = "Not found"


class ProductUnavailable(NotFound):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product {product_id} is not available", product_id=product_id)


class Conflict(StorefrontError):
    status_code = 409
    default_message = "Conflict"


class InvalidTransition(Conflict):
    pass


class InsufficientInventory(Conflict):
    def __init__(self, product_id: str, requested: int, available: int | None = None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient inventory for product {product_id}", product_id=product_id)


class PayloadTooLarge(StorefrontError):
    status_code = 413
    default_message = "Request body too large"


class OrderPersistenceFailed(StorefrontError):
    status_code = 500
    default_message = "Order could not be saved"


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", error=type(exc).__name__, path=request.url.path, exc_info=exc)
    else:
        logger.info("request_rejected", error=type(exc).__name__, status=exc.status_code, path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(status_code=exc.status_code, content={"message": message}, headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    first = errors[0] if errors else None
    message = f"{'.'.join(first['loc'])}: {first['msg']}" if first else "Invalid request"
    return JSONResponse(status_code=400, content={"message": message, "errors": errors})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Runs in ServerErrorMiddleware, which re-raises afterwards. When the origin
    # middleware already answered with a CORS-tagged 500 this response is dropped.
    logger.error("unhandled_error", error=type(exc).__name__, path=request.url.path)
    return JSONResponse(status_code=500, content={"message": INTERNAL_ERROR_MESSAGE})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
