import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ServiceError(HTTPException):
    """Typed failure raised by the upload/activity core.

    Subclasses pin the HTTP status and a stable ``code`` so the registered
    handlers can render them without inspecting the message.
    """

    status_code = 500
    code = "service_error"
    default_message = "Request failed"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        super().__init__(
            status_code=status_code or type(self).status_code,
            detail=message or self.default_message,
        )


class ValidationError(ServiceError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid upload"


class InvalidActivityType(ServiceError):
    status_code = 400
    code = "invalid_activity_type"
    default_message = "Invalid activity type"


class DocumentNotFound(ServiceError):
    status_code = 404
    code = "document_not_found"
    default_message = "Document not found"


class NotAuthorized(ServiceError):
    status_code = 403
    code = "not_authorized"
    default_message = "Not authorized"


class StorageWriteError(ServiceError):
    status_code = 503
    code = "storage_write_error"
    default_message = "Upload failed, please try again"


class StorageReadError(ServiceError):
    status_code = 502
    code = "storage_read_error"
    default_message = "File could not be retrieved"


class RecordWriteError(ServiceError):
    status_code = 500
    code = "record_write_error"
    default_message = "Upload failed, please try again"


def _error_payload(code: str, message: str, details):
    return {"code": code, "message": message, "details": details}


def register_error_handlers(app) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        detail = exc.detail
        code = getattr(exc, "code", None) or f"http_{exc.status_code}"
        message = "Request failed"
        details = None
        if isinstance(detail, dict):
            code = detail.get("code", code)
            message = detail.get("message", message)
            details = detail.get("details")
        elif isinstance(detail, str):
            message = detail
        else:
            details = detail
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_payload(code, message, details),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        # exc.errors() ctx may contain raw Exception objects (not JSON-serialisable).
        errors = [
            {k: str(v) if k == "ctx" else v for k, v in err.items()}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=422,
            content=_error_payload("validation_error", "Validation error", errors),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error_payload("internal_error", "Internal server error", None),
        )
