import logging
from typing import Any

from litestar import Request, Response
from litestar.exceptions import HTTPException
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from formforge.fields import FieldDefinitionError, SubmissionValidationError
from formforge.lib import observability
from formforge.lib.responses import error_response

logger = logging.getLogger(__name__)


def http_exception_handler(request: Request, exc: HTTPException) -> Response:
    """Render framework and handler-raised HTTP errors in the API envelope."""
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    extra: dict[str, Any] = {}
    if isinstance(exc.extra, dict):
        extra.update(exc.extra)
    elif exc.extra:
        extra["details"] = exc.extra
    return error_response(detail, exc.status_code, **extra)


def field_definition_error_handler(request: Request, exc: FieldDefinitionError) -> Response:
    return error_response(str(exc), HTTP_400_BAD_REQUEST, errors=exc.errors)


def submission_validation_error_handler(request: Request, exc: SubmissionValidationError) -> Response:
    return error_response(str(exc), HTTP_422_UNPROCESSABLE_ENTITY, errors=exc.errors)


def internal_server_error_handler(request: Request, exc: Exception) -> Response:
    """Log unexpected exceptions once and hide their details from clients."""
    if not observability.exception(
        "Unhandled exception on {method} {path}",
        method=request.method,
        path=request.url.path,
    ):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

    return error_response("Internal server error", HTTP_500_INTERNAL_SERVER_ERROR)


EXCEPTION_HANDLERS: dict[type[Exception], Any] = {
    HTTPException: http_exception_handler,
    FieldDefinitionError: field_definition_error_handler,
    SubmissionValidationError: submission_validation_error_handler,
    Exception: internal_server_error_handler,
}
