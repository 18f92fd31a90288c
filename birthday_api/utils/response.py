import logging

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from birthday_api.services.upstream import UpstreamError

logger = logging.getLogger(__name__)


def error_response(message: str, status_code: int, code: str | None = None, **extra) -> JSONResponse:
    """Return the shared JSON error body: a message, an optional stable code, and any extras."""
    content = {"message": message}
    if code:
        content["code"] = code
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def handle_exception(error: Exception, fallback_message: str = "Internal server error") -> JSONResponse:
    """Coerce raised errors into the shared response structure."""
    if isinstance(error, HTTPException):
        detail = error.detail if isinstance(error.detail, str) else str(error.detail)
        return error_response(detail, error.status_code)

    if isinstance(error, UpstreamError):
        logger.warning("%s upstream failure (%s): %s", error.service, error.code, error.message)
        return error_response(error.message, error.status_code, code=error.code)

    logger.exception("Unhandled error while serving request")
    return error_response(fallback_message, status.HTTP_500_INTERNAL_SERVER_ERROR, code="internal_error")


def format_issues(errors) -> list[dict]:
    issues = []
    for error in errors:
        location = list(error.get("loc", ()))
        if location and location[0] == "body":
            location = location[1:]
        issues.append(
            {
                "path": location,
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "value_error"),
            }
        )
    return issues


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    issues = format_issues(exc.errors())
    logger.info("Rejected %s %s with %s issue(s)", request.method, request.url.path, len(issues))
    return error_response(
        "Invalid request body",
        status.HTTP_400_BAD_REQUEST,
        code="validation_error",
        issues=issues,
    )
