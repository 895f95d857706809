import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal server error"


def custom_exception_handler(_request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _is_unreadable_body(error: dict) -> bool:
    if error.get("type") == "json_invalid":
        return True
    # body 자체가 비어 있는 경우
    return error.get("type") == "missing" and tuple(error.get("loc", ())) == ("body",)


def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    body가 없거나 JSON이 아니면 500, 필드 타입이 맞지 않으면 400으로 응답합니다.
    상세 내용은 서버 로그에만 남깁니다.
    """
    errors = exc.errors()
    if any(_is_unreadable_body(error) for error in errors):
        logger.error("%s %s body parse error: %s", request.method, request.url.path, errors)
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})

    logger.info("%s %s invalid request: %s", request.method, request.url.path, errors)
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "%s %s error", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, custom_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
