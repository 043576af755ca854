"""
Exception handlers translating application, validation, database and LLM
errors into the JSON error envelope used by every endpoint:

    {"success": false, "error": str, "code": str, "details": ..., "type": str}
"""

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.logger import logger
from ..middleware.monitoring_middleware import get_correlation_id
from .exceptions import AppError, DatabaseError, LLMError


def error_response(
    status_code: int,
    message: str,
    code: str,
    exc: Exception,
    details: Optional[Any] = None,
) -> JSONResponse:
    content = {
        "success": False,
        "error": message,
        "code": code,
        "type": type(exc).__name__,
    }
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
    return error_response(exc.status_code, exc.message, exc.code, exc, exc.details)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", [])[1:]),
            "message": err.get("msg"),
        }
        for err in exc.errors()
    ]
    logger.warning(f"Validation failed for {request.url.path}: {errors}")
    return error_response(400, "输入数据无效", "INVALID_INPUT", exc, errors)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    codes = {
        400: "INVALID_INPUT",
        401: "UNAUTHORIZED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        429: "RATE_LIMITED",
    }
    return error_response(
        exc.status_code,
        str(exc.detail),
        codes.get(exc.status_code, "HTTP_ERROR"),
        exc,
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error(f"Integrity error on {request.url.path}: {str(exc.orig)}")
    return error_response(409, "数据已存在", DatabaseError.code, exc)


async def no_result_handler(request: Request, exc: NoResultFound) -> JSONResponse:
    return error_response(404, "记录未找到", "NOT_FOUND", exc)


async def database_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    logger.error(f"Database error on {request.url.path}: {str(exc)}", exc_info=True)
    return error_response(
        DatabaseError.status_code, DatabaseError.default_message, DatabaseError.code, exc
    )


async def llm_error_handler(request: Request, exc: LLMError) -> JSONResponse:
    logger.error(f"LLM call failed on {request.url.path}: {str(exc)}")
    return error_response(
        503, "AI服务暂时不可用，请稍后重试", "AI_SERVICE_UNAVAILABLE", exc
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {str(exc)} "
        f"[ID: {get_correlation_id(request)}]",
        exc_info=True,
    )
    return error_response(500, "服务器内部错误", "INTERNAL_SERVER_ERROR", exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(NoResultFound, no_result_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(LLMError, llm_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
