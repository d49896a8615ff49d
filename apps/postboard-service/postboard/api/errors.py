"""
Error taxonomy for the procedure surface.

Every error response carries ``{"detail": ..., "code": ...}`` where ``code``
is one of :class:`ErrorCode`. Storage failures are logged in full and
returned as an opaque message.
"""
import logging
from enum import Enum
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION = "VALIDATION"
    STORAGE_FAILURE = "STORAGE_FAILURE"


_CODE_BY_STATUS = {
    status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHENTICATED,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    422: ErrorCode.VALIDATION,
}


class ProcedureError(HTTPException):
    """HTTPException tagged with an explicit error code."""

    def __init__(self, status_code: int, detail: Any, code: ErrorCode, headers: Optional[dict] = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code


def unauthenticated(detail: str = "Authentication required") -> ProcedureError:
    return ProcedureError(
        status.HTTP_401_UNAUTHORIZED,
        detail,
        ErrorCode.UNAUTHENTICATED,
        headers={"WWW-Authenticate": "Bearer"},
    )


def not_found(detail: str) -> ProcedureError:
    return ProcedureError(status.HTTP_404_NOT_FOUND, detail, ErrorCode.NOT_FOUND)


def validation_error(loc: tuple, msg: str, value: Any) -> RequestValidationError:
    return RequestValidationError([
        {"type": "value_error", "loc": loc, "msg": msg, "input": value},
    ])


def error_body(detail: Any, code: Optional[ErrorCode]) -> dict:
    return {"detail": detail, "code": code.value if code else None}


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        code = getattr(exc, "code", None) or _CODE_BY_STATUS.get(exc.status_code)
        return JSONResponse(
            error_body(exc.detail, code),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            error_body(jsonable_encoder(exc.errors()), ErrorCode.VALIDATION),
            status_code=422,
        )

    @app.exception_handler(SQLAlchemyError)
    async def _storage_error(request: Request, exc: SQLAlchemyError):
        logger.error("storage_failure: %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            error_body("Internal server error", ErrorCode.STORAGE_FAILURE),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
