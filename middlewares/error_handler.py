import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from middlewares.timing import elapsed_ms
from schemas.common import ErrorDetail, ErrorResponse
from services.exceptions import (
    EmptyCohortError,
    GradeAggregationError,
    MalformedRecordError,
    SourceUnavailable,
)

logger = logging.getLogger(__name__)

# 집계 예외 → HTTP 상태 코드
STATUS_BY_ERROR = {
    MalformedRecordError: 422,
    SourceUnavailable: 503,
    EmptyCohortError: 404,
}


def _error_body(code: str, message: str, request: Request) -> dict:
    body = ErrorResponse(
        error=ErrorDetail(code=code, message=message),
        latency_ms=elapsed_ms(request),
    )
    return body.model_dump(mode="json")


def add_error_handlers(app: FastAPI):
    @app.exception_handler(GradeAggregationError)
    async def aggregation_exception_handler(request: Request, exc: GradeAggregationError):
        status = STATUS_BY_ERROR.get(type(exc), 500)
        logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=status, content=_error_body(exc.code, exc.message, request))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", str(exc), request),
        )
