"""
Maps domain errors to HTTP responses.

Body shape: {"detail": {"message": ..., "code": ..., "details": {...}}}
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from lending.core.exceptions import DomainError
from lending.core.logging import get_logger

logger = get_logger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        logger.info(
            "domain_error",
            code=exc.code,
            status_code=exc.status_code,
            message=exc.message,
        )
        http_exc = exc.to_http_exception()
        return JSONResponse({"detail": http_exc.detail}, status_code=http_exc.status_code)
