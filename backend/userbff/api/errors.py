import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from userbff.repositories.errors import (
    DatabaseError,
    InvalidDataError,
    UserNotFoundError,
    UserRepositoryError,
)

logger = logging.getLogger(__name__)


def status_for_error(exc: UserRepositoryError) -> int:
    if isinstance(exc, UserNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, InvalidDataError):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def repository_error_handler(request: Request, exc: UserRepositoryError) -> JSONResponse:
    status_code = status_for_error(exc)
    if isinstance(exc, DatabaseError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UserRepositoryError, repository_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
