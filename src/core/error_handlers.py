from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.core.exceptions import CrossBoardMoveError, NotFoundError, ValidationError
from src.logs.server_log import api_logger


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    api_logger.info(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    api_logger.info(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def cross_board_move_handler(request: Request, exc: CrossBoardMoveError) -> JSONResponse:
    api_logger.warning(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors to HTTP responses"""
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(CrossBoardMoveError, cross_board_move_handler)
