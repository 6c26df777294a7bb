"""Exception handlers rendering every failure as an ``{error, message}`` envelope"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from domain.errors import ErrorKind, ServiceError

logger = logging.getLogger(__name__)


def error_response(status_code: int, error: str, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message},
        headers=headers,
    )


def _format_validation_errors(errors) -> str:
    parts = []
    for err in errors:
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(parts)


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.kind is ErrorKind.INTERNAL:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.error, exc.message)
    else:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.error, exc.message)

    headers = {"WWW-Authenticate": "Bearer"} if exc.kind is ErrorKind.AUTH else None
    return error_response(exc.status_code, exc.error, exc.message, headers)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON and rule violations both map to 400"""
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        title = "Pedido inválido!"
    else:
        title = "Campos inválidos!"
    message = _format_validation_errors(errors)
    logger.info("%s %s -> %s: %s", request.method, request.url.path, title, message)
    return error_response(400, title, message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return error_response(exc.status_code, "Erro na requisição!", str(exc.detail), getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Erro interno!", str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
