# authguard/shared/middleware/error_handler_middleware.py

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from authguard.domain.exceptions import AuthenticationError, DomainException

logger = logging.getLogger(__name__)


def error_body(error: str, code: str) -> dict:
    return {
        "success": False,
        "error": error,
        "code": code,
    }


def domain_exception_response(e: DomainException) -> JSONResponse:
    """
    Map a domain exception to its HTTP response.

    Only the generic public message (or a user-facing violation message) is
    returned; the detailed message stays in the server log.
    """
    if e.status_code >= 500:
        logger.error(f"[{e.internal_code}] {e.__class__.__name__}: {e.message}")
    else:
        logger.warning(f"[{e.internal_code}] {e.__class__.__name__}: {e.message}")

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(e, AuthenticationError) else None
    return JSONResponse(
        status_code=e.status_code,
        content=error_body(e.message if e.expose_message else e.public_message, e.internal_code),
        headers=headers,
    )


async def domain_exception_handler(request: Request, e: DomainException) -> JSONResponse:
    return domain_exception_response(e)


async def http_exception_handler(request: Request, e: StarletteHTTPException) -> JSONResponse:
    logger.warning(f"HTTPException {e.status_code} em {request.url.path}: {e.detail}")
    return JSONResponse(
        status_code=e.status_code,
        content=error_body(str(e.detail), "HTTP_EXCEPTION"),
        headers=getattr(e, "headers", None),
    )


async def validation_exception_handler(request: Request, e: RequestValidationError) -> JSONResponse:
    logger.warning(f"RequestValidationError em {request.url.path}: {len(e.errors())} error(s)")
    body = error_body("Validation error in the submitted data.", "VALIDATION_ERROR")
    body["details"] = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in e.errors()
    ]
    return JSONResponse(status_code=422, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Last line of defense: anything that escaped the registered handlers becomes
    a generic 500 (or its domain mapping) without leaking internals.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)

        # 1. Exceções customizadas do domínio
        except DomainException as e:
            return domain_exception_response(e)

        # 2. Exceções HTTP padrão
        except HTTPException as e:
            logger.warning(f"HTTPException: {e.detail}")
            return JSONResponse(
                status_code=e.status_code,
                content=error_body(str(e.detail), "HTTP_EXCEPTION"),
            )

        # 3. Erros inesperados
        except Exception:
            logger.exception(f"Erro inesperado em {request.url.path}")
            return JSONResponse(
                status_code=500,
                content=error_body("Internal server error.", "INTERNAL_SERVER_ERROR"),
            )
