"""
➡️ But : Centraliser les erreurs métier et leur traduction HTTP.

Les services lèvent des AppError (NotFoundError, ForbiddenError, ConflictError...),
jamais de HTTPException. Les handlers enregistrés dans app.main les transforment
en réponse JSON homogène :

{"error": {"kind": "Forbidden", "code": "BANNED", "message": "...", "fields": {...}}}

🔹 Avantages :

Services testables sans FastAPI.

Un seul format d'erreur côté client, quel que soit l'endpoint.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    kind: str = "Internal"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "INTERNAL"

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "code": self.code, "message": self.message}


class NotFoundError(AppError):
    kind = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class UnauthorizedError(AppError):
    kind = "Unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"


class ForbiddenError(AppError):
    kind = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"


class ConflictError(AppError):
    kind = "Conflict"
    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"


class ValidationFailedError(AppError):
    kind = "ValidationFailed"
    status_code = 422
    default_code = "VALIDATION_FAILED"

    def __init__(self, fields: Dict[str, str], message: str = "Invalid input data"):
        super().__init__(message)
        self.fields = fields

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["fields"] = self.fields
        return data


class TooManyRequestsError(AppError):
    kind = "TooManyRequests"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_code = "RATE_LIMITED"

    def __init__(self, message: str, *, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after


class InternalError(AppError):
    pass


# -----------------------------
# Handlers FastAPI
# -----------------------------

def _error_response(err: AppError) -> JSONResponse:
    headers = None
    if isinstance(err, TooManyRequestsError):
        headers = {"Retry-After": str(err.retry_after)}
    elif isinstance(err, UnauthorizedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=err.status_code, content={"error": err.to_dict()}, headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields: Dict[str, str] = {}
    for err in exc.errors():
        # ("body", "email") -> "email"
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        fields[".".join(loc) or "request"] = err.get("msg", "invalid")
    return _error_response(ValidationFailedError(fields))


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # Pas de détails du store côté client
    logger.exception("Store failure on %s %s", request.method, request.url.path)
    return _error_response(InternalError("Internal server error"))


HTTP_KINDS = {
    status.HTTP_400_BAD_REQUEST: ("BadRequest", "BAD_REQUEST"),
    status.HTTP_401_UNAUTHORIZED: ("Unauthorized", "UNAUTHORIZED"),
    status.HTTP_403_FORBIDDEN: ("Forbidden", "FORBIDDEN"),
    status.HTTP_404_NOT_FOUND: ("NotFound", "NOT_FOUND"),
    status.HTTP_405_METHOD_NOT_ALLOWED: ("MethodNotAllowed", "METHOD_NOT_ALLOWED"),
}


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Erreurs levées par le routage (route inconnue, méthode non permise...)."""
    kind, code = HTTP_KINDS.get(exc.status_code, ("HttpError", "HTTP_ERROR"))
    message = exc.detail if isinstance(exc.detail, str) else kind
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"kind": kind, "code": code, "message": message}},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(InternalError("Internal server error"))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
