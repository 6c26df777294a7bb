"""Domain Errors - tagged error kinds shared by stores, services and the API"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    VALIDATION = "VALIDATION"
    AUTH = "AUTH"
    INTERNAL = "INTERNAL"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTH: 401,
    ErrorKind.INTERNAL: 500,
}


class ServiceError(Exception):
    """Base error carrying a kind, a short title and a detail message.

    ``error`` is what clients see as the title of the envelope,
    ``message`` carries the underlying reason.
    """

    kind: ErrorKind = ErrorKind.INTERNAL
    default_error: str = "Erro interno!"

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error or self.default_error

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND
    default_error = "Recurso não encontrado!"


class ValidationError(ServiceError):
    kind = ErrorKind.VALIDATION
    default_error = "Campos inválidos!"


class AuthError(ServiceError):
    kind = ErrorKind.AUTH
    default_error = "Não autorizado!"


class InternalError(ServiceError):
    kind = ErrorKind.INTERNAL
    default_error = "Erro interno!"
