"""Custom exception hierarchy for the persistence layers."""

from __future__ import annotations

from enum import Enum
from typing import Any

DATABASE_UNAVAILABLE_MESSAGE = (
    "No se pudo conectar con la base de datos. Por favor, asegúrese de que el "
    "servidor de base de datos esté en ejecución."
)
CANDIDATE_NOT_FOUND_MESSAGE = (
    "No se pudo encontrar el registro del candidato con el ID proporcionado."
)


class StorageErrorCode(str, Enum):
    """Discriminators attached to storage-layer failures."""

    CONNECTION_FAILED = "connection_failed"
    RECORD_NOT_FOUND = "record_not_found"
    UNIQUE_VIOLATION = "unique_violation"
    CONSTRAINT_VIOLATION = "constraint_violation"
    VALIDATION_FAILED = "validation_failed"


class CandidateVaultError(Exception):
    """Base application exception."""


class RepositoryError(CandidateVaultError):
    """Raised when repository data access fails.

    ``code`` is ``None`` for failures the storage layer does not classify.
    """

    code: StorageErrorCode | None = None

    def __init__(
        self,
        message: str,
        *,
        code: StorageErrorCode | None = None,
        meta: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.meta: dict[str, Any] = dict(meta or {})


class StorageConnectionError(RepositoryError):
    """Raised when the database server cannot be reached."""

    code = StorageErrorCode.CONNECTION_FAILED


class RecordNotFoundError(RepositoryError):
    """Raised when an update targets a row that does not exist."""

    code = StorageErrorCode.RECORD_NOT_FOUND


class DuplicateError(RepositoryError):
    """Raised when a duplicate record violates a unique constraint."""

    code = StorageErrorCode.UNIQUE_VIOLATION


class ConstraintViolationError(RepositoryError):
    """Raised when a write violates a non-unique database constraint."""

    code = StorageErrorCode.CONSTRAINT_VIOLATION


class StorageValidationError(RepositoryError):
    """Raised when a write payload is rejected before reaching the database."""

    code = StorageErrorCode.VALIDATION_FAILED


class DatabaseUnavailableError(CandidateVaultError):
    """Caller-facing error for an unreachable database."""

    def __init__(self, message: str = DATABASE_UNAVAILABLE_MESSAGE) -> None:
        super().__init__(message)


class NotFoundError(CandidateVaultError):
    """Raised when a requested resource does not exist."""


class CandidateNotFoundError(NotFoundError):
    """Caller-facing error for an update against a missing candidate."""

    def __init__(self, message: str = CANDIDATE_NOT_FOUND_MESSAGE) -> None:
        super().__init__(message)


__all__ = [
    "CANDIDATE_NOT_FOUND_MESSAGE",
    "DATABASE_UNAVAILABLE_MESSAGE",
    "CandidateNotFoundError",
    "CandidateVaultError",
    "ConstraintViolationError",
    "DatabaseUnavailableError",
    "DuplicateError",
    "NotFoundError",
    "RecordNotFoundError",
    "RepositoryError",
    "StorageConnectionError",
    "StorageErrorCode",
    "StorageValidationError",
]
