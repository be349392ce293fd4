"""Persistence operation for candidates and their nested collections."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from loguru import logger

from candidate_vault.core.exceptions import (
    CandidateNotFoundError,
    DatabaseUnavailableError,
    RepositoryError,
    StorageErrorCode,
)
from candidate_vault.core.metrics import increment_candidates_saved
from candidate_vault.schemas.candidate import (
    NESTED_CREATE_KEY,
    Candidate,
    CandidateRecord,
    FormEntry,
)


# Entity collection attribute -> storage relation name.
CANDIDATE_RELATIONS: dict[str, str] = {
    "education": "educations",
    "work_experience": "work_experiences",
    "resumes": "resumes",
}


class CandidateStore(Protocol):
    """Storage-write interface the persistence operation depends on."""

    async def insert(self, payload: dict[str, Any]) -> CandidateRecord: ...

    async def update_by_id(
        self, candidate_id: int, payload: dict[str, Any]
    ) -> CandidateRecord: ...


def build_nested_create(
    entries: Sequence[FormEntry],
) -> dict[str, list[dict[str, Any]]] | None:
    """Map one child collection to a nested-create directive.

    Args:
        entries: Ordered child entries of a single relation.

    Returns:
        ``{"create": [...]}`` with one field mapping per entry, in order, or
        ``None`` when there is nothing to create.
    """
    if not entries:
        return None
    return {NESTED_CREATE_KEY: [entry.to_fields() for entry in entries]}


def build_candidate_payload(candidate: Candidate) -> dict[str, Any]:
    """Build the sparse write payload for a candidate.

    Scalars are included only when they were supplied on the entity, so an
    omitted ``phone`` never becomes a ``NULL`` write. Empty collections are
    left out entirely.

    Args:
        candidate: Entity to persist.

    Returns:
        Payload accepted by ``CandidateStore.insert`` and ``update_by_id``.
    """
    payload: dict[str, Any] = candidate.provided_scalars()
    for attribute, relation in CANDIDATE_RELATIONS.items():
        nested = build_nested_create(getattr(candidate, attribute))
        if nested is not None:
            payload[relation] = nested
    return payload


class CandidateService:
    """Routes candidate saves to the store and normalizes storage failures."""

    def __init__(self, store: CandidateStore):
        """Initialize CandidateService.

        Args:
            store: Storage implementation used for candidate writes.
        """
        self.store = store

    async def save(self, candidate: Candidate) -> CandidateRecord:
        """Insert a new candidate or update an existing one.

        Args:
            candidate: Entity to persist. ``candidate.id`` selects the path:
                ``None`` inserts, anything else updates that row.

        Returns:
            The stored record exactly as returned by the store.

        Raises:
            DatabaseUnavailableError: If the database server cannot be reached.
            CandidateNotFoundError: If the candidate to update does not exist.
            RepositoryError: Any other storage failure, unchanged.
        """
        operation = "update" if candidate.is_persisted else "insert"
        log = logger.bind(
            service=self.__class__.__name__,
            operation=operation,
            candidate_id=candidate.id if candidate.id is not None else "-",
        )
        payload = build_candidate_payload(candidate)
        log.bind(
            fields=sorted(k for k in payload if k not in CANDIDATE_RELATIONS.values()),
            relations=sorted(k for k in payload if k in CANDIDATE_RELATIONS.values()),
        ).info("Saving candidate")

        try:
            if candidate.id is None:
                record = await self.store.insert(payload)
            else:
                record = await self.store.update_by_id(candidate.id, payload)
        except RepositoryError as exc:
            self._normalize_storage_error(exc, operation=operation)
            log.bind(error=str(exc), code=exc.code).warning(
                "Storage error passed through to caller"
            )
            raise

        try:
            increment_candidates_saved(operation=operation)
        except ValueError as exc:
            log.bind(error=str(exc)).warning("Skipped candidates_saved_total metric")

        log.bind(candidate_id=getattr(record, "id", "-")).info("Saved candidate")
        return record

    def _normalize_storage_error(self, exc: RepositoryError, operation: str) -> None:
        """Raise the caller-facing error for the two normalized storage failures.

        Returns without raising for every other code so the caller re-raises
        the original exception.

        Args:
            exc: Storage error raised by the store.
            operation: ``"insert"`` or ``"update"``.

        Raises:
            DatabaseUnavailableError: For ``connection_failed``.
            CandidateNotFoundError: For ``record_not_found`` on update.
        """
        log = logger.bind(
            service=self.__class__.__name__, operation=operation, code=exc.code
        )
        if exc.code == StorageErrorCode.CONNECTION_FAILED:
            log.bind(error=str(exc)).error("Database unreachable while saving candidate")
            raise DatabaseUnavailableError() from exc
        if exc.code == StorageErrorCode.RECORD_NOT_FOUND and operation == "update":
            log.warning("Candidate not found for update")
            raise CandidateNotFoundError() from exc


__all__ = [
    "CANDIDATE_RELATIONS",
    "CandidateService",
    "CandidateStore",
    "build_candidate_payload",
    "build_nested_create",
]
