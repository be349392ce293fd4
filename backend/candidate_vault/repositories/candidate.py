"""Data access repository for Candidate entities and their child rows."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from candidate_vault.core.exceptions import (
    ConstraintViolationError,
    DuplicateError,
    RecordNotFoundError,
    RepositoryError,
    StorageConnectionError,
    StorageValidationError,
)
from candidate_vault.core.metrics import db_query_timer
from candidate_vault.models.base import BaseModel
from candidate_vault.models.candidate import (
    CandidateModel,
    EducationModel,
    ResumeModel,
    WorkExperienceModel,
)
from candidate_vault.repositories.base import (
    PROTECTED_FIELDS,
    BaseRepository,
    required_columns,
    writable_columns,
)
from candidate_vault.schemas.candidate import NESTED_CREATE_KEY, CandidateRecord


CHILD_MODELS: dict[str, type[BaseModel]] = {
    "educations": EducationModel,
    "work_experiences": WorkExperienceModel,
    "resumes": ResumeModel,
}
UNIQUE_FIELDS: tuple[str, ...] = ("email",)
CONNECTION_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError, OSError)

CONNECTION_FAILED_MESSAGE = "Can't reach database server."
RECORD_TO_UPDATE_NOT_FOUND_MESSAGE = "Record to update not found."


def unique_constraint_message(target: list[str]) -> str:
    """Format the message reported for a unique constraint violation."""
    fields = ", ".join(f"`{name}`" for name in target)
    return f"Unique constraint failed on the fields: ({fields})"


class CandidateRepository(BaseRepository[CandidateModel]):
    """Executes candidate write payloads, including nested child creates.

    Payload shape::

        {
            "first_name": "John",
            "educations": {"create": [{"institution": "...", ...}]},
        }
    """

    def __init__(self, db: AsyncSession):
        """Initialize CandidateRepository.

        Args:
            db: Active asynchronous SQLAlchemy session.
        """
        super().__init__(db=db, model_type=CandidateModel)
        self._column_names = writable_columns(CandidateModel.__table__)
        self._required_columns = required_columns(CandidateModel.__table__)

    async def get_by_id(self, candidate_id: int) -> CandidateModel | None:
        """Fetch a single candidate with all child collections loaded.

        Args:
            candidate_id: Candidate primary key.

        Returns:
            The matching candidate when found, otherwise ``None``.

        Raises:
            RepositoryError: If the database query fails.
        """
        log = logger.bind(repository=self.__class__.__name__, candidate_id=candidate_id)
        log.debug("Fetching candidate by id")

        try:
            with db_query_timer("select"):
                result = await self.db.execute(
                    select(CandidateModel)
                    .where(CandidateModel.id == candidate_id)
                    .options(
                        selectinload(CandidateModel.educations),
                        selectinload(CandidateModel.work_experiences),
                        selectinload(CandidateModel.resumes),
                    )
                    .execution_options(populate_existing=True)
                )
            candidate = result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as exc:
            log.bind(error=str(exc)).error("Failed to fetch candidate by id")
            raise self._translate_error(exc, "fetch") from exc

        log.bind(found=candidate is not None).debug("Fetched candidate by id")
        return candidate

    async def insert(self, payload: Mapping[str, Any]) -> CandidateRecord:
        """Create a candidate and every nested child row in one transaction.

        Args:
            payload: Scalar columns plus optional nested-create blocks.

        Returns:
            The stored candidate record.

        Raises:
            StorageValidationError: If the payload is malformed or incomplete.
            DuplicateError: If the email is already registered.
            ConstraintViolationError: If another constraint fails.
            StorageConnectionError: If the database cannot be reached.
            RepositoryError: If the write fails for any other reason.
        """
        log = logger.bind(repository=self.__class__.__name__, operation="insert")
        log.info("Inserting candidate")

        scalars, children = self._split_payload(payload)
        missing = sorted(self._required_columns - scalars.keys())
        if missing:
            log.bind(missing=missing).warning("Rejected candidate insert payload")
            raise StorageValidationError(
                f"Missing required field: {missing[0]}", meta={"missing": missing}
            )

        candidate = CandidateModel(**scalars)
        for relation, rows in children.items():
            getattr(candidate, relation).extend(rows)

        try:
            self.db.add(candidate)
            with db_query_timer("insert"):
                await self.db.flush()
            # Read before commit; the session may expire attributes on commit.
            candidate_id = candidate.id
            await self._commit("insert")
        except (SQLAlchemyError, OSError) as exc:
            await self._rollback_safely()
            log.bind(error=str(exc)).error("Database error during candidate insert")
            raise self._translate_error(exc, "insert") from exc

        record = await self._load_record(candidate_id)
        log.bind(candidate_id=record.id).info("Inserted candidate")
        return record

    async def update_by_id(
        self, candidate_id: int, payload: Mapping[str, Any]
    ) -> CandidateRecord:
        """Update a candidate's scalars and append nested child rows.

        Existing child rows are kept; each nested-create block adds new rows.

        Args:
            candidate_id: Existing candidate primary key.
            payload: Scalar columns to overwrite plus optional nested-create
                blocks.

        Returns:
            The updated candidate record.

        Raises:
            RecordNotFoundError: If no candidate has ``candidate_id``.
            StorageValidationError: If the payload is malformed.
            DuplicateError: If the new email is already registered.
            ConstraintViolationError: If another constraint fails.
            StorageConnectionError: If the database cannot be reached.
            RepositoryError: If the write fails for any other reason.
        """
        log = logger.bind(
            repository=self.__class__.__name__,
            operation="update",
            candidate_id=candidate_id,
        )
        log.info("Updating candidate")

        scalars, children = self._split_payload(payload)

        candidate = await self.get_by_id(candidate_id)
        if candidate is None:
            log.info("Candidate not found for update")
            raise RecordNotFoundError(
                RECORD_TO_UPDATE_NOT_FOUND_MESSAGE,
                meta={"candidate_id": candidate_id},
            )

        for field, value in scalars.items():
            setattr(candidate, field, value)
        for relation, rows in children.items():
            getattr(candidate, relation).extend(rows)

        try:
            await self._commit("update")
        except (SQLAlchemyError, OSError) as exc:
            await self._rollback_safely()
            log.bind(error=str(exc)).error("Database error during candidate update")
            raise self._translate_error(exc, "update") from exc

        record = await self._load_record(candidate_id)
        log.info("Updated candidate")
        return record

    async def _load_record(self, candidate_id: int) -> CandidateRecord:
        """Reload a just-written candidate and serialize it."""
        candidate = await self.get_by_id(candidate_id)
        if candidate is None:
            raise RecordNotFoundError(
                f"Candidate {candidate_id} disappeared after write.",
                meta={"candidate_id": candidate_id},
            )
        return CandidateRecord.model_validate(candidate)

    def _split_payload(
        self, payload: Mapping[str, Any]
    ) -> tuple[dict[str, Any], dict[str, list[BaseModel]]]:
        """Separate scalar columns from nested-create blocks.

        Args:
            payload: Raw write payload.

        Returns:
            Scalar column values and, per relation, the child rows to create.

        Raises:
            StorageValidationError: If a key or nested block is not accepted.
        """
        scalars: dict[str, Any] = {}
        children: dict[str, list[BaseModel]] = {}

        for field, value in payload.items():
            if field in CHILD_MODELS:
                children[field] = self._build_children(field, value)
            elif field in PROTECTED_FIELDS:
                raise StorageValidationError(
                    f"Cannot set protected field: {field}", meta={"field": field}
                )
            elif field.startswith("_") or field not in self._column_names:
                raise StorageValidationError(
                    f"Unknown or unsafe field: {field}", meta={"field": field}
                )
            else:
                scalars[field] = value

        return scalars, children

    @staticmethod
    def _build_children(relation: str, block: Any) -> list[BaseModel]:
        """Build child ORM rows from one nested-create block.

        Raises:
            StorageValidationError: If the block or one of its items is invalid.
        """
        if not isinstance(block, Mapping) or set(block) != {NESTED_CREATE_KEY}:
            raise StorageValidationError(
                f"Relation {relation} only accepts a '{NESTED_CREATE_KEY}' block.",
                meta={"field": relation},
            )

        items = block[NESTED_CREATE_KEY]
        if not isinstance(items, list):
            raise StorageValidationError(
                f"Relation {relation} expects a list under '{NESTED_CREATE_KEY}'.",
                meta={"field": relation},
            )

        model_type = CHILD_MODELS[relation]
        allowed = writable_columns(model_type.__table__)
        required = required_columns(model_type.__table__)
        rows: list[BaseModel] = []
        for index, item in enumerate(items):
            if not isinstance(item, Mapping):
                raise StorageValidationError(
                    f"Item {relation}[{index}] must be a mapping of fields.",
                    meta={"field": relation, "index": index},
                )
            unknown = sorted(set(item) - allowed)
            if unknown:
                raise StorageValidationError(
                    f"Unknown field on {relation}[{index}]: {unknown[0]}",
                    meta={"field": relation, "index": index, "unknown": unknown},
                )
            missing = sorted(required - set(item))
            if missing:
                raise StorageValidationError(
                    f"Missing required field: {relation}[{index}].{missing[0]}",
                    meta={"field": relation, "index": index, "missing": missing},
                )
            rows.append(model_type(**item))
        return rows

    @staticmethod
    def _translate_error(exc: BaseException, operation: str) -> RepositoryError:
        """Map an engine or driver failure to the storage error taxonomy.

        Args:
            exc: Exception raised by SQLAlchemy or the driver.
            operation: Operation name used in the fallback message.

        Returns:
            Repository error carrying the matching ``StorageErrorCode``.

        Note:
            Constraint detection relies on PostgreSQL and SQLite message text.
        """
        if isinstance(exc, IntegrityError):
            error_text = (
                str(exc.orig).lower() if exc.orig is not None else str(exc).lower()
            )
            if "unique constraint" in error_text or "duplicate key" in error_text:
                target = [name for name in UNIQUE_FIELDS if name in error_text]
                return DuplicateError(
                    unique_constraint_message(target), meta={"target": target}
                )
            return ConstraintViolationError(
                f"Constraint violation during candidate {operation}.",
                meta={"detail": str(exc.orig if exc.orig is not None else exc)},
            )

        if isinstance(exc, CONNECTION_ERRORS) or (
            isinstance(exc, DBAPIError) and exc.connection_invalidated
        ):
            return StorageConnectionError(
                CONNECTION_FAILED_MESSAGE, meta={"detail": str(exc)}
            )

        return RepositoryError(f"Failed to {operation} candidate.")


__all__ = ["CHILD_MODELS", "CandidateRepository", "unique_constraint_message"]
