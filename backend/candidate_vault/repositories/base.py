"""Shared repository utilities for async SQLAlchemy repositories."""

from __future__ import annotations

from typing import Generic, TypeVar

from loguru import logger
from sqlalchemy import Table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from candidate_vault.core.metrics import db_query_timer
from candidate_vault.models.base import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)

PROTECTED_FIELDS = frozenset({"id", "created_at", "updated_at"})


def writable_columns(table: Table) -> frozenset[str]:
    """Columns a payload may set directly (no keys, no audit timestamps)."""
    return frozenset(
        column.key
        for column in table.columns
        if column.key not in PROTECTED_FIELDS and not column.foreign_keys
    )


def required_columns(table: Table) -> frozenset[str]:
    """Writable columns that must be supplied when a row is created."""
    return frozenset(
        column.key
        for column in table.columns
        if column.key in writable_columns(table)
        and not column.nullable
        and column.default is None
        and column.server_default is None
    )


class BaseRepository(Generic[ModelT]):
    """Base repository with common DB helpers and error handling."""

    def __init__(self, db: AsyncSession, model_type: type[ModelT]):
        """Initialize repository with session and model class.

        Args:
            db: Active asynchronous SQLAlchemy session.
            model_type: ORM model class for this repository.
        """
        self.db = db
        self.model_type = model_type

    async def _commit(self, query_type: str) -> None:
        """Commit the current transaction, timing it under ``query_type``."""
        with db_query_timer(query_type):
            await self.db.commit()

    async def _rollback_safely(self) -> None:
        """Attempt rollback and preserve the original error context."""
        try:
            await self.db.rollback()
        except SQLAlchemyError as exc:
            logger.bind(
                repository=self.__class__.__name__,
                model=self.model_type.__name__,
                error=str(exc),
            ).error("Rollback failed")
