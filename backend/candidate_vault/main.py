"""Entry point wiring a database session to the candidate persistence operation."""

from __future__ import annotations

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from candidate_vault.core.config import settings
from candidate_vault.core.logging import setup_logging
from candidate_vault.db.session import AsyncSessionLocal
from candidate_vault.repositories.candidate import CandidateRepository
from candidate_vault.schemas.candidate import Candidate, CandidateRecord
from candidate_vault.services.candidate_service import CandidateService

setup_logging(settings.LOG_LEVEL)


async def save_candidate(
    candidate: Candidate,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> CandidateRecord:
    """Persist one candidate using a fresh session.

    Args:
        candidate: Entity to insert or update.
        session_factory: Session factory to use instead of the configured
            ``AsyncSessionLocal``.

    Returns:
        The stored candidate record.
    """
    factory = session_factory or AsyncSessionLocal
    async with factory() as session:
        service = CandidateService(CandidateRepository(session))
        return await service.save(candidate)


logger.info(
    "Candidate persistence configured",
    environment=settings.ENVIRONMENT,
    project=settings.PROJECT_NAME,
)
