"""End-to-end tests for save_candidate over a real session factory."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from candidate_vault.core.exceptions import (
    CANDIDATE_NOT_FOUND_MESSAGE,
    CandidateNotFoundError,
    DuplicateError,
    StorageErrorCode,
)
from candidate_vault.main import save_candidate
from candidate_vault.schemas.candidate import Candidate
from tests.factories import build_candidate_form, build_minimal_candidate_form


@pytest.mark.asyncio
async def test_save_candidate_inserts_then_updates(
    session_maker: async_sessionmaker[AsyncSession],
) -> None:
    form = build_candidate_form()

    created = await save_candidate(Candidate.from_form(form), session_maker)
    updated = await save_candidate(
        Candidate.from_form({"id": created.id, "address": "1 Infinite Loop"}),
        session_maker,
    )

    assert created.first_name == "John"
    assert created.educations[0].institution == "Harvard University"
    assert created.work_experiences[0].description == "Developed web applications"
    assert created.resumes[0].file_type == "application/pdf"
    assert updated.id == created.id
    assert updated.address == "1 Infinite Loop"
    assert updated.phone == form["phone"]
    assert len(updated.educations) == 1


@pytest.mark.asyncio
async def test_save_candidate_minimal_form_reads_back_nulls(
    session_maker: async_sessionmaker[AsyncSession],
) -> None:
    record = await save_candidate(
        Candidate.from_form(build_minimal_candidate_form()), session_maker
    )

    assert record.phone is None
    assert record.address is None
    assert record.educations == []


@pytest.mark.asyncio
async def test_save_candidate_normalizes_missing_update_target(
    session_maker: async_sessionmaker[AsyncSession],
) -> None:
    with pytest.raises(CandidateNotFoundError, match=CANDIDATE_NOT_FOUND_MESSAGE):
        await save_candidate(
            Candidate.from_form(build_candidate_form(id=9999)), session_maker
        )


@pytest.mark.asyncio
async def test_save_candidate_surfaces_duplicate_email(
    session_maker: async_sessionmaker[AsyncSession],
) -> None:
    await save_candidate(Candidate.from_form(build_candidate_form()), session_maker)

    with pytest.raises(DuplicateError, match="Unique constraint") as exc_info:
        await save_candidate(Candidate.from_form(build_candidate_form()), session_maker)

    assert exc_info.value.code == StorageErrorCode.UNIQUE_VIOLATION


@pytest.mark.asyncio
async def test_save_candidate_with_default_session_factory_settings(
    test_engine: AsyncEngine,
) -> None:
    sessions = async_sessionmaker(bind=test_engine, class_=AsyncSession)

    record = await save_candidate(
        Candidate.from_form(build_minimal_candidate_form()), sessions
    )

    assert record.id is not None
    assert record.email == "jane.smith@example.com"
