"""Unit tests for the sparse candidate payload builders."""

from __future__ import annotations

from datetime import date

from candidate_vault.schemas.candidate import Candidate, EducationEntry, ResumeEntry
from candidate_vault.services.candidate_service import (
    build_candidate_payload,
    build_nested_create,
)
from tests.factories import build_candidate_form, build_minimal_candidate_form


def test_build_nested_create_returns_none_for_empty_collection() -> None:
    assert build_nested_create([]) is None


def test_build_nested_create_keeps_order_and_values() -> None:
    entries = [
        ResumeEntry.from_form({"file_path": f"/uploads/{name}", "file_type": "text/plain"})
        for name in ("c.txt", "a.txt", "b.txt")
    ]

    nested = build_nested_create(entries)

    assert nested == {
        "create": [
            {"file_path": "/uploads/c.txt", "file_type": "text/plain"},
            {"file_path": "/uploads/a.txt", "file_type": "text/plain"},
            {"file_path": "/uploads/b.txt", "file_type": "text/plain"},
        ]
    }


def test_build_nested_create_omits_unset_child_fields() -> None:
    entry = EducationEntry.from_form(
        {"institution": "Stanford", "title": "PhD in AI", "start_date": date(2021, 9, 1)}
    )

    nested = build_nested_create([entry])

    assert nested == {
        "create": [
            {"institution": "Stanford", "title": "PhD in AI", "start_date": date(2021, 9, 1)}
        ]
    }


def test_payload_omits_unset_optional_scalars_and_empty_relations() -> None:
    payload = build_candidate_payload(Candidate.from_form(build_minimal_candidate_form()))

    assert payload == {
        "first_name": "Jane",
        "last_name": "Smith",
        "email": "jane.smith@example.com",
    }
    assert "phone" not in payload
    assert "address" not in payload


def test_payload_includes_only_non_empty_relations() -> None:
    form = build_candidate_form(work_experience=[], resumes=None)

    payload = build_candidate_payload(Candidate.from_form(form))

    assert payload["educations"] == {"create": form["education"]}
    assert "work_experiences" not in payload
    assert "resumes" not in payload


def test_payload_skips_missing_required_scalars() -> None:
    payload = build_candidate_payload(Candidate.from_form({"first_name": "Test"}))

    assert payload == {"first_name": "Test"}


def test_payload_never_carries_identity() -> None:
    payload = build_candidate_payload(Candidate.from_form(build_candidate_form(id=42)))

    assert "id" not in payload
