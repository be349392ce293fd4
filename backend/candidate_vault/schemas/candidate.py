"""Candidate entity built from form data, and the stored record schemas.

The entity side (``Candidate`` and its entries) shapes raw form data without
validating it. Which fields were actually supplied is tracked through
pydantic's ``model_fields_set`` so that absent fields can be told apart from
fields explicitly set to ``None``. The record side (``CandidateRecord``)
mirrors what the storage layer returns after a write.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field

EntryT = TypeVar("EntryT", bound="FormEntry")

# Directive key wrapping the rows of a nested child create.
NESTED_CREATE_KEY = "create"

CANDIDATE_SCALAR_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "address",
)


class FormEntry(BaseModel):
    """Unvalidated, immutable view over one form section."""

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_form(cls: type[EntryT], data: Mapping[str, Any] | EntryT) -> EntryT:
        """Copy the known keys of ``data`` verbatim into a new entry.

        Args:
            data: Raw mapping from the form, or an existing entry.

        Returns:
            Entry whose ``model_fields_set`` names exactly the copied keys.
        """
        if isinstance(data, cls):
            return data
        provided = {name: data[name] for name in cls.model_fields if name in data}
        return cls.model_construct(_fields_set=set(provided), **provided)

    def to_fields(self) -> dict[str, Any]:
        """Return the supplied fields with their raw values."""
        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if name in self.model_fields_set
        }


class EducationEntry(FormEntry):
    institution: str | None = None
    title: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class WorkExperienceEntry(FormEntry):
    company: str | None = None
    position: str | None = None
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class ResumeEntry(FormEntry):
    file_path: str | None = None
    file_type: str | None = None


def _entries(entry_type: type[EntryT], items: Iterable[Any] | None) -> list[EntryT]:
    return [entry_type.from_form(item) for item in items or ()]


class Candidate(FormEntry):
    """In-memory candidate with its education, work and resume collections.

    ``first_name``, ``last_name`` and ``email`` are required by the store but
    not enforced here; a candidate missing them is only rejected on save.
    """

    id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    education: list[EducationEntry] = Field(default_factory=list)
    work_experience: list[WorkExperienceEntry] = Field(default_factory=list)
    resumes: list[ResumeEntry] = Field(default_factory=list)

    @classmethod
    def from_form(cls, data: Mapping[str, Any] | Candidate) -> Candidate:
        """Shape a candidate from a form field bag.

        Args:
            data: Raw field mapping; unknown keys are ignored.

        Returns:
            Candidate with scalars copied verbatim when present and every
            collection defaulted to an empty list.
        """
        if isinstance(data, cls):
            return data

        provided: dict[str, Any] = {
            name: data[name]
            for name in ("id", *CANDIDATE_SCALAR_FIELDS)
            if name in data
        }
        collections = {
            "education": _entries(EducationEntry, data.get("education")),
            "work_experience": _entries(WorkExperienceEntry, data.get("work_experience")),
            "resumes": _entries(ResumeEntry, data.get("resumes")),
        }
        return cls.model_construct(
            _fields_set=set(provided) | {k for k in collections if k in data},
            **provided,
            **collections,
        )

    @property
    def is_persisted(self) -> bool:
        """Whether the candidate refers to an existing stored row."""
        return self.id is not None

    def provided_scalars(self) -> dict[str, Any]:
        """Return the scalar columns that were supplied, in column order."""
        return {
            name: getattr(self, name)
            for name in CANDIDATE_SCALAR_FIELDS
            if name in self.model_fields_set
        }


class EducationRecord(BaseModel):
    id: int
    candidate_id: int
    institution: str
    title: str
    start_date: date
    end_date: date | None = None

    model_config = ConfigDict(from_attributes=True)


class WorkExperienceRecord(BaseModel):
    id: int
    candidate_id: int
    company: str
    position: str
    description: str | None = None
    start_date: date
    end_date: date | None = None

    model_config = ConfigDict(from_attributes=True)


class ResumeRecord(BaseModel):
    id: int
    candidate_id: int
    file_path: str
    file_type: str

    model_config = ConfigDict(from_attributes=True)


class CandidateRecord(BaseModel):
    """Schema returned by the store for a persisted candidate."""

    id: int
    created_at: datetime
    updated_at: datetime
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    address: str | None = None
    educations: list[EducationRecord] = Field(default_factory=list)
    work_experiences: list[WorkExperienceRecord] = Field(default_factory=list)
    resumes: list[ResumeRecord] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


__all__ = [
    "CANDIDATE_SCALAR_FIELDS",
    "NESTED_CREATE_KEY",
    "Candidate",
    "CandidateRecord",
    "EducationEntry",
    "EducationRecord",
    "FormEntry",
    "ResumeEntry",
    "ResumeRecord",
    "WorkExperienceEntry",
    "WorkExperienceRecord",
]
