"""Candidate ORM models and their child collections."""

from __future__ import annotations

from datetime import date

from sqlalchemy import Date, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from candidate_vault.models.base import BaseModel


class CandidateModel(BaseModel):
    """A candidate applying through the recruitment form."""

    __tablename__ = "candidates"
    __table_args__ = (UniqueConstraint("email", name="uq_candidates_email"),)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    educations: Mapped[list[EducationModel]] = relationship(
        back_populates="candidate",
        cascade="all, delete-orphan",
        order_by="EducationModel.id",
    )
    work_experiences: Mapped[list[WorkExperienceModel]] = relationship(
        back_populates="candidate",
        cascade="all, delete-orphan",
        order_by="WorkExperienceModel.id",
    )
    resumes: Mapped[list[ResumeModel]] = relationship(
        back_populates="candidate",
        cascade="all, delete-orphan",
        order_by="ResumeModel.id",
    )


class EducationModel(BaseModel):
    """One education entry of a candidate."""

    __tablename__ = "educations"

    candidate_id: Mapped[int] = mapped_column(
        ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    institution: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str] = mapped_column(String(250), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    candidate: Mapped[CandidateModel] = relationship(back_populates="educations")


class WorkExperienceModel(BaseModel):
    """One work-experience entry of a candidate."""

    __tablename__ = "work_experiences"

    candidate_id: Mapped[int] = mapped_column(
        ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    company: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    candidate: Mapped[CandidateModel] = relationship(back_populates="work_experiences")


class ResumeModel(BaseModel):
    """An uploaded resume file attached to a candidate."""

    __tablename__ = "resumes"

    candidate_id: Mapped[int] = mapped_column(
        ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_type: Mapped[str] = mapped_column(String(100), nullable=False)

    candidate: Mapped[CandidateModel] = relationship(back_populates="resumes")
