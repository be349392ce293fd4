"""ORM models package exports."""

from candidate_vault.models.base import Base, BaseModel
from candidate_vault.models.candidate import (
    CandidateModel,
    EducationModel,
    ResumeModel,
    WorkExperienceModel,
)

__all__ = [
    "Base",
    "BaseModel",
    "CandidateModel",
    "EducationModel",
    "ResumeModel",
    "WorkExperienceModel",
]
