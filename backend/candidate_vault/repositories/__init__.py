"""Repository package exports."""

from candidate_vault.repositories.base import BaseRepository
from candidate_vault.repositories.candidate import CandidateRepository

__all__ = ["BaseRepository", "CandidateRepository"]
