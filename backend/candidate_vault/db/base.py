"""Database metadata with every ORM model registered."""

from candidate_vault.models import Base  # noqa: F401  registers all tables

__all__ = ["Base"]
