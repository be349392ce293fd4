"""Candidate persistence core: entity shaping, saving and error normalization."""

__version__ = "0.1.0"
