"""Data models for New Papers."""

from new_papers.models.model_pubmed import Author, Publication

__all__ = ["Author", "Publication"]
