"""Infrastructure layer implementations."""

from efattura.infrastructure import pdf, storage, xml

__all__ = ["pdf", "storage", "xml"]
