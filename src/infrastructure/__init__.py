"""Infrastructure layer implementations."""

from src.infrastructure import broadcast, mail, storage

__all__ = ["storage", "broadcast", "mail"]
