"""Data access for the embedding jobs feature."""

from .content_repository import ContentRepository, ContentRow
from .queue_repository import QueueRepository

__all__ = ["ContentRepository", "ContentRow", "QueueRepository"]
