from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class ChannelError(Exception):
    """Raised when a channel cannot complete a request."""


class SourceNotFoundError(ChannelError):
    def __init__(self, source_id: int):
        super().__init__(f"No source with id {source_id}")
        self.source_id = source_id


class Channel(ABC):
    """Abstract backing store for feed subscriptions."""

    @abstractmethod
    async def get_source_list(self, count_type: str) -> List[Dict[str, Any]]:
        """Return source records counted by `count_type` ("starred" or "unread")."""
        pass

    @abstractmethod
    async def remove_source_by_id(self, source_id: int) -> None:
        """Delete a source."""
        pass

    @abstractmethod
    async def update_source_name_by_id(self, source_id: int, name: str) -> None:
        """Rename a source."""
        pass

    @abstractmethod
    async def sync(self) -> None:
        """Refresh every source from its feed."""
        pass

    @abstractmethod
    async def add_source(self, link: str) -> Dict[str, Any]:
        """Subscribe to the feed at `link` and return its record."""
        pass

    @abstractmethod
    async def mark_source_read(self, source_id: int) -> None:
        """Mark every entry of a source as read."""
        pass
