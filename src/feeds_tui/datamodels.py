from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union


class Mode(str, Enum):
    ALL = "all"
    STARRED = "starred"
    UNREAD = "unread"


class Preset(str, Enum):
    """Virtual selection targets that are not a single source."""

    ALL = "all"


# A source id, a preset, or nothing selected.
ActiveId = Optional[Union[int, Preset]]


# --- Data models ---
@dataclass(frozen=True)
class SourceItem:
    id: int
    name: str
    link: str
    count: int
    icon: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "SourceItem":
        """Build an item from a channel record; a null or missing icon becomes None."""
        icon = record.get("icon")
        return cls(
            id=record["id"],
            name=record["name"],
            link=record["link"],
            count=record["count"],
            icon=None if icon is None else icon,
        )


@dataclass(frozen=True)
class SourceState:
    sources: Tuple[SourceItem, ...] = ()
    active_id: ActiveId = None
    refreshing: bool = False


def initial_state() -> SourceState:
    return SourceState(sources=(), active_id=None, refreshing=False)


def count_type_for(mode: Mode) -> str:
    """Counter kind requested from the channel for a view mode."""
    return "starred" if mode == Mode.STARRED else "unread"
