from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .datamodels import ActiveId, Mode, SourceItem, SourceState


@dataclass(frozen=True)
class SourceView:
    active_id: ActiveId
    total_count: int
    mode: Mode
    sources: Tuple[SourceItem, ...]


def select_source(state: SourceState, mode: Mode) -> SourceView:
    """Project the source list for rendering under the given view mode.

    `total_count` always covers every source. Outside of `Mode.ALL` the list
    keeps the active source plus any source with a positive count.
    """
    total_count = sum(s.count for s in state.sources)
    active_id = state.active_id

    if mode == Mode.ALL:
        sources = state.sources
    else:
        sources = tuple(
            s for s in state.sources if s.id == active_id or s.count > 0
        )

    return SourceView(
        active_id=active_id,
        total_count=total_count,
        mode=mode,
        sources=sources,
    )
