from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .datamodels import ActiveId, SourceItem, SourceState, initial_state

logger = logging.getLogger("feeds")

Transition = Callable[[SourceState, Any], SourceState]
Listener = Callable[[SourceState], None]


# --- Transitions ---
def _edit_first(
    state: SourceState, source_id: int, edit: Callable[[SourceItem], SourceItem]
) -> SourceState:
    """Apply `edit` to the first source with `source_id`; unknown ids are ignored."""
    for index, item in enumerate(state.sources):
        if item.id == source_id:
            sources = list(state.sources)
            sources[index] = edit(item)
            return replace(state, sources=tuple(sources))
    return state


def load_all(state: SourceState, items: Iterable[SourceItem]) -> SourceState:
    return replace(state, sources=tuple(items))


def create(state: SourceState, item: SourceItem) -> SourceState:
    return replace(state, sources=state.sources + (item,), active_id=item.id)


def set_active_id(state: SourceState, active_id: ActiveId = None) -> SourceState:
    return replace(state, active_id=active_id)


def count_down_one(state: SourceState, source_id: int) -> SourceState:
    # Not clamped: a count may go below zero.
    return _edit_first(state, source_id, lambda s: replace(s, count=s.count - 1))


def count_up_one(state: SourceState, source_id: int) -> SourceState:
    return _edit_first(state, source_id, lambda s: replace(s, count=s.count + 1))


def count_to_zero(state: SourceState, source_id: int) -> SourceState:
    return _edit_first(state, source_id, lambda s: replace(s, count=0))


def set_refreshing(state: SourceState, refreshing: bool) -> SourceState:
    return replace(state, refreshing=refreshing)


def update_name(state: SourceState, payload: Mapping[str, Any]) -> SourceState:
    name = payload["name"]
    return _edit_first(state, payload["id"], lambda s: replace(s, name=name))


def remove_by_id(state: SourceState, source_id: int) -> SourceState:
    """Drop the source with `source_id`. The selection is left alone."""
    remaining = tuple(s for s in state.sources if s.id != source_id)
    if len(remaining) == len(state.sources):
        return state
    return replace(state, sources=remaining)


TRANSITIONS: Dict[str, Transition] = {
    "load_all": load_all,
    "create": create,
    "set_active_id": set_active_id,
    "count_down_one": count_down_one,
    "count_up_one": count_up_one,
    "count_to_zero": count_to_zero,
    "set_refreshing": set_refreshing,
    "update_name": update_name,
    "remove_by_id": remove_by_id,
}


# --- Container ---
class SourceStore:
    """Holds the current source-list snapshot and replaces it on every dispatch."""

    def __init__(self, state: Optional[SourceState] = None):
        self._state = state if state is not None else initial_state()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> SourceState:
        return self._state

    def dispatch(self, name: str, payload: Any = None) -> SourceState:
        """Run the named transition against the current snapshot and store the result."""
        transition = TRANSITIONS.get(name)
        if transition is None:
            raise ValueError(f"Unknown transition: {name}")
        self._state = transition(self._state, payload)
        logger.debug("Dispatched %s(%r)", name, payload)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with each new snapshot. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
