from __future__ import annotations

import logging
from typing import Callable, Union

from .channel.base import Channel
from .datamodels import Mode, SourceItem, count_type_for
from .state import SourceStore

logger = logging.getLogger("feeds")

ModeArg = Union[Mode, Callable[[], Mode]]


async def load_source(store: SourceStore, channel: Channel, mode: Mode) -> None:
    """Reload the source list with counters matching `mode`."""
    store.dispatch("set_refreshing", True)
    count_type = count_type_for(mode)
    records = await channel.get_source_list(count_type)

    items = [SourceItem.from_record(r) for r in records]
    logger.debug("Loaded %d sources (%s counts)", len(items), count_type)

    store.dispatch("load_all", items)
    store.dispatch("set_refreshing", False)


async def async_remove_by_id(store: SourceStore, channel: Channel, source_id: int) -> None:
    await channel.remove_source_by_id(source_id)
    # Clear the selection before the entry disappears from the list.
    store.dispatch("set_active_id", None)
    store.dispatch("remove_by_id", source_id)


async def async_update_name(
    store: SourceStore, channel: Channel, source_id: int, name: str
) -> None:
    await channel.update_source_name_by_id(source_id, name)
    store.dispatch("set_active_id", None)
    store.dispatch("update_name", {"id": source_id, "name": name})


async def sync(store: SourceStore, channel: Channel, mode: ModeArg) -> None:
    """Sync every feed through the channel, then reload the list.

    `mode` may be a callable; it is evaluated once the channel sync has
    finished so the reload uses whatever mode is current at that point.
    """
    store.dispatch("set_refreshing", True)
    await channel.sync()
    current = mode() if callable(mode) else mode
    await load_source(store, channel, current)
    store.dispatch("set_refreshing", False)


async def async_create_source(store: SourceStore, channel: Channel, link: str) -> SourceItem:
    record = await channel.add_source(link)
    item = SourceItem.from_record(record)
    store.dispatch("create", item)
    return item


async def async_mark_source_read(store: SourceStore, channel: Channel, source_id: int) -> None:
    await channel.mark_source_read(source_id)
    store.dispatch("count_to_zero", source_id)
