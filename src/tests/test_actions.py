from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from feeds_tui.actions import (
    async_create_source,
    async_mark_source_read,
    async_remove_by_id,
    async_update_name,
    load_source,
    sync,
)
from feeds_tui.channel.base import Channel, ChannelError
from feeds_tui.datamodels import Mode, SourceItem, SourceState
from feeds_tui.state import SourceStore

RECORDS = [
    {"id": 1, "name": "Feed 1", "link": "http://feed1.com", "count": 2, "icon": None},
    {"id": 2, "name": "Feed 2", "link": "http://feed2.com", "count": 0, "icon": "http://feed2.com/i.png"},
]


@pytest.fixture
def channel():
    mock = AsyncMock(spec=Channel)
    mock.get_source_list.return_value = RECORDS
    return mock


@pytest.fixture
def store():
    return SourceStore()


@pytest.fixture
def history(store):
    """Every snapshot the store produced, in order."""
    snapshots = []
    store.subscribe(snapshots.append)
    return snapshots


@pytest.mark.asyncio
async def test_load_source_brackets_refresh_and_normalises(store, channel, history):
    await load_source(store, channel, Mode.UNREAD)

    channel.get_source_list.assert_awaited_once_with("unread")
    assert [s.refreshing for s in history] == [True, True, False]
    assert store.state.sources == (
        SourceItem(id=1, name="Feed 1", link="http://feed1.com", count=2, icon=None),
        SourceItem(id=2, name="Feed 2", link="http://feed2.com", count=0, icon="http://feed2.com/i.png"),
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "mode, count_type",
    [(Mode.STARRED, "starred"), (Mode.UNREAD, "unread"), (Mode.ALL, "unread")],
)
async def test_load_source_count_type(store, channel, mode, count_type):
    await load_source(store, channel, mode)
    channel.get_source_list.assert_awaited_once_with(count_type)


@pytest.mark.asyncio
async def test_load_source_missing_icon_becomes_none(store, channel):
    channel.get_source_list.return_value = [
        {"id": 3, "name": "No icon", "link": "http://x", "count": 1}
    ]
    await load_source(store, channel, Mode.ALL)
    assert store.state.sources[0].icon is None


@pytest.mark.asyncio
async def test_load_source_failure_leaves_refreshing_set(store, channel):
    channel.get_source_list.side_effect = ChannelError("offline")
    with pytest.raises(ChannelError):
        await load_source(store, channel, Mode.ALL)
    assert store.state.refreshing is True
    assert store.state.sources == ()


@pytest.mark.asyncio
async def test_remove_clears_active_selection(channel):
    store = SourceStore(
        SourceState(
            sources=(SourceItem(5, "Five", "u5", 1), SourceItem(6, "Six", "u6", 2)),
            active_id=5,
        )
    )
    seen = []
    store.subscribe(seen.append)

    await async_remove_by_id(store, channel, 5)

    channel.remove_source_by_id.assert_awaited_once_with(5)
    assert store.state.active_id is None
    assert [s.id for s in store.state.sources] == [6]
    # Selection is cleared while the entry still exists.
    assert seen[0].active_id is None
    assert [s.id for s in seen[0].sources] == [5, 6]


@pytest.mark.asyncio
async def test_remove_failure_keeps_state(channel):
    store = SourceStore(SourceState(sources=(SourceItem(5, "Five", "u5", 1),), active_id=5))
    channel.remove_source_by_id.side_effect = ChannelError("nope")
    with pytest.raises(ChannelError):
        await async_remove_by_id(store, channel, 5)
    assert store.state.active_id == 5
    assert len(store.state.sources) == 1


@pytest.mark.asyncio
async def test_update_name_clears_selection(channel):
    store = SourceStore(
        SourceState(sources=(SourceItem(1, "Old", "u", 0),), active_id=1)
    )
    await async_update_name(store, channel, 1, "New")

    channel.update_source_name_by_id.assert_awaited_once_with(1, "New")
    assert store.state.sources[0].name == "New"
    assert store.state.active_id is None


@pytest.mark.asyncio
async def test_sync_reads_mode_after_channel_sync(store, channel, history):
    modes = {"current": Mode.ALL}

    async def switch_mode():
        modes["current"] = Mode.STARRED

    channel.sync.side_effect = switch_mode

    await sync(store, channel, lambda: modes["current"])

    channel.sync.assert_awaited_once_with()
    channel.get_source_list.assert_awaited_once_with("starred")
    assert [s.refreshing for s in history] == [True, True, True, False, False]
    assert store.state.refreshing is False
    assert len(store.state.sources) == 2


@pytest.mark.asyncio
async def test_sync_accepts_plain_mode(store, channel):
    await sync(store, channel, Mode.UNREAD)
    channel.get_source_list.assert_awaited_once_with("unread")


@pytest.mark.asyncio
async def test_sync_failure_propagates(store, channel):
    channel.sync.side_effect = ChannelError("down")
    with pytest.raises(ChannelError):
        await sync(store, channel, Mode.ALL)
    channel.get_source_list.assert_not_awaited()
    assert store.state.refreshing is True


@pytest.mark.asyncio
async def test_create_source_appends_and_selects(store, channel):
    channel.add_source.return_value = {
        "id": 9, "name": "X", "link": "u", "count": 0, "icon": None,
    }
    item = await async_create_source(store, channel, "u")

    channel.add_source.assert_awaited_once_with("u")
    assert store.state.sources == (item,)
    assert store.state.active_id == 9


@pytest.mark.asyncio
async def test_mark_source_read_zeroes_count(channel):
    store = SourceStore(SourceState(sources=(SourceItem(1, "A", "u", 7),)))
    await async_mark_source_read(store, channel, 1)
    channel.mark_source_read.assert_awaited_once_with(1)
    assert store.state.sources[0].count == 0
