from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any, Dict, List, Optional

import feedparser
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import (
    HTTP_TIMEOUT,
    REQUEST_HEADERS,
    RETRY_ATTEMPTS,
    RETRY_BACKOFF,
    RETRY_STATUSES,
    SOURCES_PATH,
)
from .base import Channel, ChannelError, SourceNotFoundError

logger = logging.getLogger("feeds")

COUNT_TYPES = ("starred", "unread")


class LocalChannel(Channel):
    """Channel that keeps subscriptions in a JSON file and polls their feeds over HTTP."""

    def __init__(self, path: str = SOURCES_PATH, session: Optional[requests.Session] = None):
        self.path = path
        self.session = session or self._create_session()
        self._lock = asyncio.Lock()

    def _create_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update(REQUEST_HEADERS)
        retries = Retry(
            total=RETRY_ATTEMPTS,
            backoff_factor=RETRY_BACKOFF,
            status_forcelist=RETRY_STATUSES,
        )
        adapter = HTTPAdapter(max_retries=retries)
        s.mount("https://", adapter)
        s.mount("http://", adapter)
        return s

    def _fetch_feed(self, url: str) -> feedparser.FeedParserDict:
        logger.debug("Fetching %s", url)
        resp = self.session.get(url, timeout=HTTP_TIMEOUT)
        resp.raise_for_status()
        return feedparser.parse(resp.content)

    # --- Persistence ---
    def _load(self) -> Dict[str, Any]:
        empty: Dict[str, Any] = {"next_id": 1, "sources": []}
        if not os.path.exists(self.path):
            return empty
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (IOError, json.JSONDecodeError) as e:
            logger.warning("Failed to read sources file %s: %s", self.path, e)
            return empty
        data.setdefault("next_id", 1)
        data.setdefault("sources", [])
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(data, f, indent=2)
        except (IOError, OSError) as e:
            raise ChannelError(f"Failed to write {self.path}: {e}") from e

    @staticmethod
    def _find(data: Dict[str, Any], source_id: int) -> Dict[str, Any]:
        for source in data["sources"]:
            if source["id"] == source_id:
                return source
        raise SourceNotFoundError(source_id)

    # --- Channel API ---
    # Every read-modify-write of the file holds self._lock; fetches run outside it.
    async def get_source_list(self, count_type: str) -> List[Dict[str, Any]]:
        if count_type not in COUNT_TYPES:
            raise ValueError(f"Unknown count type: {count_type}")
        async with self._lock:
            data = self._load()
        return [_to_record(s, count_type) for s in data["sources"]]

    async def remove_source_by_id(self, source_id: int) -> None:
        async with self._lock:
            data = self._load()
            data["sources"].remove(self._find(data, source_id))
            self._save(data)
        logger.info("Removed source %s", source_id)

    async def update_source_name_by_id(self, source_id: int, name: str) -> None:
        async with self._lock:
            data = self._load()
            self._find(data, source_id)["name"] = name
            self._save(data)
        logger.info("Renamed source %s to %r", source_id, name)

    async def mark_source_read(self, source_id: int) -> None:
        async with self._lock:
            data = self._load()
            for entry in self._find(data, source_id).get("entries", []):
                entry["read"] = True
            self._save(data)

    async def add_source(self, link: str) -> Dict[str, Any]:
        async with self._lock:
            self._ensure_not_subscribed(self._load(), link)
        try:
            feed = await asyncio.to_thread(self._fetch_feed, link)
        except requests.RequestException as e:
            raise ChannelError(f"Failed to fetch {link}: {e}") from e

        info = feed.get("feed", {})
        async with self._lock:
            data = self._load()
            # Another add may have finished while the feed was downloading.
            self._ensure_not_subscribed(data, link)
            source = {
                "id": data["next_id"],
                "name": info.get("title") or link,
                "link": link,
                "icon": _feed_icon(info),
                "entries": [],
            }
            _merge_entries(source, feed)
            data["next_id"] += 1
            data["sources"].append(source)
            self._save(data)
        logger.info("Added source %s (%s)", source["id"], link)
        return _to_record(source, "unread")

    async def sync(self) -> None:
        async with self._lock:
            links = [(s["id"], s["link"]) for s in self._load()["sources"]]

        feeds: Dict[int, feedparser.FeedParserDict] = {}
        for source_id, link in links:
            try:
                feeds[source_id] = await asyncio.to_thread(self._fetch_feed, link)
            except requests.RequestException as e:
                logger.warning("Failed to sync %s: %s", link, e)

        async with self._lock:
            data = self._load()
            for source in data["sources"]:
                feed = feeds.get(source["id"])
                if feed is None:
                    continue
                added = _merge_entries(source, feed)
                if not source.get("icon"):
                    source["icon"] = _feed_icon(feed.get("feed", {}))
                logger.debug("Synced %s: %d new entries", source["link"], added)
            self._save(data)

    @staticmethod
    def _ensure_not_subscribed(data: Dict[str, Any], link: str) -> None:
        if any(s["link"] == link for s in data["sources"]):
            raise ChannelError(f"Already subscribed to {link}")


def _count(source: Dict[str, Any], count_type: str) -> int:
    entries = source.get("entries", [])
    if count_type == "starred":
        return sum(1 for e in entries if e.get("starred"))
    return sum(1 for e in entries if not e.get("read"))


def _to_record(source: Dict[str, Any], count_type: str) -> Dict[str, Any]:
    return {
        "id": source["id"],
        "name": source["name"],
        "link": source["link"],
        "count": _count(source, count_type),
        "icon": source.get("icon"),
    }


def _feed_icon(info: Dict[str, Any]) -> Optional[str]:
    image = info.get("image") or {}
    return image.get("href") or info.get("icon")


def _merge_entries(source: Dict[str, Any], feed: feedparser.FeedParserDict) -> int:
    """Append entries not seen before, keeping read/starred flags of known ones."""
    entries = source.setdefault("entries", [])
    known = {e["guid"] for e in entries}
    added = 0
    for entry in feed.entries:
        guid = entry.get("id") or entry.get("link")
        if not guid or guid in known:
            continue
        entries.append(
            {
                "guid": guid,
                "title": entry.get("title", ""),
                "link": entry.get("link", ""),
                "read": False,
                "starred": False,
            }
        )
        known.add(guid)
        added += 1
    return added
