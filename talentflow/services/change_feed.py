"""
In-process change notifications with refresh-on-change collections.

A ``ChangeFeed`` fans out "table X changed" events to subscribers. A
``LiveCollection`` reacts to such an event by re-running its read query
and replacing its cached rows wholesale; no incremental diffing is done.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[Dict[str, Any]], Union[None, Awaitable[None]]]
RowFilter = Dict[str, Any]

CANDIDATES_TABLE = "candidates"
ACTIVITIES_TABLE = "candidate_activities"
JOBS_TABLE = "jobs"


def _matches(row: Dict[str, Any], row_filter: Optional[RowFilter]) -> bool:
    if not row_filter:
        return True
    return all(str(row.get(key)) == str(value) for key, value in row_filter.items())


@dataclass
class Subscription:
    table: str
    callback: ChangeCallback
    row_filter: Optional[RowFilter] = None
    feed: Optional["ChangeFeed"] = field(default=None, repr=False)

    def close(self) -> None:
        if self.feed is not None:
            self.feed.unsubscribe(self)
            self.feed = None


class ChangeFeed:
    """Table-keyed publish/subscribe hub."""

    def __init__(self) -> None:
        self._subscriptions: Dict[str, List[Subscription]] = {}

    def subscribe(
        self,
        table: str,
        callback: ChangeCallback,
        row_filter: Optional[RowFilter] = None,
    ) -> Subscription:
        subscription = Subscription(table=table, callback=callback, row_filter=row_filter, feed=self)
        self._subscriptions.setdefault(table, []).append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subs = self._subscriptions.get(subscription.table, [])
        if subscription in subs:
            subs.remove(subscription)

    def subscriber_count(self, table: str) -> int:
        return len(self._subscriptions.get(table, []))

    async def publish(self, table: str, row: Optional[Dict[str, Any]] = None) -> int:
        """Notify matching subscribers; returns how many were called."""
        row = row or {}
        delivered = 0
        for subscription in list(self._subscriptions.get(table, [])):
            if not _matches(row, subscription.row_filter):
                continue
            try:
                result = subscription.callback(row)
                if inspect.isawaitable(result):
                    await result
            except Exception:  # noqa: BLE001
                logger.exception("Change subscriber for %s failed", table)
            delivered += 1
        return delivered


class LiveCollection:
    """Cached result of a read query that re-fetches whenever its table changes."""

    def __init__(self, fetch: Callable[[], Awaitable[List[Any]]]):
        self._fetch = fetch
        self._lock = asyncio.Lock()
        self.rows: List[Any] = []
        self.refresh_count = 0
        self._subscription: Optional[Subscription] = None

    async def refresh(self) -> List[Any]:
        async with self._lock:
            self.rows = list(await self._fetch())
            self.refresh_count += 1
            return self.rows

    def bind(self, feed: ChangeFeed, table: str, row_filter: Optional[RowFilter] = None) -> Subscription:
        async def _on_change(_row: Dict[str, Any]) -> None:
            await self.refresh()

        self.close()
        self._subscription = feed.subscribe(table, _on_change, row_filter)
        return self._subscription

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None


# Process-wide feed used by the API; services receive it explicitly.
default_feed = ChangeFeed()
