from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


@dataclass
class ChangeEvent:
    """
    A single row-level change on a table. `old` is empty for inserts,
    `new` is empty for deletes.
    """
    table: str
    event_type: str
    new: Dict[str, Any] = field(default_factory=dict)
    old: Dict[str, Any] = field(default_factory=dict)


Listener = Callable[[ChangeEvent], None]


class Subscription:
    """Handle returned by ChangeFeed.subscribe. Call unsubscribe() on teardown."""

    def __init__(self, feed: "ChangeFeed", table: str, listener: Listener, event: str = "*"):
        self.feed = feed
        self.table = table
        self.listener = listener
        self.event = event
        self.active = True

    def matches(self, change: ChangeEvent) -> bool:
        return self.active and self.table == change.table and self.event in ("*", change.event_type)

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self.feed._remove(self)


class ChangeFeed:
    """
    In-process change-notification stream, scoped per table.

    Usage:
      sub = feed.subscribe("products", on_change)
      ...
      sub.unsubscribe()
    """

    def __init__(self):
        self._subscriptions: List[Subscription] = []

    def subscribe(self, table: str, listener: Listener, event: str = "*") -> Subscription:
        sub = Subscription(self, table, listener, event=event)
        self._subscriptions.append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        self._subscriptions = [s for s in self._subscriptions if s is not sub]

    def subscriber_count(self, table: Optional[str] = None) -> int:
        if table is None:
            return len(self._subscriptions)
        return len([s for s in self._subscriptions if s.table == table])

    def publish(self, change: ChangeEvent) -> None:
        # copy: listeners may unsubscribe while we iterate
        for sub in list(self._subscriptions):
            if not sub.matches(change):
                continue
            try:
                sub.listener(change)
            except Exception:
                # the write already happened; log and keep notifying
                logger.exception("Change listener failed for %s %s", change.table, change.event_type)
