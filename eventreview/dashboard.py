"""
Dashboard state: the two fetched collections and their filter inputs.

The pending and approved collections are fetched independently and each one
keeps its own search text and tag selection. Membership is whatever the
catalog returned; nothing here decides which list an event belongs to.
Reloading replaces both lists wholesale (no merging with what was there).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from eventreview.filters import available_tags, filter_events, toggle_tag
from eventreview.model import Event
from eventreview.workflow import CATALOG_FAILURES, Notice, ReviewWorkflow, ignore_notice

logger = logging.getLogger(__name__)


class Catalog(Protocol):
    def list_pending(self) -> list[Event]: ...

    def list_approved(self) -> list[Event]: ...

    def set_status(self, event_id: int, decision: str) -> None: ...

    def update_fields(self, event_id: int, patch: dict[str, Any]) -> None: ...

    def delete_event(self, event_id: int) -> None: ...


@dataclass
class CollectionView:
    """Filter inputs for one tab."""

    search: str = ""
    selected_tags: list[str] = field(default_factory=list)

    def toggle(self, tag: str) -> None:
        self.selected_tags = toggle_tag(self.selected_tags, tag)

    def clear(self) -> None:
        self.search = ""
        self.selected_tags = []


class Dashboard:
    def __init__(self, catalog: Catalog, notify: Callable[[Notice], Any] = ignore_notice) -> None:
        self.catalog = catalog
        self.notify = notify
        self.pending: list[Event] = []
        self.approved: list[Event] = []
        self.pending_view = CollectionView()
        self.approved_view = CollectionView()

    def reload(self) -> bool:
        """
        Refetch both collections. On failure the previous lists are kept.
        """
        try:
            pending = self.catalog.list_pending()
            approved = self.catalog.list_approved()
        except CATALOG_FAILURES as e:
            logger.error("Loading events failed: %s", e)
            self.notify(Notice("error", "Error", "Could not load events. Check your connection."))
            return False
        self.pending = pending
        self.approved = approved
        logger.info("Loaded %d pending and %d approved events", len(pending), len(approved))
        return True

    def visible_pending(self) -> list[Event]:
        return filter_events(self.pending, self.pending_view.search, self.pending_view.selected_tags)

    def visible_approved(self) -> list[Event]:
        return filter_events(self.approved, self.approved_view.search, self.approved_view.selected_tags)

    def pending_tags(self) -> list[str]:
        return available_tags(self.pending)

    def approved_tags(self) -> list[str]:
        return available_tags(self.approved)

    def workflow(self) -> ReviewWorkflow:
        return ReviewWorkflow(self.catalog, reload=self.reload, notify=self.notify)
