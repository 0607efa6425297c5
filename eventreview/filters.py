"""
Filtering over a fetched collection of events.

Rules:
- search is a case-insensitive substring match on event name OR organization name
  (an empty search matches everything; surrounding whitespace is kept)
- tags use OR semantics: an event matches if it carries at least one selected tag
  (no selected tags matches everything)
- input order is preserved and inputs are never mutated
"""

from __future__ import annotations

from typing import Iterable, Sequence

from eventreview.model import Event


def _matches_search(event: Event, needle: str) -> bool:
    if not needle:
        return True
    return needle in event.event_name.lower() or needle in event.organization_name.lower()


def _matches_tags(event: Event, selected: set[str]) -> bool:
    if not selected:
        return True
    return any(tag in selected for tag in event.tags)


def filter_events(events: Sequence[Event], search: str = "", selected_tags: Iterable[str] = ()) -> list[Event]:
    """
    Return the events matching both the search text and the selected tags.
    """
    needle = (search or "").lower()
    selected = set(selected_tags)
    return [ev for ev in events if _matches_search(ev, needle) and _matches_tags(ev, selected)]


def available_tags(events: Iterable[Event]) -> list[str]:
    """
    Tag vocabulary of one collection: every tag once, in first-seen order.
    """
    seen: dict[str, None] = {}
    for ev in events:
        for tag in ev.tags:
            seen.setdefault(tag, None)
    return list(seen)


def toggle_tag(selected: Sequence[str], tag: str) -> list[str]:
    """
    Return a new selection with `tag` removed if it was selected, appended otherwise.
    """
    if tag in selected:
        return [t for t in selected if t != tag]
    return [*selected, tag]
