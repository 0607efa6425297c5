"""
Small formatting helpers shared by the CLI and the interactive UI.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from eventreview.model import APPROVED, DECLINED, Event


def _parse_iso(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None


def format_datetime(value: str) -> str:
    """
    'YYYY-MM-DDTHH:MM:SS' -> 'dd/mm/YYYY HH:MM'. Unparsable values are returned as-is.
    """
    dt = _parse_iso(value)
    if dt is None:
        return value
    return dt.strftime("%d/%m/%Y %H:%M")


def datetime_input_value(value: str) -> str:
    """Minute-granular form shown when editing a datetime ('YYYY-MM-DDTHH:MM')."""
    return value[:16]


def tag_summary(tags: Sequence[str], limit: int = 3) -> str:
    """
    Show the first `limit` tags, then '+N' for the rest.
    """
    if not tags:
        return ""
    shown = list(tags[:limit])
    extra = len(tags) - len(shown)
    if extra > 0:
        shown.append(f"+{extra}")
    return " ".join(shown)


def status_label(status: str) -> str:
    if status == APPROVED:
        return "Approved"
    if status == DECLINED:
        return "Declined"
    return "Pending"


def event_line(ev: Event) -> str:
    where = "Online" if ev.online else (ev.address.strip() or "")
    bits = [
        f"#{ev.id}",
        format_datetime(ev.start_datetime),
        ev.event_name.strip() or "(no name)",
        ev.organization_name.strip(),
        where,
        tag_summary(ev.tags),
    ]
    return " | ".join([b for b in bits if b])
