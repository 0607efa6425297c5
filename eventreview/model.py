"""
Central data model definitions used across the project.

This module defines the canonical structure of an Event as the catalog sends it,
so that:
- the catalog client, the filters and the review workflow share the same field names
- the localized content map keeps its mandatory default language at all times
- wire dicts are converted in exactly one place (from_dict / to_dict)
"""

from __future__ import annotations

import copy as _copy
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from eventreview.errors import ValidationGap


REQUESTED = "requested"
APPROVED = "approved"
DECLINED = "declined"
STATUSES = (REQUESTED, APPROVED, DECLINED)

DEFAULT_LANGUAGE = "pt-br"


def _safe_str(x: Any) -> str:
    return "" if x is None else str(x)


@dataclass
class LocalizedContent:
    """
    Per-language display fields of an event.
    """

    banner_link: str = ""
    cost: str = ""
    event_edition: str = ""
    short_description: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "LocalizedContent":
        if not isinstance(data, dict):
            return cls()
        return cls(**{name: _safe_str(data.get(name)) for name in LOCALIZED_FIELDS})

    def to_dict(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in LOCALIZED_FIELDS}


LOCALIZED_FIELDS = tuple(f.name for f in fields(LocalizedContent))


def normalize_language_code(code: str) -> str:
    return _safe_str(code).strip().lower()


_TRUTHY = ("1", "true", "yes", "y", "on")


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    if isinstance(value, (bool, int, float)):
        return bool(value)
    return False


class LocalizedContentMap(Mapping):
    """
    Mapping language code -> LocalizedContent.

    Codes are kept exactly as the catalog sent them (only surrounding whitespace
    is stripped); lookups ignore case. The default language (pt-br) is always
    present: it is created on construction if missing and remove() refuses to
    drop it. All mutation goes through add / remove / set_field so that rule
    lives in one place.
    """

    def __init__(self, entries: Mapping[str, LocalizedContent] | None = None) -> None:
        self._entries: dict[str, LocalizedContent] = {}
        for code, content in (entries or {}).items():
            key = _safe_str(code).strip()
            if key:
                self._entries[key] = content
        if self._find_key(DEFAULT_LANGUAGE) is None:
            self._entries[DEFAULT_LANGUAGE] = LocalizedContent()

    @classmethod
    def from_dict(cls, data: Any) -> "LocalizedContentMap":
        if not isinstance(data, dict):
            return cls()
        return cls({str(code): LocalizedContent.from_dict(value) for code, value in data.items()})

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {code: content.to_dict() for code, content in self._entries.items()}

    def _find_key(self, code: str) -> str | None:
        if code in self._entries:
            return code
        lang = normalize_language_code(code)
        for key in self._entries:
            if normalize_language_code(key) == lang:
                return key
        return None

    def __getitem__(self, code: str) -> LocalizedContent:
        key = self._find_key(code)
        if key is None:
            raise KeyError(code)
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, LocalizedContentMap):
            return self._entries == other._entries
        return NotImplemented

    def __repr__(self) -> str:
        return f"LocalizedContentMap({self._entries!r})"

    def add(self, code: str) -> str:
        """
        Add an empty entry for a language. Existing entries are left untouched.
        Returns the key the entry is stored under (the existing one, if any).
        """
        key = _safe_str(code).strip()
        if not key:
            raise ValidationGap("Language code must not be empty.")
        existing = self._find_key(key)
        if existing is not None:
            return existing
        self._entries[key] = LocalizedContent()
        return key

    def remove(self, code: str) -> None:
        if normalize_language_code(code) == DEFAULT_LANGUAGE:
            raise ValidationGap(f"The default language '{DEFAULT_LANGUAGE}' cannot be removed.")
        key = self._find_key(code)
        if key is not None:
            del self._entries[key]

    def set_field(self, code: str, name: str, value: str) -> None:
        key = self._find_key(code)
        if key is None:
            raise ValidationGap(f"Unknown language: {code!r} (add it first).")
        if name not in LOCALIZED_FIELDS:
            raise ValidationGap(f"Unknown localized field: {name!r}")
        setattr(self._entries[key], name, _safe_str(value))


@dataclass
class Event:
    """
    Represents one calendar event as stored by the catalog.

    start_datetime / end_datetime stay ISO-8601 strings; the catalog owns their meaning.
    """

    id: int
    event_name: str = ""
    organization_name: str = ""
    start_datetime: str = ""
    end_datetime: str = ""
    address: str = ""
    event_link: str = ""
    maps_link: str = ""
    online: bool = False
    status: str = REQUESTED
    tags: list[str] = field(default_factory=list)
    intl: LocalizedContentMap = field(default_factory=LocalizedContentMap)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Event":
        """
        Build an Event from a catalog JSON object.

        Only 'id' is required; every other key falls back to an empty value.
        """
        if "id" not in data:
            raise ValueError("Event is missing required field: id")
        tags = data.get("tags") or []
        return cls(
            id=int(data["id"]),
            event_name=_safe_str(data.get("event_name")),
            organization_name=_safe_str(data.get("organization_name")),
            start_datetime=_safe_str(data.get("start_datetime")),
            end_datetime=_safe_str(data.get("end_datetime")),
            address=_safe_str(data.get("address")),
            event_link=_safe_str(data.get("event_link")),
            maps_link=_safe_str(data.get("maps_link")),
            online=_as_bool(data.get("online", False)),
            status=_safe_str(data.get("status")) or REQUESTED,
            tags=[_safe_str(t) for t in tags] if isinstance(tags, list) else [],
            intl=LocalizedContentMap.from_dict(data.get("intl")),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id}
        for name in EDITABLE_FIELDS:
            out[name] = wire_value(self, name)
        return out

    def copy(self) -> "Event":
        return _copy.deepcopy(self)


EDITABLE_FIELDS = tuple(f.name for f in fields(Event) if f.name != "id")


def wire_value(event: Event, name: str) -> Any:
    """
    Return the JSON-ready value of one event field.
    """
    value = getattr(event, name)
    if isinstance(value, LocalizedContentMap):
        return value.to_dict()
    if isinstance(value, list):
        return list(value)
    return value
