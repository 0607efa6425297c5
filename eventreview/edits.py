"""
Edit commands and the reducer that applies them.

Every change the operator makes to a working copy is one small command object.
apply_edit() is the only place that turns a command into a new Event, so:
- the original event is never mutated
- field validation (status values, datetime format, default language) happens once
- diff_events() can compare the result against the last fetched original
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Union

from eventreview.model import (
    EDITABLE_FIELDS,
    STATUSES,
    Event,
    wire_value,
)


@dataclass(frozen=True)
class SetEventName:
    value: str


@dataclass(frozen=True)
class SetOrganizationName:
    value: str


@dataclass(frozen=True)
class SetStartDatetime:
    value: str


@dataclass(frozen=True)
class SetEndDatetime:
    value: str


@dataclass(frozen=True)
class SetAddress:
    value: str


@dataclass(frozen=True)
class SetEventLink:
    value: str


@dataclass(frozen=True)
class SetMapsLink:
    value: str


@dataclass(frozen=True)
class SetOnline:
    value: bool


@dataclass(frozen=True)
class SetStatus:
    value: str


@dataclass(frozen=True)
class SetTags:
    value: tuple[str, ...]


@dataclass(frozen=True)
class SetLocalized:
    lang: str
    field: str
    value: str


@dataclass(frozen=True)
class AddLanguage:
    code: str


@dataclass(frozen=True)
class RemoveLanguage:
    code: str


EditCommand = Union[
    SetEventName,
    SetOrganizationName,
    SetStartDatetime,
    SetEndDatetime,
    SetAddress,
    SetEventLink,
    SetMapsLink,
    SetOnline,
    SetStatus,
    SetTags,
    SetLocalized,
    AddLanguage,
    RemoveLanguage,
]

# Plain field name -> command class, for callers that work with field names (CLI prompts).
FIELD_COMMANDS: dict[str, type] = {
    "event_name": SetEventName,
    "organization_name": SetOrganizationName,
    "start_datetime": SetStartDatetime,
    "end_datetime": SetEndDatetime,
    "address": SetAddress,
    "event_link": SetEventLink,
    "maps_link": SetMapsLink,
    "online": SetOnline,
    "status": SetStatus,
    "tags": SetTags,
}

_SIMPLE_FIELDS: dict[type, str] = {cls: name for name, cls in FIELD_COMMANDS.items()}


def normalize_datetime_input(value: str) -> str:
    """
    Convert minute-granular input 'YYYY-MM-DDTHH:MM' into 'YYYY-MM-DDTHH:MM:00'.

    Values that already carry seconds get them zeroed. A space instead of 'T' is accepted.
    Raises ValueError for anything else.
    """
    text = str(value).strip().replace(" ", "T", 1)
    if len(text) < 16:
        raise ValueError(f"Invalid datetime: {value!r} (expected YYYY-MM-DDTHH:MM)")
    minute = text[:16]
    datetime.strptime(minute, "%Y-%m-%dT%H:%M")
    return minute + ":00"


def command_for_field(name: str, value: Any) -> EditCommand:
    """
    Build the edit command for a plain (non-localized) field.
    """
    cls = FIELD_COMMANDS.get(name)
    if cls is None:
        raise ValueError(f"Unknown or non-editable field: {name!r}")
    if cls is SetTags:
        return SetTags(tuple(str(t) for t in value))
    if cls is SetOnline:
        return SetOnline(bool(value))
    return cls(str(value))


def apply_edit(event: Event, command: EditCommand) -> Event:
    """
    Return a new Event with the command applied. The input event is left untouched.
    """
    if isinstance(command, (SetStartDatetime, SetEndDatetime)):
        name = _SIMPLE_FIELDS[type(command)]
        return replace(event.copy(), **{name: normalize_datetime_input(command.value)})

    if isinstance(command, SetStatus):
        if command.value not in STATUSES:
            raise ValueError(f"Invalid status: {command.value!r} (expected one of {', '.join(STATUSES)})")
        return replace(event.copy(), status=command.value)

    if isinstance(command, SetTags):
        # keep order, drop blanks and duplicates
        tags: list[str] = []
        for t in command.value:
            t = t.strip()
            if t and t not in tags:
                tags.append(t)
        return replace(event.copy(), tags=tags)

    if isinstance(command, SetLocalized):
        out = event.copy()
        out.intl.set_field(command.lang, command.field, command.value)
        return out

    if isinstance(command, AddLanguage):
        out = event.copy()
        out.intl.add(command.code)
        return out

    if isinstance(command, RemoveLanguage):
        out = event.copy()
        out.intl.remove(command.code)
        return out

    name = _SIMPLE_FIELDS.get(type(command))
    if name is None:
        raise TypeError(f"Not an edit command: {command!r}")
    return replace(event.copy(), **{name: command.value})


def diff_events(original: Event, edited: Event) -> dict[str, Any]:
    """
    Field-level diff between the original and the working copy.

    Returns {field: new wire value} for every editable field that differs.
    intl is compared structurally (LocalizedContentMap equality), everything else
    by plain value equality. An empty dict means there is nothing to send.
    """
    changes: dict[str, Any] = {}
    for name in EDITABLE_FIELDS:
        if getattr(original, name) != getattr(edited, name):
            changes[name] = wire_value(edited, name)
    return changes
