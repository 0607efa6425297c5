from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from eventreview.dashboard import CollectionView, Dashboard
from eventreview.display import (
    datetime_input_value,
    format_datetime,
    status_label,
    tag_summary,
)
from eventreview.errors import ValidationGap, WorkflowError
from eventreview.edits import FIELD_COMMANDS
from eventreview.model import DEFAULT_LANGUAGE, LOCALIZED_FIELDS, Event
from eventreview.session import Session
from eventreview.workflow import Mode, Notice, Outcome, ReviewWorkflow, State

console = Console()

NOTICE_STYLES = {"success": "green", "info": "cyan", "warning": "yellow", "error": "bold red"}


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    return console.input(escape(msg))


def _show_notice(notice: Notice) -> None:
    style = NOTICE_STYLES.get(notice.level, "white")
    console.print(f"[{style}]{escape(notice.title)}[/]: {escape(notice.message)}")


def run_interactive(dashboard: Dashboard, session: Session) -> None:
    """
    Interactive menu loop: two tabs (pending / approved), each with its own filters.
    """
    dashboard.notify = _show_notice
    dashboard.reload()

    while True:
        _print_header(dashboard)

        choice = _prompt(
            "\n[1] Pending events (review)\n"
            "[2] Approved events (edit / delete)\n"
            "[3] Reload\n"
            "[9] Logout\n"
            "[0] Exit\n"
            "Select: "
        ).strip()

        if choice == "0":
            _println("Bye.")
            return

        if choice == "1":
            _flow_tab(dashboard, approved=False)
        elif choice == "2":
            _flow_tab(dashboard, approved=True)
        elif choice == "3":
            if dashboard.reload():
                _println("Events reloaded.")
        elif choice == "9":
            session.logout()
            _println("Logged out. Run 'eventreview login <token>' to log in again.")
            return
        else:
            _println("Invalid choice.")


def _print_header(dashboard: Dashboard) -> None:
    _println("\n=== Event review console ===")
    _println(f"Pending: {len(dashboard.pending)} | Approved: {len(dashboard.approved)}")


def _filter_label(view: CollectionView) -> str:
    bits = []
    if view.search:
        bits.append(f"search={view.search!r}")
    if view.selected_tags:
        bits.append(f"tags={', '.join(view.selected_tags)}")
    return " | ".join(bits) if bits else "no filters"


def _events_table(title: str, events: list[Event]) -> Table:
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Event")
    table.add_column("Organization")
    table.add_column("Start")
    table.add_column("Where")
    table.add_column("Tags")
    table.add_column("Status")
    for i, ev in enumerate(events, start=1):
        table.add_row(
            str(i),
            f"[bold cyan]{escape(ev.event_name or '(no name)')}[/]",
            escape(ev.organization_name),
            format_datetime(ev.start_datetime),
            "Online" if ev.online else escape(ev.address),
            f"[magenta]{escape(tag_summary(ev.tags))}[/]",
            status_label(ev.status),
        )
    return table


def _flow_tab(dashboard: Dashboard, approved: bool) -> None:
    """
    Show one tab and let the operator filter it or pick an event.
    """
    name = "Approved" if approved else "Pending"
    view = dashboard.approved_view if approved else dashboard.pending_view

    while True:
        events = dashboard.visible_approved() if approved else dashboard.visible_pending()
        tags = dashboard.approved_tags() if approved else dashboard.pending_tags()

        console.print(_events_table(f"{name} events ({_filter_label(view)})", events))
        if not events:
            _println("No events found.")

        actions = "[s] search  [t] toggle tag  [c] clear filters  [blank] back"
        if approved:
            actions = "[number] edit  [d] delete  " + actions
        else:
            actions = "[number] review  " + actions
        pick = _prompt(f"{actions}\nSelect: ").strip()

        if not pick:
            return
        if pick == "s":
            view.search = _prompt("Search text [blank = all]: ")
            continue
        if pick == "t":
            _flow_toggle_tag(view, tags)
            continue
        if pick == "c":
            view.clear()
            continue
        if pick == "d" and approved:
            _flow_delete(dashboard, events)
            continue
        if not pick.isdigit():
            _println("Not a number.")
            continue

        i = int(pick)
        if not (1 <= i <= len(events)):
            _println("Out of range.")
            continue

        _flow_review(dashboard.workflow(), events[i - 1])


def _flow_toggle_tag(view: CollectionView, tags: list[str]) -> None:
    if not tags:
        _println("No tags in this list.")
        return
    for i, tag in enumerate(tags, start=1):
        mark = "x" if tag in view.selected_tags else " "
        _println(escape(f"{i}) [{mark}] {tag}"))
    pick = _prompt("Tag number to toggle [blank = back]: ").strip()
    if pick.isdigit() and 1 <= int(pick) <= len(tags):
        view.toggle(tags[int(pick) - 1])
    elif pick:
        _println("Out of range.")


def _flow_delete(dashboard: Dashboard, events: list[Event]) -> None:
    pick = _prompt("Number of the event to delete [blank = cancel]: ").strip()
    if not pick:
        return
    if not pick.isdigit() or not (1 <= int(pick) <= len(events)):
        _println("Out of range.")
        return
    ev = events[int(pick) - 1]
    sure = _prompt(f"Permanently delete '{ev.event_name}'? [y/N]: ").strip().lower()
    if sure == "y":
        dashboard.workflow().delete(ev.id)


def _event_details(ev: Event, changed: set[str]) -> Table:
    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Field")
    table.add_column("Value")

    def row(label: str, value: str, name: str) -> None:
        marker = " [yellow]*[/]" if name in changed else ""
        table.add_row(f"{label}{marker}", escape(value))

    row("event_name", ev.event_name, "event_name")
    row("organization_name", ev.organization_name, "organization_name")
    row("start_datetime", datetime_input_value(ev.start_datetime), "start_datetime")
    row("end_datetime", datetime_input_value(ev.end_datetime), "end_datetime")
    row("event_link", ev.event_link, "event_link")
    row("maps_link", ev.maps_link, "maps_link")
    row("online", "yes" if ev.online else "no", "online")
    if not ev.online:
        row("address", ev.address, "address")
    row("status", ev.status, "status")
    row("tags", ", ".join(ev.tags), "tags")
    for lang, content in ev.intl.items():
        for name in LOCALIZED_FIELDS:
            row(f"{lang}.{name}", getattr(content, name), "intl")
    return table


def _flow_review(workflow: ReviewWorkflow, event: Event) -> None:
    """
    Review (pending) or edit (approved) one event until it is confirmed or closed.
    """
    mode = workflow.select_for_review(event)

    while workflow.state is not State.IDLE:
        working = workflow.working_copy
        assert working is not None
        title = "Review event" if mode is Mode.REVIEW else "Edit event"
        _println(f"\n=== {title} #{working.id} ===")
        console.print(_event_details(working, set(workflow.diff())))

        if mode is Mode.REVIEW:
            terminal = "[p] approve  [d] decline"
        else:
            terminal = "[s] save"
        pick = _prompt(
            "[e] edit field  [l] edit localized field  [a] add language  [r] remove language\n"
            f"{terminal}  [x] close without saving\nSelect: "
        ).strip().lower()

        try:
            if pick == "x":
                workflow.close_review()
            elif pick == "e":
                _flow_edit_field(workflow)
            elif pick == "l":
                _flow_edit_localized(workflow)
            elif pick == "a":
                code = _prompt("Language code (e.g. en-us): ").strip()
                if code:
                    workflow.add_language(code)
            elif pick == "r":
                code = _prompt("Language code to remove: ").strip()
                if code:
                    workflow.remove_language(code)
            elif pick == "p" and mode is Mode.REVIEW:
                workflow.request_approve()
                _flow_confirm(workflow, "Approve this event with the changes made?")
            elif pick == "d" and mode is Mode.REVIEW:
                workflow.request_decline()
                _flow_confirm(workflow, "Decline this event? Pending edits are discarded.")
            elif pick == "s" and mode is Mode.EDIT:
                workflow.request_save()
                _flow_confirm(workflow, "Save the changes to this event?")
            else:
                _println("Invalid choice.")
        except (ValueError, ValidationGap, WorkflowError) as e:
            _println(f"[red]{escape(str(e))}[/]")


def _flow_confirm(workflow: ReviewWorkflow, question: str) -> Optional[Outcome]:
    changes = workflow.diff()
    if changes:
        _println(f"Changed fields: {', '.join(sorted(changes))}")
    sure = _prompt(f"{question} [y/N]: ").strip().lower()
    if sure != "y":
        workflow.cancel_confirmation()
        return None
    return workflow.confirm()


def _flow_edit_field(workflow: ReviewWorkflow) -> None:
    names = list(FIELD_COMMANDS)
    for i, name in enumerate(names, start=1):
        _println(f"{i}) {name}")
    pick = _prompt("Field number [blank = back]: ").strip()
    if not pick:
        return
    if not pick.isdigit() or not (1 <= int(pick) <= len(names)):
        _println("Out of range.")
        return

    name = names[int(pick) - 1]
    if name == "online":
        value = _prompt("Online event? [y/N]: ").strip().lower() == "y"
        workflow.edit_field(name, value)
    elif name == "tags":
        raw = _prompt("Tags (comma separated): ")
        workflow.edit_field(name, [t.strip() for t in raw.split(",") if t.strip()])
    elif name in ("start_datetime", "end_datetime"):
        workflow.edit_field(name, _prompt("Date/time (YYYY-MM-DDTHH:MM): ").strip())
    else:
        workflow.edit_field(name, _prompt(f"New {name}: "))


def _flow_edit_localized(workflow: ReviewWorkflow) -> None:
    working = workflow.working_copy
    assert working is not None
    langs = list(working.intl)
    lang = _prompt(f"Language ({', '.join(langs)}) [{DEFAULT_LANGUAGE}]: ").strip() or DEFAULT_LANGUAGE
    for i, name in enumerate(LOCALIZED_FIELDS, start=1):
        _println(f"{i}) {name}")
    pick = _prompt("Field number [blank = back]: ").strip()
    if not pick:
        return
    if not pick.isdigit() or not (1 <= int(pick) <= len(LOCALIZED_FIELDS)):
        _println("Out of range.")
        return
    name = LOCALIZED_FIELDS[int(pick) - 1]
    workflow.edit_localized_field(lang, name, _prompt(f"New {lang}.{name}: "))
