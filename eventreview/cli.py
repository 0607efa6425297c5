"""
CLI (Command Line Interface).

This module provides quick terminal commands for reviewers, e.g.:

    eventreview login <token>
    eventreview pending --search python --tag ai
    eventreview approve 5 --set event_name="PyCon 2026" --yes
    eventreview decline 6
    eventreview edit 7 --set pt-br.cost=Free
    eventreview delete 8
    eventreview interactive

Note:
- The interactive UI lives in eventreview/interactive.py
- Every mutating command asks for confirmation unless --yes is given
- Catalog failures are printed as a notice and give exit code 1 (never a traceback)
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from typing import Any

from eventreview.catalog import CatalogClient
from eventreview.config import Settings, load_settings
from eventreview.dashboard import Dashboard
from eventreview.display import event_line
from eventreview.errors import EventReviewError, ValidationGap, WorkflowError
from eventreview.filters import available_tags, filter_events
from eventreview.logging_config import setup_logging
from eventreview.model import Event
from eventreview.session import Session
from eventreview.storage import JsonFileStore
from eventreview.workflow import Notice, Outcome, ReviewWorkflow

logger = logging.getLogger(__name__)


def _print_notice(notice: Notice) -> None:
    print(f"[{notice.level}] {notice.title}: {notice.message}")


def _open_session(settings: Settings) -> Session:
    """
    Load the stored session. An expired token is discarded here (and only here).
    """
    session = Session(JsonFileStore(settings.session_file))
    session.load()
    return session


def _open_dashboard(settings: Settings, session: Session) -> Dashboard:
    catalog = CatalogClient(session, base_url=settings.api_url, timeout=settings.timeout)
    return Dashboard(catalog, notify=_print_notice)


def _confirm(question: str, assume_yes: bool) -> bool:
    if assume_yes:
        return True
    answer = input(f"{question} [y/N]: ").strip().lower()
    return answer in ("y", "yes")


def _parse_assignment(text: str) -> tuple[str | None, str, str]:
    """
    Parse '--set' values.

        event_name=New name      -> (None, 'event_name', 'New name')
        pt-br.cost=Free          -> ('pt-br', 'cost', 'Free')
    """
    key, sep, value = text.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ValueError(f"Expected FIELD=VALUE, got {text!r}")
    if "." in key:
        lang, _, name = key.rpartition(".")
        return lang, name, value
    return None, key, value


def _coerce(name: str, value: str) -> Any:
    if name == "online":
        return value.strip().lower() in ("1", "true", "yes", "y", "on")
    if name == "tags":
        return [t.strip() for t in value.split(",") if t.strip()]
    return value


def _apply_assignments(workflow: ReviewWorkflow, assignments: list[str]) -> None:
    for text in assignments:
        lang, name, value = _parse_assignment(text)
        if lang is None:
            workflow.edit_field(name, _coerce(name, value))
        else:
            if lang not in workflow.working_copy.intl:
                workflow.add_language(lang)
            workflow.edit_localized_field(lang, name, value)


def _cmd_login(args: argparse.Namespace, settings: Settings) -> int:
    session = Session(JsonFileStore(settings.session_file))
    token = (args.token or "").strip()
    if not token:
        print("Please provide an access token.")
        return 1
    session.login(token)
    print("Logged in. The token expires in 24 hours.")
    return 0


def _cmd_logout(args: argparse.Namespace, settings: Settings) -> int:
    Session(JsonFileStore(settings.session_file)).logout()
    print("Logged out.")
    return 0


def _cmd_status(args: argparse.Namespace, settings: Settings) -> int:
    session = _open_session(settings)
    print(f"Catalog: {settings.api_url}")
    if not session.is_authenticated:
        print("Not logged in.")
        return 0
    assert session.expires_at is not None
    expiry = datetime.fromtimestamp(session.expires_at / 1000).isoformat(timespec="minutes")
    print(f"Logged in (token valid until {expiry}).")
    return 0


def _cmd_list(args: argparse.Namespace, dashboard: Dashboard) -> int:
    """
    Print pending or approved events, filtered by search text and tags.
    """
    if not dashboard.reload():
        return 1

    events: list[Event] = dashboard.pending if args.command == "pending" else dashboard.approved
    matches = filter_events(events, args.search or "", args.tag or [])

    tags = available_tags(events)
    if tags:
        print(f"Tags: {', '.join(tags)}")

    if not matches:
        print("No events found.")
        return 0

    for ev in matches:
        print(event_line(ev))
    print(f"{len(matches)} of {len(events)} events")
    return 0


def _find(events: list[Event], event_id: int) -> Event | None:
    for ev in events:
        if ev.id == event_id:
            return ev
    return None


def _cmd_decide(args: argparse.Namespace, dashboard: Dashboard) -> int:
    """
    approve / decline / edit one event through the review workflow.
    """
    if not dashboard.reload():
        return 1

    if args.command == "edit":
        event = _find(dashboard.approved, args.event_id)
        where = "approved"
    else:
        event = _find(dashboard.pending, args.event_id)
        where = "pending"
    if event is None:
        print(f"Event {args.event_id} not found among {where} events.")
        return 1

    workflow = dashboard.workflow()
    workflow.select_for_review(event)
    try:
        if args.command != "decline":
            _apply_assignments(workflow, args.set or [])
        if args.command == "approve":
            workflow.request_approve()
        elif args.command == "decline":
            workflow.request_decline()
        else:
            workflow.request_save()
    except (ValueError, ValidationGap, WorkflowError) as e:
        print(f"Cannot {args.command} event {event.id}: {e}")
        workflow.close_review()
        return 1

    print(event_line(workflow.working_copy))
    changes = workflow.diff()
    if changes and args.command != "decline":
        print(f"Changed fields: {', '.join(sorted(changes))}")

    if not _confirm(f"Really {args.command} event {event.id}?", args.yes):
        workflow.cancel_confirmation()
        workflow.close_review()
        print("Cancelled.")
        return 0

    outcome = workflow.confirm()
    if outcome is not Outcome.DONE:
        workflow.close_review()
        return 1
    return 0


def _cmd_delete(args: argparse.Namespace, dashboard: Dashboard) -> int:
    if not _confirm(f"Permanently delete event {args.event_id}?", args.yes):
        print("Cancelled.")
        return 0
    return 0 if dashboard.workflow().delete(args.event_id) else 1


def _add_filter_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--search", "-s", type=str, default="", help="Text in event or organization name")
    p.add_argument("--tag", "-t", action="append", help="Only events with this tag (repeatable, any match)")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="eventreview", description="Event review console")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    p_login = sub.add_parser("login", help="Store an access token (valid for 24 hours)")
    p_login.add_argument("token", type=str, help="Bearer token")

    sub.add_parser("logout", help="Forget the stored token")
    sub.add_parser("status", help="Show session status")

    p_pending = sub.add_parser("pending", help="List events awaiting review")
    _add_filter_args(p_pending)

    p_approved = sub.add_parser("approved", help="List approved events")
    _add_filter_args(p_approved)

    for name, help_text in (
        ("approve", "Approve a pending event (optionally with edits)"),
        ("decline", "Decline a pending event"),
        ("edit", "Edit an approved event"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("event_id", type=int, help="Event id")
        if name != "decline":
            p.add_argument(
                "--set",
                action="append",
                metavar="FIELD=VALUE",
                help="Field edit, e.g. event_name=Foo, online=true, tags=a,b or pt-br.cost=Free",
            )
        p.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    p_delete = sub.add_parser("delete", help="Delete an event permanently")
    p_delete.add_argument("event_id", type=int, help="Event id")
    p_delete.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    settings = load_settings()

    if args.command == "login":
        raise SystemExit(_cmd_login(args, settings))
    if args.command == "logout":
        raise SystemExit(_cmd_logout(args, settings))
    if args.command == "status":
        raise SystemExit(_cmd_status(args, settings))

    session = _open_session(settings)
    if not session.is_authenticated:
        print("Not logged in. Run 'eventreview login <token>' first.")
        raise SystemExit(1)

    dashboard = _open_dashboard(settings, session)

    try:
        if args.command in ("pending", "approved"):
            raise SystemExit(_cmd_list(args, dashboard))
        if args.command in ("approve", "decline", "edit"):
            raise SystemExit(_cmd_decide(args, dashboard))
        if args.command == "delete":
            raise SystemExit(_cmd_delete(args, dashboard))
    except EventReviewError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}")
        raise SystemExit(1)

    if args.command == "interactive":
        from eventreview.interactive import run_interactive

        run_interactive(dashboard, session)
        raise SystemExit(0)

    raise SystemExit(2)
