"""
Tests for the review workflow state machine.

The catalog is an in-memory fake that records calls; reload is the dashboard's
reload, so a successful action shows up as list_pending + list_approved calls.
"""

import unittest

from eventreview.dashboard import Dashboard
from eventreview.edits import SetEventName
from eventreview.errors import ValidationGap, WorkflowError
from eventreview.workflow import Action, Mode, Outcome, ReviewWorkflow, State

from fakes import FakeCatalog, make_event


class WorkflowTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.catalog = FakeCatalog(
            pending=[make_event(5), make_event(6)],
            approved=[make_event(7, status="approved")],
        )
        self.notices = []
        self.dashboard = Dashboard(self.catalog, notify=self.notices.append)
        self.dashboard.reload()
        self.catalog.calls.clear()
        self.workflow = self.dashboard.workflow()

    def pending(self, event_id: int):
        return next(ev for ev in self.dashboard.pending if ev.id == event_id)

    def approved(self, event_id: int):
        return next(ev for ev in self.dashboard.approved if ev.id == event_id)


class TestSelection(WorkflowTestCase):
    def test_select_pending_opens_review_mode(self) -> None:
        mode = self.workflow.select_for_review(self.pending(5))
        self.assertIs(mode, Mode.REVIEW)
        self.assertIs(self.workflow.state, State.EDITING)

    def test_select_approved_opens_edit_mode(self) -> None:
        self.assertIs(self.workflow.select_for_review(self.approved(7)), Mode.EDIT)

    def test_select_twice_gives_equal_copy(self) -> None:
        ev = self.pending(5)
        for _ in range(2):
            self.workflow.select_for_review(ev)
            self.assertEqual(self.workflow.working_copy, ev)
            self.assertIsNot(self.workflow.working_copy, ev)
            self.assertEqual(self.workflow.diff(), {})
            self.workflow.close_review()

    def test_cannot_select_while_editing(self) -> None:
        self.workflow.select_for_review(self.pending(5))
        with self.assertRaises(WorkflowError):
            self.workflow.select_for_review(self.pending(6))

    def test_edits_touch_working_copy_only(self) -> None:
        ev = self.pending(5)
        self.workflow.select_for_review(ev)
        self.workflow.edit_field("event_name", "Changed")
        self.workflow.edit_localized_field("pt-br", "cost", "R$ 5,00")
        self.assertEqual(ev.event_name, "Event 5")
        self.assertEqual(ev.intl["pt-br"].cost, "Gratuito")
        self.assertEqual(self.workflow.original.event_name, "Event 5")
        self.assertEqual(self.workflow.working_copy.event_name, "Changed")

    def test_close_review_discards_working_copy(self) -> None:
        self.workflow.select_for_review(self.pending(5))
        self.workflow.edit(SetEventName("Changed"))
        self.workflow.request_approve()
        self.workflow.close_review()
        self.assertIs(self.workflow.state, State.IDLE)
        self.assertIsNone(self.workflow.working_copy)
        self.assertEqual(self.catalog.calls, [])


class TestDefaultLanguage(WorkflowTestCase):
    def test_remove_default_language_rejected_in_every_state(self) -> None:
        with self.assertRaises(ValidationGap):
            self.workflow.remove_language("pt-br")

        self.workflow.select_for_review(self.pending(5))
        with self.assertRaises(ValidationGap):
            self.workflow.remove_language("pt-br")
        self.assertIn("pt-br", self.workflow.working_copy.intl)

        self.workflow.request_approve()
        with self.assertRaises(ValidationGap):
            self.workflow.remove_language("PT-BR")
        self.assertIn("pt-br", self.workflow.working_copy.intl)

    def test_other_languages_can_be_added_and_removed(self) -> None:
        self.workflow.select_for_review(self.pending(5))
        self.workflow.add_language("en-us")
        self.workflow.edit_localized_field("en-us", "cost", "Free")
        self.assertIn("intl", self.workflow.diff())
        self.workflow.remove_language("en-us")
        self.assertEqual(self.workflow.diff(), {})


class TestTransitions(WorkflowTestCase):
    def test_request_without_selection(self) -> None:
        with self.assertRaises(WorkflowError):
            self.workflow.request_approve()
        with self.assertRaises(WorkflowError):
            self.workflow.confirm()

    def test_save_not_available_in_review_mode(self) -> None:
        self.workflow.select_for_review(self.pending(5))
        with self.assertRaises(WorkflowError):
            self.workflow.request_save()

    def test_approve_not_available_in_edit_mode(self) -> None:
        self.workflow.select_for_review(self.approved(7))
        with self.assertRaises(WorkflowError):
            self.workflow.request_approve()
        with self.assertRaises(WorkflowError):
            self.workflow.request_decline()

    def test_cancel_confirmation_keeps_edits(self) -> None:
        self.workflow.select_for_review(self.pending(5))
        self.workflow.edit_field("event_name", "Changed")
        self.workflow.request_approve()
        self.assertIs(self.workflow.pending_action, Action.APPROVE)
        self.workflow.cancel_confirmation()
        self.assertIs(self.workflow.state, State.EDITING)
        self.assertIsNone(self.workflow.pending_action)
        self.assertEqual(self.workflow.working_copy.event_name, "Changed")
        self.assertEqual(self.catalog.calls, [])


class TestConfirm(WorkflowTestCase):
    def test_approve_with_one_edit(self) -> None:
        self.workflow.select_for_review(self.pending(5))
        self.workflow.edit_field("event_name", "PyCon 2026")
        self.workflow.request_approve()

        self.assertIs(self.workflow.confirm(), Outcome.DONE)

        self.assertEqual(
            self.catalog.calls,
            [
                ("set_status", 5, "approved"),
                ("update_fields", 5, {"event_name": "PyCon 2026"}),
                ("list_pending",),
                ("list_approved",),
            ],
        )
        self.assertIs(self.workflow.state, State.IDLE)
        self.assertIsNone(self.workflow.working_copy)
        self.assertEqual(self.notices[-1].level, "success")

    def test_localized_edit_keeps_other_language_codes(self) -> None:
        ev = make_event(
            8,
            intl={"pt-br": {"cost": "Gratuito"}, "EN-US": {"cost": "Free"}},
        )
        self.workflow.select_for_review(ev)
        self.workflow.edit_localized_field("pt-br", "cost", "R$ 10,00")
        self.workflow.request_approve()

        self.assertIs(self.workflow.confirm(), Outcome.DONE)

        patch = next(c for c in self.catalog.calls if c[0] == "update_fields")[2]
        self.assertEqual(list(patch["intl"]), ["pt-br", "EN-US"])
        self.assertEqual(patch["intl"]["EN-US"], ev.intl["EN-US"].to_dict())
        self.assertEqual(patch["intl"]["pt-br"]["cost"], "R$ 10,00")

    def test_approve_without_edits_is_status_only(self) -> None:
        self.workflow.select_for_review(self.pending(5))
        self.workflow.edit_field("event_name", "Tmp")
        self.workflow.edit_field("event_name", "Event 5")
        self.workflow.request_approve()
        self.workflow.confirm()
        self.assertEqual(self.catalog.names(), ["set_status", "list_pending", "list_approved"])

    def test_decline_discards_edits(self) -> None:
        self.workflow.select_for_review(self.pending(6))
        self.workflow.edit_field("event_name", "Ignored")
        self.workflow.request_decline()
        self.assertIs(self.workflow.confirm(), Outcome.DONE)
        self.assertEqual(self.catalog.calls[0], ("set_status", 6, "declined"))
        self.assertNotIn("update_fields", self.catalog.names())
        self.assertIs(self.workflow.state, State.IDLE)

    def test_save_without_edits_issues_no_update(self) -> None:
        self.workflow.select_for_review(self.approved(7))
        self.workflow.request_save()
        self.assertIs(self.workflow.confirm(), Outcome.DONE)
        self.assertEqual(self.catalog.names(), ["list_pending", "list_approved"])
        self.assertIs(self.workflow.state, State.IDLE)

    def test_save_includes_status_reassignment(self) -> None:
        self.workflow.select_for_review(self.approved(7))
        self.workflow.edit_field("status", "declined")
        self.workflow.edit_field("online", True)
        self.workflow.request_save()
        self.workflow.confirm()
        self.assertEqual(self.catalog.calls[0], ("update_fields", 7, {"online": True, "status": "declined"}))
        self.assertNotIn("set_status", self.catalog.names())

    def test_set_status_failure_keeps_working_copy(self) -> None:
        self.catalog.fail.add("set_status")
        self.workflow.select_for_review(self.pending(5))
        self.workflow.edit_field("event_name", "Keep me")
        self.workflow.request_approve()

        self.assertIs(self.workflow.confirm(), Outcome.FAILED)

        self.assertIs(self.workflow.state, State.EDITING)
        self.assertIsNone(self.workflow.pending_action)
        self.assertEqual(self.workflow.working_copy.event_name, "Keep me")
        self.assertEqual(self.workflow.original.event_name, "Event 5")
        self.assertEqual(self.catalog.names(), ["set_status"])
        self.assertEqual(self.notices[-1].level, "error")

        # the operator can retry the same action
        self.catalog.fail.clear()
        self.workflow.request_approve()
        self.assertIs(self.workflow.confirm(), Outcome.DONE)

    def test_update_failure_after_approve_is_partial(self) -> None:
        self.catalog.fail.add("update_fields")
        self.workflow.select_for_review(self.pending(5))
        self.workflow.edit_field("event_name", "Lost")
        self.workflow.request_approve()

        self.assertIs(self.workflow.confirm(), Outcome.PARTIAL)

        self.assertEqual(
            self.catalog.names(), ["set_status", "update_fields", "list_pending", "list_approved"]
        )
        self.assertEqual(self.notices[-1].level, "warning")
        self.assertIs(self.workflow.state, State.IDLE)

    def test_save_failure_returns_to_editing(self) -> None:
        self.catalog.fail.add("update_fields")
        self.workflow.select_for_review(self.approved(7))
        self.workflow.edit_field("address", "Elsewhere")
        self.workflow.request_save()
        self.assertIs(self.workflow.confirm(), Outcome.FAILED)
        self.assertIs(self.workflow.state, State.EDITING)
        self.assertEqual(self.workflow.diff(), {"address": "Elsewhere"})


class TestDelete(WorkflowTestCase):
    def test_delete_reloads(self) -> None:
        self.assertTrue(self.workflow.delete(7))
        self.assertEqual(self.catalog.names(), ["delete_event", "list_pending", "list_approved"])

    def test_delete_failure_skips_reload(self) -> None:
        self.catalog.fail.add("delete_event")
        self.assertFalse(self.workflow.delete(7))
        self.assertEqual(self.catalog.names(), ["delete_event"])

    def test_delete_requires_idle(self) -> None:
        self.workflow.select_for_review(self.pending(5))
        with self.assertRaises(WorkflowError):
            self.workflow.delete(5)


class TestStandaloneReload(unittest.TestCase):
    def test_custom_reload_callback(self) -> None:
        catalog = FakeCatalog()
        reloads = []
        workflow = ReviewWorkflow(catalog, reload=lambda: reloads.append(1))
        workflow.select_for_review(make_event(1))
        workflow.request_decline()
        workflow.confirm()
        self.assertEqual(reloads, [1])


if __name__ == "__main__":
    unittest.main()
