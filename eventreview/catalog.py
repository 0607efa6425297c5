"""
Catalog client: thin HTTP wrapper around the remote events catalog.

Endpoints (all JSON, all bearer-authenticated):

    GET    /events/submit/review/   events awaiting review
    GET    /events/                 approved events
    POST   /events/submit/{id}      {"action": "approved" | "declined"}
    PUT    /events/{id}             partial event fields
    DELETE /events/{id}

Every failure (network error, non-2xx status, unexpected payload) surfaces as
TransportError. Callers are expected to treat them all the same way.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from eventreview.errors import TransportError
from eventreview.model import APPROVED, DECLINED, Event
from eventreview.session import Session

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.calendario.tech"
DECISIONS = (APPROVED, DECLINED)


class CatalogClient:
    """Client for reading and mutating events in the catalog."""

    def __init__(
        self,
        session: Session,
        base_url: str = DEFAULT_BASE_URL,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http if http is not None else requests.Session()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        # token is read per request so a login/logout takes effect immediately
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.session.require_token()}",
        }

    def _request(self, method: str, endpoint: str, payload: Any = None) -> Any:
        """
        Send one request and return the decoded JSON body (None for empty bodies).

        Raises:
            TransportError: on any network failure or non-2xx response
        """
        url = f"{self.base_url}{endpoint}"
        logger.debug("%s %s", method, url)
        try:
            response = self.http.request(
                method,
                url,
                headers=self._headers(),
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise TransportError(None, str(e)) from e

        if not 200 <= response.status_code < 300:
            logger.error("%s %s returned %s", method, url, response.status_code)
            raise TransportError(response.status_code, response.reason or "request failed")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            # mutations may answer with a non-JSON body; nothing in it is used
            return None

    def _list(self, endpoint: str) -> list[Event]:
        data = self._request("GET", endpoint)
        if not isinstance(data, list):
            raise TransportError(None, f"expected a list of events from {endpoint}")
        try:
            events = [Event.from_dict(item) for item in data if isinstance(item, dict)]
        except (TypeError, ValueError) as e:
            raise TransportError(None, f"invalid event in response from {endpoint}: {e}") from e
        logger.debug("Fetched %d events from %s", len(events), endpoint)
        return events

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def list_pending(self) -> list[Event]:
        """Fetch all events awaiting review."""
        return self._list("/events/submit/review/")

    def list_approved(self) -> list[Event]:
        """Fetch all publicly approved events."""
        return self._list("/events/")

    def set_status(self, event_id: int, decision: str) -> None:
        """
        Approve or decline an event. There is no call to undo this.
        """
        if decision not in DECISIONS:
            raise ValueError(f"Invalid decision: {decision!r} (expected 'approved' or 'declined')")
        self._request("POST", f"/events/submit/{int(event_id)}", {"action": decision})
        logger.info("Event %s -> %s", event_id, decision)

    def update_fields(self, event_id: int, patch: dict[str, Any]) -> None:
        """
        Apply a partial field patch to an event.
        """
        self._request("PUT", f"/events/{int(event_id)}", patch)
        logger.info("Event %s updated: %s", event_id, ", ".join(sorted(patch)))

    def delete_event(self, event_id: int) -> None:
        """Remove an event permanently."""
        self._request("DELETE", f"/events/{int(event_id)}")
        logger.info("Event %s deleted", event_id)
