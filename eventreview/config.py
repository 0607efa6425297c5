"""
Runtime configuration.

Values come from the environment; a .env file in the working directory is loaded
first via python-dotenv. Variables:

    EVENTREVIEW_API_URL        catalog base URL (default https://api.calendario.tech)
    EVENTREVIEW_SESSION_FILE   where the session token is stored (default ~/.eventreview/session.json)
    EVENTREVIEW_TIMEOUT        request timeout in seconds (default: none, transport default)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from eventreview.catalog import DEFAULT_BASE_URL
from eventreview.storage import default_store_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    api_url: str
    session_file: Path
    timeout: Optional[float]


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid EVENTREVIEW_TIMEOUT=%r (expected seconds)", raw)
        return None
    if value <= 0:
        logger.warning("Ignoring non-positive EVENTREVIEW_TIMEOUT=%r", raw)
        return None
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from the environment.

    Passing `environ` skips the .env file entirely (used by tests).
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    api_url = (environ.get("EVENTREVIEW_API_URL") or "").strip() or DEFAULT_BASE_URL
    session_raw = (environ.get("EVENTREVIEW_SESSION_FILE") or "").strip()
    session_file = Path(session_raw).expanduser() if session_raw else default_store_path()

    return Settings(
        api_url=api_url.rstrip("/"),
        session_file=session_file,
        timeout=_parse_timeout(environ.get("EVENTREVIEW_TIMEOUT")),
    )
