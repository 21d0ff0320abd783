"""
Session connector: attach to a Browserbase session and capture its markup.

Failures are never raised to the caller. ``connect`` returns ``None`` and
keeps the reason on ``last_failure`` so the orchestrator can tell a missing
API key from an unreachable session.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urlencode, urlparse, parse_qs

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from browser_provider import BrowserConfig, BrowserProvider, create_browser_provider
from codegen_config import SessionConfig
from error_handling import (
    ConnectorError,
    ConnectTimeoutError,
    MissingCredentialError,
    SessionUnreachableError,
)
from models.codegen_models import SessionHandle
from utils.event_logger import EventLogger, get_event_logger

SESSION_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{7,}$")
NEW_SESSION_ID = "new"


@dataclass(frozen=True)
class SessionTarget:
    """Where to connect and, for plain websites, what to open."""
    cdp_url: str
    session_id: str
    navigate_to: Optional[str] = None


def _session_id_from_url(address: str, config: SessionConfig) -> Optional[str]:
    if address.startswith(config.session_url_prefix):
        remainder = address[len(config.session_url_prefix):]
        session_id = re.split(r"[/?#]", remainder, maxsplit=1)[0]
        return session_id or None

    parsed = urlparse(address)
    if not parsed.netloc.endswith("browserbase.com"):
        return None
    segments = [segment for segment in parsed.path.split("/") if segment]
    if "sessions" in segments:
        index = segments.index("sessions")
        if index + 1 < len(segments):
            return segments[index + 1]
    return None


def resolve_target(address: str, api_key: Optional[str], config: SessionConfig) -> SessionTarget:
    """
    Turn a user-supplied address into a CDP endpoint.

    Accepted forms:
        - a Browserbase session URL (``https://www.browserbase.com/sessions/<id>``)
        - a bare session id
        - a ``ws://`` / ``wss://`` CDP endpoint, used verbatim
        - any other website URL, opened in a fresh remote session
    """
    address = address.strip()

    if address.startswith(("ws://", "wss://")):
        query = parse_qs(urlparse(address).query)
        session_id = (query.get("sessionId") or [NEW_SESSION_ID])[0]
        return SessionTarget(cdp_url=address, session_id=session_id)

    session_id = _session_id_from_url(address, config)
    if session_id is None and "://" not in address and "." not in address and SESSION_ID_RE.match(address):
        session_id = address

    if session_id is not None:
        query = urlencode({"apiKey": api_key or "", "sessionId": session_id})
        return SessionTarget(cdp_url=f"{config.connect_url}?{query}", session_id=session_id)

    website = address if "://" in address else "https://" + address
    query = urlencode({"apiKey": api_key or ""})
    return SessionTarget(
        cdp_url=f"{config.connect_url}?{query}",
        session_id=NEW_SESSION_ID,
        navigate_to=website,
    )


def _carries_api_key(address: str) -> bool:
    if not address.startswith(("ws://", "wss://")):
        return False
    return bool(parse_qs(urlparse(address).query).get("apiKey"))


class SessionConnector:
    """
    Connects to a remote browser session and returns its current markup.

    Example:
        >>> connector = SessionConnector(SessionConfig())
        >>> handle = connector.connect("https://www.browserbase.com/sessions/abc123xyz")
        >>> if handle is None:
        ...     print(connector.last_failure)
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        provider_factory: Optional[Callable[[BrowserConfig], BrowserProvider]] = None,
        event_logger: Optional[EventLogger] = None,
    ):
        self.config = config or SessionConfig()
        self.provider_factory = provider_factory or create_browser_provider
        self.event_logger = event_logger or get_event_logger()
        self.last_failure: Optional[ConnectorError] = None

    def connect(self, address: str) -> Optional[SessionHandle]:
        """
        Attach to the session behind ``address`` and capture the page HTML.

        Returns:
            SessionHandle, or None when the session could not be read
        """
        self.last_failure = None

        api_key = self.config.resolve_api_key()
        if not api_key and not _carries_api_key(address):
            return self._fail(address, MissingCredentialError(
                f"{self.config.api_key_env} is not set. "
                "Add the required API key to your environment configuration.",
                address=address,
            ))

        target = resolve_target(address, api_key, self.config)
        provider = self.provider_factory(BrowserConfig(
            provider_type="remote",
            remote_cdp_url=target.cdp_url,
            connect_timeout_ms=self.config.connect_timeout_ms,
        ))

        try:
            page = provider.get_page()
            if target.navigate_to:
                page.goto(
                    target.navigate_to,
                    wait_until="domcontentloaded",
                    timeout=self.config.navigation_timeout_ms,
                )
            markup = page.content()
            page_url = page.url
        except PlaywrightTimeoutError as e:
            return self._fail(address, ConnectTimeoutError(
                f"Timed out connecting to session {target.session_id}: {e}", address=address
            ))
        except PlaywrightError as e:
            return self._fail(address, SessionUnreachableError(
                f"Could not reach session {target.session_id}: {e}", address=address
            ))
        finally:
            try:
                provider.close()
            except PlaywrightError as e:
                self.event_logger.system_warning(f"Failed to disconnect from session: {e}")

        handle = SessionHandle(session_id=target.session_id, page_markup=markup or "", page_url=page_url)
        self.event_logger.session_connected(handle.session_id, len(handle.page_markup), url=page_url)
        return handle

    def _fail(self, address: str, error: ConnectorError) -> None:
        self.last_failure = error
        self.event_logger.session_failure(address, error=error.message, error_type=type(error).__name__)
        return None
