"""
Shared pytest fixtures for all tests.
"""
import pytest
from unittest.mock import Mock

from models.codegen_models import SessionHandle
from utils.event_logger import EventLogger, set_event_logger

SIGNUP_PAGE = (
    '<html><head><meta charset="utf-8"><title>Example</title>'
    '<script>window.track = function(){ return 1 < 2; };</script>'
    '<style>.hero { color: red; }</style></head>'
    '<body>\n  <div class="hero" data-tracking="abc">\n'
    '    <button id="signup" onclick="go()">Sign Up</button>\n  </div>\n</body></html>'
)


class FakeConnector:
    """Connector returning a canned handle (or None) and counting calls."""

    def __init__(self, markup: str = SIGNUP_PAGE, handle=True, failure=None):
        self.markup = markup
        self.return_handle = handle
        self.last_failure = failure
        self.calls = []

    def connect(self, address):
        self.calls.append(address)
        if not self.return_handle:
            return None
        return SessionHandle(session_id="session-123", page_markup=self.markup, page_url=address)


class FakeGenerator:
    """Generator returning a fixed fragment and recording its inputs."""

    def __init__(self, fragment='page.click("#signup");', on_generate=None):
        self.fragment = fragment
        self.on_generate = on_generate
        self.calls = []

    def generate(self, prompt, existing_script, sanitized_markup):
        self.calls.append((prompt, existing_script, sanitized_markup))
        if self.on_generate:
            self.on_generate()
        return self.fragment


@pytest.fixture
def event_logger():
    """Quiet event logger, installed globally for the test"""
    logger = EventLogger(debug_mode=False)
    set_event_logger(logger)
    yield logger
    set_event_logger(EventLogger(debug_mode=False))


@pytest.fixture
def fake_connector():
    return FakeConnector()


@pytest.fixture
def fake_generator():
    return FakeGenerator()


@pytest.fixture
def mock_page():
    """Mock Playwright Page object"""
    page = Mock()
    page.url = "https://example.com"
    page.content.return_value = SIGNUP_PAGE
    page.goto = Mock()
    return page


@pytest.fixture
def make_connector():
    """Factory for FakeConnector instances"""
    return FakeConnector


@pytest.fixture
def make_generator():
    """Factory for FakeGenerator instances"""
    return FakeGenerator


@pytest.fixture
def signup_page():
    return SIGNUP_PAGE
