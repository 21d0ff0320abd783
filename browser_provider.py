"""
Browser Provider Pattern for the codegen loop.

This module keeps Playwright plumbing away from the session connector,
which only needs a ready ``Page``. Providers can be swapped for a mock in
tests.

Example:
    >>> from browser_provider import RemoteBrowserProvider, BrowserConfig
    >>> provider = RemoteBrowserProvider(BrowserConfig(
    ...     remote_cdp_url="wss://connect.browserbase.com?apiKey=...&sessionId=..."
    ... ))
    >>> page = provider.get_page()
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from playwright.sync_api import Page, Browser, Playwright, sync_playwright
from pydantic import BaseModel, Field


class BrowserConfig(BaseModel):
    """Configuration for browser providers."""

    provider_type: str = Field(
        default="remote",
        description="Browser provider type: 'remote' or 'mock'"
    )
    remote_cdp_url: Optional[str] = Field(
        default=None,
        description="CDP endpoint URL for the remote browser (e.g., Browserbase)"
    )
    connect_timeout_ms: int = Field(
        default=30000,
        ge=1,
        description="Deadline for establishing the CDP connection"
    )
    viewport_width: int = Field(
        default=1280,
        ge=100,
        description="Viewport width used when the remote browser has no context yet"
    )
    viewport_height: int = Field(
        default=800,
        ge=100,
        description="Viewport height used when the remote browser has no context yet"
    )

    class Config:
        arbitrary_types_allowed = True


class BrowserProvider(ABC):
    """
    Abstract base class for browser providers.

    Implementations must provide a way to get a Playwright Page object
    and handle cleanup.
    """

    def __init__(self, config: BrowserConfig):
        self.config = config
        self._page: Optional[Page] = None
        self._browser: Optional[Browser] = None
        self._playwright: Optional[Playwright] = None

    @abstractmethod
    def get_page(self) -> Page:
        """
        Get or create a Playwright Page object.

        Returns:
            Page: Playwright page ready for automation
        """

    @abstractmethod
    def close(self) -> None:
        """
        Release the connection (disconnect, stop playwright, etc.)
        """

    def __enter__(self) -> "BrowserProvider":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class RemoteBrowserProvider(BrowserProvider):
    """
    Browser provider that attaches to a remote browser via CDP.

    The first page of the default context is reused so the markup matches
    what the remote session is currently showing.

    Example:
        >>> config = BrowserConfig(remote_cdp_url="wss://connect.browserbase.com?apiKey=...")
        >>> provider = RemoteBrowserProvider(config)
        >>> page = provider.get_page()
    """

    def get_page(self) -> Page:
        """Connect to remote browser and return page."""
        if self._page is not None and not self._page.is_closed():
            return self._page

        if not self.config.remote_cdp_url:
            raise ValueError("remote_cdp_url is required for RemoteBrowserProvider")

        self._playwright = sync_playwright().start()
        self._browser = self._playwright.chromium.connect_over_cdp(
            self.config.remote_cdp_url,
            timeout=self.config.connect_timeout_ms,
        )

        contexts = self._browser.contexts
        if contexts:
            context = contexts[0]
            pages = context.pages
            self._page = pages[0] if pages else context.new_page()
        else:
            context = self._browser.new_context(
                viewport={
                    "width": self.config.viewport_width,
                    "height": self.config.viewport_height
                }
            )
            self._page = context.new_page()

        return self._page

    def close(self) -> None:
        """Disconnect from remote browser."""
        try:
            if self._browser:
                self._browser.close()
        finally:
            self._browser = None
            if self._playwright:
                self._playwright.stop()
                self._playwright = None
            self._page = None


class MockBrowserProvider(BrowserProvider):
    """
    Mock browser provider for testing.

    Returns the page object it was given; no browser is started.

    Example:
        >>> provider = MockBrowserProvider(BrowserConfig(provider_type="mock"), mock_page=page)
        >>> provider.get_page() is page
        True
    """

    def __init__(self, config: BrowserConfig, mock_page: Optional[Page] = None):
        super().__init__(config)
        self._mock_page = mock_page
        self.closed = False

    def get_page(self) -> Page:
        """Return mock page."""
        if self._mock_page is not None:
            return self._mock_page

        raise NotImplementedError(
            "MockBrowserProvider requires a mock_page to be provided. "
            "Use: MockBrowserProvider(config, mock_page=your_mock)"
        )

    def close(self) -> None:
        self.closed = True


def create_browser_provider(config: BrowserConfig) -> BrowserProvider:
    """
    Factory function to create appropriate browser provider from config.

    Args:
        config: Browser configuration

    Returns:
        BrowserProvider: Appropriate provider implementation
    """
    if config.provider_type == "remote":
        return RemoteBrowserProvider(config)
    elif config.provider_type == "mock":
        return MockBrowserProvider(config)
    else:
        raise ValueError(
            f"Unknown provider_type: {config.provider_type}. "
            f"Must be one of: remote, mock"
        )
