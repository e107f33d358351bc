"""The browser page the client lives in: its address bar and the messages shown to the user."""

import logging
from urllib.parse import urlsplit, urlunsplit

logger = logging.getLogger(__name__)


class BrowserPage:
    """Address bar with history, plus the alerts raised to the user."""

    def __init__(self, href: str) -> None:
        self.href = href
        self.history: list[str] = [href]
        self.alerts: list[str] = []

    @property
    def origin(self) -> str:
        scheme, netloc, *_ = urlsplit(self.href)
        return urlunsplit((scheme, netloc, "", "", ""))

    @property
    def path(self) -> str:
        return urlsplit(self.href).path or "/"

    def assign(self, url: str) -> None:
        """Navigate to url. Adds a history entry."""
        logger.info("Navigating to %s", url)
        self.history.append(url)
        self.href = url

    def replace_state(self, url: str) -> None:
        """Rewrite the visible address without navigating or adding a history entry."""
        self.history[-1] = url
        self.href = url

    def alert(self, message: str) -> None:
        logger.info("Alert: %s", message)
        self.alerts.append(message)
