import logging
from typing import Callable
from urllib.parse import urlparse

from playwright.async_api import Page

from .errors import DebugTimeoutError
from .extractor import select_session_cookies
from .models import Session
from .retry import RetryPolicy

logger = logging.getLogger(__name__)


class DebugModeMonitor:
    """Watches a visible browser while a human completes the login.

    Succeeds when the session cookies appear, or when the page has moved off
    the login surface onto the target site and the fuzzy cookie fallback finds
    a pair.
    """

    def __init__(self, config: dict):
        self.config = config
        dc = config["debug"]
        self.max_wait = dc["max_wait"]
        self.progress_interval = dc["progress_interval"]
        self.policy = RetryPolicy(interval=dc["poll_interval"], max_elapsed=dc["max_wait"])

    def left_login_surface(self, url: str) -> bool:
        site = self.config["site"]
        parsed = urlparse(url)
        host = (parsed.hostname or "").lower()
        if not host:
            return False

        def under(domain: str) -> bool:
            return host == domain or host.endswith("." + domain)

        if any(under(d.lower()) for d in site["login_domains"]):
            return False
        if "login" in parsed.path.lower():
            return False
        return under(site["target_domain"].lower())

    async def watch(
        self, page: Page, progress: Callable[[float, float], None] | None = None
    ) -> Session:
        names = self.config["site"]["cookie_names"]
        next_report = self.progress_interval

        async def probe() -> Session | None:
            cookies = await page.context.cookies()
            session = select_session_cookies(cookies, names, fuzzy=False)
            if session:
                logger.info("Session cookies detected")
                return session
            if self.left_login_surface(page.url):
                session = select_session_cookies(cookies, names, fuzzy=True)
                if session:
                    logger.info("Left login page (%s), using fallback cookies", page.url)
                return session
            return None

        def on_tick(attempt: int, elapsed: float) -> None:
            nonlocal next_report
            if self.progress_interval <= 0 or elapsed < next_report:
                return
            logger.info("Waiting for manual login... %.0fs of %.0fs", elapsed, self.max_wait)
            if progress:
                progress(elapsed, self.max_wait)
            while next_report <= elapsed:
                next_report += self.progress_interval

        logger.info("Debug mode: complete the login in the browser window (up to %.0fs)", self.max_wait)
        session = await self.policy.poll(probe, on_tick)
        if session is None:
            raise DebugTimeoutError(
                f"No completed login detected within {self.max_wait:.0f}s"
            )
        return session
