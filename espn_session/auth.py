import asyncio
import logging
import re

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .browser import BrowserSessionManager
from .config import load_config
from .debug_monitor import DebugModeMonitor
from .discovery import LeagueDiscovery
from .errors import ErrorKind, FormNotFoundError, LoginError
from .extractor import SessionExtractor
from .human import HumanBehavior
from .locator import EMAIL, FormLocator
from .models import Failure, LoginAttempt, Mode, Result, Session, Step, Success
from .revealer import UIRevealer
from .submitter import CredentialSubmitter

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class Authenticator:
    """Signs in to ESPN and returns the session cookie pair.

    authenticate() never raises: every failure comes back as a Failure with
    its ErrorKind, and the page it opened is closed before it returns.
    """

    def __init__(self, config: dict, manager: BrowserSessionManager | None = None):
        self.config = config
        self.manager = manager or BrowserSessionManager(config)
        self.human = HumanBehavior(enabled=config["browser"]["human_delays"])
        self.locator = FormLocator(config)
        self.revealer = UIRevealer(config, self.locator, self.human)
        self.submitter = CredentialSubmitter(config, self.locator, self.human)
        self.extractor = SessionExtractor(config)
        self.monitor = DebugModeMonitor(config)
        self.discovery = LeagueDiscovery(config)

    async def authenticate(self, email: str, password: str, mode: Mode | str = Mode.AUTOMATED) -> Result:
        try:
            mode = Mode(mode)
        except ValueError:
            return Failure(ErrorKind.UNEXPECTED, f"Unknown login mode: {mode!r}")

        if mode is Mode.AUTOMATED:
            if not EMAIL_RE.match(email or ""):
                return Failure(ErrorKind.INVALID_CREDENTIALS, "Please enter a valid email address")
            if not password:
                return Failure(ErrorKind.INVALID_CREDENTIALS, "Please enter your password")

        attempt = LoginAttempt(email=email or "", password=password or "", mode=mode)
        limit = self._time_limit(mode)
        logger.info("Starting %s login", mode.value)

        try:
            result = await asyncio.wait_for(self._run(attempt), timeout=limit)
        except LoginError as e:
            logger.warning("Login failed at %s: [%s] %s", attempt.step.value, e.kind.value, e)
            return Failure(e.kind, str(e))
        except (asyncio.TimeoutError, PlaywrightTimeoutError) as e:
            logger.warning("Login timed out at %s: %s", attempt.step.value, e)
            return Failure(
                ErrorKind.TIMEOUT,
                "Login timed out. Please check your internet connection and try again.",
            )
        except Exception as e:
            logger.exception("Unexpected login error at %s", attempt.step.value)
            return Failure(ErrorKind.UNEXPECTED, str(e) or e.__class__.__name__)

        logger.info("Login succeeded in %.1fs", attempt.elapsed())
        return result

    def _time_limit(self, mode: Mode) -> float:
        if mode is Mode.DEBUG:
            return self.config["debug"]["max_wait"] + self.config["timeouts"]["debug_grace"]
        return self.config["timeouts"]["automated"]

    async def _run(self, attempt: LoginAttempt) -> Success:
        # Debug mode always needs a window; automated runs follow browser.headless
        visible = attempt.mode is Mode.DEBUG or not self.config["browser"]["headless"]
        async with self.manager.session(visible=visible) as page:
            await self._open_login(page)
            if attempt.mode is Mode.DEBUG:
                session = await self._run_debug(page, attempt)
            else:
                session = await self._run_automated(page, attempt)
            leagues = await self.discovery.discover(page)
            return Success(session=session, leagues=leagues)

    async def _open_login(self, page: Page) -> None:
        site = self.config["site"]
        logger.info("Navigating to %s", site["login_url"])
        await page.goto(
            site["login_url"],
            wait_until="domcontentloaded",
            timeout=self.config["browser"]["navigation_timeout"] * 1000,
        )
        await self.human.random_delay(2000, 4000)

    async def _run_automated(self, page: Page, attempt: LoginAttempt) -> Session:
        attempt.advance(Step.LOCATE_FORM)
        email_field = await self.locator.locate(page, EMAIL, attempts=1)
        if email_field is None:
            await self.revealer.reveal(page)
            email_field = await self.locator.locate(page, EMAIL)

        if email_field is None:
            logger.warning("Inputs on page: %s", await self.locator.describe_inputs(page))
            raise FormNotFoundError(
                "Could not find email input field on login page. "
                "ESPN may have changed its authentication markup."
            )

        await self.submitter.submit(page, attempt, email_field)
        return await self.extractor.extract(page)

    async def _run_debug(self, page: Page, attempt: LoginAttempt) -> Session:
        if attempt.email:
            email_field = await self.locator.search_once(page, EMAIL)
            if email_field:
                try:
                    await email_field.handle.fill(attempt.email)
                    logger.info("Pre-filled email; finish the login in the browser window")
                except PlaywrightError as e:
                    logger.debug("Could not pre-fill email: %s", e)
        return await self.monitor.watch(page)

    async def shutdown(self) -> None:
        await self.manager.shutdown()


_default: Authenticator | None = None


async def authenticate(
    email: str, password: str, mode: Mode | str = Mode.AUTOMATED, config: dict | None = None
) -> Result:
    """Process-wide entry point; the Authenticator is created on first use."""
    global _default
    if _default is None:
        _default = Authenticator(config or load_config().model_dump())
    return await _default.authenticate(email, password, mode)
