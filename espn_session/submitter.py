import logging

from playwright.async_api import Frame, Page

from . import dom
from .errors import FormNotFoundError, InvalidCredentialsError, LoginTimeoutError
from .extractor import select_session_cookies
from .human import HumanBehavior
from .locator import PASSWORD, FormLocator
from .models import LoginAttempt, Step
from .retry import RetryPolicy
from .strategies import Candidate, button_chain, first_match

logger = logging.getLogger(__name__)

SIGNAL_NAVIGATION = "navigation"
SIGNAL_COOKIES = "cookies"
SIGNAL_ERROR = "error-text"


class CredentialSubmitter:
    """Drives the email -> (continue) -> password -> submit -> verify flow."""

    def __init__(self, config: dict, locator: FormLocator, human: HumanBehavior):
        self.config = config
        self.locator = locator
        self.human = human
        sc = config["submit"]
        self.error_phrases = [p.lower() for p in sc["error_phrases"]]
        self.continue_chain = button_chain(sc["continue_phrases"], sc["button_deny_terms"], submit_first=False)
        self.submit_chain = button_chain(sc["submit_phrases"], sc["button_deny_terms"], submit_first=True)
        self.wait_policy = RetryPolicy(interval=sc["poll_interval"], max_elapsed=sc["timeout"])

    async def submit(self, page: Page, attempt: LoginAttempt, email_field: Candidate) -> None:
        """Fill and submit the form; returns once the page shows a success signal.

        Raises FormNotFoundError, InvalidCredentialsError or LoginTimeoutError.
        """
        attempt.advance(Step.ENTER_EMAIL)
        await self.human.type_like_human(email_field.handle, attempt.email)
        logger.info("Email entered")
        await self.human.random_delay(300, 800)

        password_field = await self.locator.locate(page, PASSWORD, attempts=1)
        if password_field is None:
            attempt.advance(Step.ADVANCE_STEP)
            await self._advance(email_field.frame)
            password_field = await self.locator.locate(page, PASSWORD)
        if password_field is None:
            raise FormNotFoundError(
                "Could not find password input field. ESPN may have changed its login page."
            )

        attempt.advance(Step.ENTER_PASSWORD)
        await self.human.type_like_human(password_field.handle, attempt.password)
        logger.info("Password entered")
        await self.human.random_delay(500, 1200)

        attempt.advance(Step.SUBMIT)
        button = await self._find_button(self.submit_chain, [password_field.frame, page.main_frame])
        if button is None:
            raise FormNotFoundError(
                "Could not find submit button. ESPN may have changed its login page."
            )
        url_before = page.url
        await self.human.click_with_delay(button.handle)
        logger.info("Login submitted via %s", button.heuristic)

        signal = await self._wait_for_outcome(page, url_before)
        if signal is None:
            raise LoginTimeoutError(
                f"Login did not complete within {self.wait_policy.max_elapsed:.0f}s"
            )
        if signal == SIGNAL_ERROR:
            raise InvalidCredentialsError("Invalid email or password. Please check your credentials.")

        attempt.advance(Step.VERIFY)
        if await self.find_error_text(page):
            raise InvalidCredentialsError("Login failed: invalid credentials or account locked.")
        logger.info("Login accepted (%s)", signal)

    async def _advance(self, frame: Frame) -> None:
        button = await self._find_button(self.continue_chain, [frame])
        if button is None:
            logger.info("No continue control, looking for password field directly")
            return
        logger.info("Clicking continue control via %s", button.heuristic)
        await self.human.click_with_delay(button.handle)

    async def _find_button(self, chain, frames: list[Frame]) -> Candidate | None:
        seen = []
        for frame in frames:
            if frame in seen:
                continue
            seen.append(frame)
            button = await first_match(chain, frame, "button")
            if button:
                return button
        return None

    async def _wait_for_outcome(self, page: Page, url_before: str) -> str | None:
        names = self.config["site"]["cookie_names"]

        async def probe() -> str | None:
            if page.url != url_before:
                return SIGNAL_NAVIGATION
            cookies = await page.context.cookies()
            if select_session_cookies(cookies, names, fuzzy=False):
                return SIGNAL_COOKIES
            if await self.find_error_text(page):
                return SIGNAL_ERROR
            return None

        return await self.wait_policy.poll(probe)

    async def find_error_text(self, page: Page) -> str | None:
        """Return the first error phrase visible in the page or its frames."""
        for frame in self.locator.frames(page):
            try:
                text = (await dom.body_text(frame)).lower()
            except Exception as e:
                logger.debug("Could not read text of frame %s: %s", frame.url, e)
                continue
            for phrase in self.error_phrases:
                if phrase in text:
                    logger.warning("Login page reports an error (%r)", phrase)
                    return phrase
        return None
