import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from . import dom
from .human import HumanBehavior
from .locator import EMAIL, PASSWORD, FormLocator
from .strategies import Strategy, first_match, selector_trigger_chain, text_trigger_chain

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RevealStrategy:
    """One way of surfacing a hidden login form. `run` reports whether it acted."""

    name: str
    run: Callable[[Page], Awaitable[bool]]


class UIRevealer:
    """Forces an overlay or script-rendered login form into view.

    Strategies run in order, each at most once per reveal() call, until one of
    them leaves a login-shaped input visible after the settle delay.
    """

    def __init__(self, config: dict, locator: FormLocator, human: HumanBehavior):
        self.config = config
        self.locator = locator
        self.human = human
        rc = config["reveal"]
        self.settle_delay = rc["settle_delay"]
        self._text_chain = text_trigger_chain(rc["login_phrases"], rc["trigger_deny_terms"])
        self._selector_chain = selector_trigger_chain(rc["trigger_selectors"], rc["trigger_deny_terms"])

        available = {
            "hooks": RevealStrategy("hooks", self._call_hooks),
            "events": RevealStrategy("events", self._dispatch_events),
            "text": RevealStrategy("text", self._click_login_text),
            "selectors": RevealStrategy("selectors", self._click_login_selector),
            "inject": RevealStrategy("inject", self._inject_form),
        }
        unknown = [name for name in rc["strategies"] if name not in available]
        if unknown:
            raise ValueError(f"Unknown reveal strategies: {unknown}")
        self.strategies = [available[name] for name in rc["strategies"]]

    async def form_visible(self, page: Page) -> bool:
        for kind in (EMAIL, PASSWORD):
            if await self.locator.search_once(page, kind):
                return True
        return False

    async def reveal(self, page: Page) -> str | None:
        """Return the name of the strategy that surfaced the form, or None."""
        for strategy in self.strategies:
            try:
                acted = await strategy.run(page)
            except PlaywrightError as e:
                logger.debug("Reveal strategy %s failed: %s", strategy.name, e)
                continue
            if not acted:
                logger.debug("Reveal strategy %s not applicable", strategy.name)
                continue

            await asyncio.sleep(self.settle_delay)
            if await self.form_visible(page):
                logger.info("Login form revealed via %s", strategy.name)
                return strategy.name
            logger.info("Reveal strategy %s acted but no login form appeared", strategy.name)

        logger.warning("No reveal strategy surfaced a login form")
        return None

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    async def _call_hooks(self, page: Page) -> bool:
        hook = await dom.call_hooks(page.main_frame, self.config["reveal"]["global_hooks"])
        if hook:
            logger.info("Called login hook window.%s", hook)
        return bool(hook)

    async def _dispatch_events(self, page: Page) -> bool:
        rc = self.config["reveal"]
        fired = await dom.dispatch_events(page.main_frame, rc["event_selectors"], rc["event_keys"])
        return fired > 0

    async def _click_first(self, page: Page, chain: list[Strategy]) -> bool:
        candidate = await first_match(chain, page.main_frame, "trigger")
        if candidate is None:
            return False
        logger.info(
            "Clicking login trigger via %s: %r",
            candidate.heuristic,
            candidate.attrs.get("text") or candidate.attrs.get("href"),
        )
        await self.human.click_with_delay(candidate.handle)
        return True

    async def _click_login_text(self, page: Page) -> bool:
        return await self._click_first(page, self._text_chain)

    async def _click_login_selector(self, page: Page) -> bool:
        return await self._click_first(page, self._selector_chain)

    async def _inject_form(self, page: Page) -> bool:
        injected = await dom.inject_form(page.main_frame, self.config["site"]["login_url"])
        if injected:
            logger.warning("Injected fallback login form into %s", page.url)
        return bool(injected)
