import logging

from playwright.async_api import Frame, Page

from . import dom
from .retry import RetryPolicy
from .strategies import Candidate, first_match, input_chain

logger = logging.getLogger(__name__)

EMAIL = "email"
PASSWORD = "password"


class FormLocator:
    """Finds credential inputs in the main document, then in child frames.

    Each frame is searched with the same ordered heuristic chain: exact input
    type, then allow-list terms in name, id, class, placeholder and
    autocomplete. Inputs matching the deny-list (site search boxes) are
    skipped whatever else they match.
    """

    def __init__(self, config: dict):
        lc = config["locator"]
        self.max_frames = lc["max_frames"]
        self.policy = RetryPolicy(attempts=lc["retry_attempts"], interval=lc["retry_interval"])
        self.chains = {
            EMAIL: input_chain(EMAIL, lc["email_terms"], lc["deny_terms"]),
            PASSWORD: input_chain(PASSWORD, lc["password_terms"], lc["deny_terms"]),
        }

    def frames(self, page: Page) -> list[Frame]:
        """Main frame first, then at most `max_frames` child frames in page order."""
        children = [f for f in page.frames if f is not page.main_frame]
        return [page.main_frame] + children[: self.max_frames]

    async def search_once(self, page: Page, kind: str) -> Candidate | None:
        for frame in self.frames(page):
            try:
                candidate = await first_match(self.chains[kind], frame, kind)
            except Exception as e:
                # Frames detach while the login widget re-renders
                logger.debug("Skipping frame %s: %s", frame.url, e)
                continue
            if candidate:
                if frame is not page.main_frame:
                    logger.info("Found %s input inside frame %s", kind, frame.url)
                return candidate
        return None

    async def locate(self, page: Page, kind: str, attempts: int | None = None) -> Candidate | None:
        policy = self.policy
        if attempts is not None:
            policy = RetryPolicy(attempts=attempts, interval=policy.interval)

        def on_tick(attempt: int, elapsed: float) -> None:
            logger.info("Attempt %d to find %s input failed (%.1fs)", attempt, kind, elapsed)

        candidate = await policy.poll(lambda: self.search_once(page, kind), on_tick)
        if candidate:
            logger.info("Selected %s input via %s", kind, candidate.heuristic)
        return candidate

    async def describe_inputs(self, page: Page) -> list[dict]:
        """Every input in every searched frame, for diagnosing markup changes."""
        inventory = []
        for frame in self.frames(page):
            try:
                inputs = await dom.collect_elements(frame, "input")
            except Exception as e:
                logger.debug("Could not inspect frame %s: %s", frame.url, e)
                continue
            for attrs in inputs:
                inventory.append(
                    {
                        "frame": frame.url,
                        **{k: attrs.get(k) for k in ("type", "name", "id", "placeholder", "className", "visible")},
                    }
                )
        return inventory
