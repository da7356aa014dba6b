import asyncio
import logging

from playwright.async_api import Page

from .errors import MissingSessionCookiesError
from .models import Session
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

# Substrings tried, in order, when the canonical cookie names are absent
S2_FUZZY_TERMS = ("s2", "session")
SWID_FUZZY_TERMS = ("swid", "id")


def _pick(cookies: list[dict], match, exclude: dict | None = None) -> dict | None:
    for cookie in cookies:
        if cookie is exclude or not cookie.get("value"):
            continue
        if match(cookie.get("name") or ""):
            return cookie
    return None


def select_session_cookies(
    cookies: list[dict], names: list[str], fuzzy: bool = True
) -> Session | None:
    """Pick the session cookie pair out of a cookie jar.

    Exact names first, then the same names ignoring case, then (if `fuzzy`)
    substrings of the name. The second cookie is never the one already
    picked as the first.
    """
    s2_name, swid_name = names

    s2 = _pick(cookies, lambda n: n == s2_name) or _pick(
        cookies, lambda n: n.lower() == s2_name.lower()
    )
    swid = _pick(cookies, lambda n: n == swid_name, s2) or _pick(
        cookies, lambda n: n.lower() == swid_name.lower(), s2
    )

    if fuzzy:
        for term in S2_FUZZY_TERMS:
            if s2:
                break
            s2 = _pick(cookies, lambda n: term in n.lower(), swid)
        for term in SWID_FUZZY_TERMS:
            if swid:
                break
            swid = _pick(cookies, lambda n: term in n.lower(), s2)

    if not (s2 and swid):
        return None
    if s2["name"] != s2_name or swid["name"] != swid_name:
        logger.info("Using fallback session cookies: %s, %s", s2["name"], swid["name"])
    return Session(espn_s2=s2["value"], swid=swid["value"])


class SessionExtractor:
    def __init__(self, config: dict):
        self.config = config
        ec = config["extract"]
        self.settle_delay = ec["settle_delay"]
        self.policy = RetryPolicy(attempts=ec["cookie_reads"], interval=ec["read_interval"])

    async def extract(self, page: Page) -> Session:
        """Load the fantasy app so its own cookies get set, then read the jar."""
        site = self.config["site"]
        logger.info("Navigating to %s to collect session cookies", site["app_url"])
        await page.goto(
            site["app_url"],
            wait_until="domcontentloaded",
            timeout=self.config["browser"]["navigation_timeout"] * 1000,
        )
        await asyncio.sleep(self.settle_delay)

        seen: list[str] = []

        async def read() -> Session | None:
            cookies = await page.context.cookies()
            seen[:] = sorted({c.get("name", "") for c in cookies})
            return select_session_cookies(cookies, site["cookie_names"], fuzzy=True)

        session = await self.policy.poll(read)
        if session is None:
            logger.warning("Available cookie names: %s", seen)
            names = " and ".join(site["cookie_names"])
            raise MissingSessionCookiesError(f"Could not extract required session cookies ({names})")
        logger.info("Extracted session cookies")
        return session
