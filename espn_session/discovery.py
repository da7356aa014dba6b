import logging
import re
from urllib.parse import urlparse

from playwright.async_api import Page

from . import dom
from .models import LeagueDescriptor

logger = logging.getLogger(__name__)

LEAGUE_ID_RE = re.compile(r"leagueId[=/](\d+)", re.IGNORECASE)
SEASON_RE = re.compile(r"seasonId[=/](\d{4})", re.IGNORECASE)

SPORT_CODES = {
    "football": "ffl",
    "basketball": "fba",
    "baseball": "flb",
    "hockey": "fhl",
}


class LeagueDiscovery:
    """Best-effort scrape of the fantasy landing page for the user's leagues."""

    def __init__(self, config: dict):
        self.dc = config["discovery"]

    def placeholder(self) -> LeagueDescriptor:
        return LeagueDescriptor(
            id=self.dc["placeholder_id"],
            name=self.dc["placeholder_name"],
            sport=self.dc["placeholder_sport"],
            season=self.dc["default_season"],
        )

    def parse(self, entries: list[dict]) -> list[LeagueDescriptor]:
        leagues: dict[str, LeagueDescriptor] = {}
        for entry in entries:
            href = entry.get("href") or ""
            match = LEAGUE_ID_RE.search(href)
            if not match or match.group(1) in leagues:
                continue
            season = SEASON_RE.search(href)
            leagues[match.group(1)] = LeagueDescriptor(
                id=match.group(1),
                name=(entry.get("name") or "").strip() or self.dc["placeholder_name"],
                sport=self._sport(href),
                season=int(season.group(1)) if season else self.dc["default_season"],
            )
        return list(leagues.values())

    def _sport(self, href: str) -> str:
        for segment in urlparse(href).path.lower().split("/"):
            if segment in SPORT_CODES:
                return SPORT_CODES[segment]
        return self.dc["placeholder_sport"]

    async def discover(self, page: Page) -> list[LeagueDescriptor]:
        try:
            entries = await dom.collect_leagues(
                page.main_frame,
                self.dc["container_selectors"],
                self.dc["name_selectors"],
                self.dc["link_selector"],
            )
            leagues = self.parse(entries or [])
        except Exception as e:
            logger.warning("League discovery failed: %s", e)
            leagues = []

        if not leagues:
            logger.info("No leagues found on page, using placeholder")
            return [self.placeholder()]
        logger.info("Discovered %d league(s)", len(leagues))
        return leagues
