import logging

import requests

from .models import Session

logger = logging.getLogger(__name__)

API_BASE = "https://lm-api-reads.fantasy.espn.com/apis/v3/games"
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
AUTH_TERMS = ("unauthorized", "authentication", "login", "access denied")


def verify_session(
    session: Session, league_id: str, season: int, sport: str = "ffl", timeout: float = 10
) -> bool:
    """Check a session against the fantasy API using one of the user's leagues.

    200 means valid with access, 403 means valid without access to this
    league. Anything else, including transport errors, counts as invalid.
    """
    url = f"{API_BASE}/{sport}/seasons/{season}/segments/0/leagues/{league_id}"
    try:
        resp = requests.get(
            url,
            params={"view": "mTeam"},
            headers={
                "Cookie": session.cookie_header(),
                "User-Agent": USER_AGENT,
                "Accept": "application/json",
            },
            timeout=timeout,
        )
    except requests.RequestException as e:
        logger.error("Session check request failed: %s", e)
        return False

    if resp.status_code == 200:
        logger.info("Session valid with access to league %s", league_id)
        return True
    if resp.status_code == 403:
        logger.info("Session valid but no access to league %s", league_id)
        return True
    if resp.status_code == 401:
        logger.warning("Session rejected (401 Unauthorized)")
        return False
    if resp.status_code == 404:
        try:
            payload = resp.json()
        except ValueError:
            payload = {}
        messages = (payload.get("messages") or []) if isinstance(payload, dict) else []
        texts = [str(m.get("message", "")).lower() for m in messages if isinstance(m, dict)]
        if any(term in text for text in texts for term in AUTH_TERMS):
            logger.warning("Session rejected (404 with authentication error)")
        else:
            logger.warning("League %s season %s not found; check the league id and season", league_id, season)
        return False

    logger.error("Fantasy API error: %s %s", resp.status_code, resp.text[:200])
    return False
