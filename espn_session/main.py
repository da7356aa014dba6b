import argparse
import asyncio
import json
import logging
import logging.handlers
import os
import sys
from dataclasses import asdict

from dotenv import load_dotenv

from .auth import Authenticator
from .config import AppConfig, load_config
from .models import Mode, Result, Success
from .probe import verify_session

logger = logging.getLogger("espn_session")


# ------------------------------------------------------------------
# Logging setup
# ------------------------------------------------------------------

def setup_logging() -> None:
    os.makedirs("logs", exist_ok=True)

    root = logging.getLogger()
    debug = os.environ.get("DEBUG_LOGS", "").lower() == "true"
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    # Console (stderr, so stdout carries only the JSON result)
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(fmt)
    root.addHandler(console)

    # Rotating file
    fh = logging.handlers.RotatingFileHandler(
        "logs/espn_session.log",
        maxBytes=10_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    fh.setFormatter(fmt)
    root.addHandler(fh)


def parse_args(argv=None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Sign in to ESPN and print the espn_s2/SWID session cookies.")
    ap.add_argument("--email", help="Account email (default: $ESPN_EMAIL)")
    ap.add_argument("--mode", choices=[m.value for m in Mode], default=Mode.AUTOMATED.value)
    ap.add_argument("--config", default="config/settings.yaml", help="Optional YAML settings file")
    ap.add_argument("--verify-league", metavar="LEAGUE_ID", help="Check the cookies against this league")
    ap.add_argument("--season", type=int, help="Season for --verify-league (default: discovery.default_season)")
    return ap.parse_args(argv)


def result_to_dict(result: Result) -> dict:
    if isinstance(result, Success):
        return {
            "ok": True,
            "espn_s2": result.session.espn_s2,
            "swid": result.session.swid,
            "leagues": [asdict(league) for league in result.leagues],
        }
    return {"ok": False, "error": result.kind.value, "message": result.message}


async def run(config: dict, email: str, password: str, mode: str) -> Result:
    auth = Authenticator(config)
    try:
        return await auth.authenticate(email, password, mode)
    finally:
        await auth.shutdown()


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------

def main(argv=None) -> None:
    load_dotenv()  # Load .env file automatically
    setup_logging()
    args = parse_args(argv)

    app_config: AppConfig = load_config(args.config)
    email = args.email or app_config.site.email
    password = app_config.site.password

    missing = []
    if not email and args.mode == Mode.AUTOMATED.value:
        missing.append("ESPN_EMAIL")
    if not password and args.mode == Mode.AUTOMATED.value:
        missing.append("ESPN_PASSWORD")
    if missing:
        logger.error("Missing required config/env vars: %s", ", ".join(missing))
        sys.exit(2)

    config = app_config.model_dump()
    result = asyncio.run(run(config, email, password, args.mode))

    output = result_to_dict(result)
    if isinstance(result, Success) and args.verify_league:
        season = args.season or config["discovery"]["default_season"]
        output["verified"] = verify_session(result.session, args.verify_league, season)

    print(json.dumps(output, indent=2))
    sys.exit(0 if result.ok else 1)


if __name__ == "__main__":
    main()
