import asyncio

import pytest

from espn_session.debug_monitor import DebugModeMonitor
from espn_session.errors import DebugTimeoutError

from fakes import FakePage


@pytest.mark.parametrize(
    "url, left",
    [
        ("https://www.espn.com/login", False),
        ("https://www.espn.com/login?redirect=fantasy", False),
        ("https://cdn.registerdisney.go.com/v2/ESPN-ONESITE.WEB-PROD/en-US", False),
        ("https://fantasy.espn.com/football/team?leagueId=1", True),
        ("https://www.espn.com/", True),
        ("https://www.google.com/", False),
        ("about:blank", False),
    ],
)
def test_left_login_surface(config, url, left):
    assert DebugModeMonitor(config).left_login_surface(url) is left


@pytest.mark.asyncio
async def test_waits_until_cookies_appear(config):
    config["debug"]["max_wait"] = 2
    page = FakePage()

    def user_logs_in():
        page.context.add_cookie("espn_s2", "s2")
        page.context.add_cookie("SWID", "{id}")

    asyncio.get_running_loop().call_later(0.05, user_logs_in)

    session = await DebugModeMonitor(config).watch(page)

    assert session.swid == "{id}"


@pytest.mark.asyncio
async def test_fuzzy_cookies_only_after_leaving_login(config):
    page = FakePage()
    page.context.add_cookie("session_token", "tok")
    page.context.add_cookie("user_id", "uid")

    with pytest.raises(DebugTimeoutError):
        await DebugModeMonitor(config).watch(page)

    page.url = "https://fantasy.espn.com/"
    session = await DebugModeMonitor(config).watch(page)

    assert (session.espn_s2, session.swid) == ("tok", "uid")


@pytest.mark.asyncio
async def test_times_out_and_reports_progress(config):
    reports = []

    with pytest.raises(DebugTimeoutError):
        await DebugModeMonitor(config).watch(FakePage(), progress=lambda e, m: reports.append(e))

    assert reports
    assert all(e <= config["debug"]["max_wait"] + 0.1 for e in reports)
