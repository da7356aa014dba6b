import pytest

from espn_session.config import AppConfig


@pytest.fixture
def config():
    """Default settings with every delay shrunk so tests run in milliseconds."""
    cfg = AppConfig().model_dump()
    cfg["browser"].update(human_delays=False, stealth=False, acquire_timeout=2)
    cfg["locator"].update(retry_attempts=2, retry_interval=0)
    cfg["reveal"]["settle_delay"] = 0
    cfg["submit"].update(timeout=0.2, poll_interval=0.01)
    cfg["extract"].update(settle_delay=0, read_interval=0)
    cfg["debug"].update(poll_interval=0.01, max_wait=0.2, progress_interval=0.05)
    cfg["timeouts"].update(automated=5, debug_grace=1)
    return cfg
