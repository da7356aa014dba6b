import logging
import time
from dataclasses import dataclass, field
from enum import Enum

from .errors import ErrorKind

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    AUTOMATED = "automated"
    DEBUG = "debug"


class Step(str, Enum):
    LOCATE_FORM = "locate-form"
    ENTER_EMAIL = "enter-email"
    ADVANCE_STEP = "advance-step"
    ENTER_PASSWORD = "enter-password"
    SUBMIT = "submit"
    VERIFY = "verify"


@dataclass(frozen=True)
class Session:
    espn_s2: str
    swid: str

    def cookie_header(self) -> str:
        return f"espn_s2={self.espn_s2}; SWID={self.swid};"

    def __repr__(self) -> str:
        # Never leak token values into logs or tracebacks
        return f"Session(espn_s2=<{len(self.espn_s2)} chars>, swid=<{len(self.swid)} chars>)"


@dataclass(frozen=True)
class LeagueDescriptor:
    id: str
    name: str
    sport: str
    season: int


@dataclass
class LoginAttempt:
    email: str
    password: str = field(repr=False)
    mode: Mode = Mode.AUTOMATED
    step: Step = Step.LOCATE_FORM
    started_at: float = field(default_factory=time.monotonic)

    def advance(self, step: Step) -> None:
        logger.info("Login step: %s -> %s", self.step.value, step.value)
        self.step = step

    def elapsed(self) -> float:
        return time.monotonic() - self.started_at


@dataclass(frozen=True)
class Success:
    session: Session
    leagues: list[LeagueDescriptor]

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False


Result = Success | Failure
