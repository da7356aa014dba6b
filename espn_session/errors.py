from enum import Enum


class ErrorKind(str, Enum):
    BROWSER_INIT = "BrowserInitError"
    FORM_NOT_FOUND = "FormNotFoundError"
    INVALID_CREDENTIALS = "InvalidCredentials"
    TIMEOUT = "Timeout"
    MISSING_SESSION_COOKIES = "MissingSessionCookies"
    DEBUG_TIMEOUT = "DebugTimeout"
    UNEXPECTED = "Unexpected"


class LoginError(Exception):
    """Base for every classified login failure."""

    kind: ErrorKind = ErrorKind.UNEXPECTED


class BrowserInitError(LoginError):
    kind = ErrorKind.BROWSER_INIT


class FormNotFoundError(LoginError):
    kind = ErrorKind.FORM_NOT_FOUND


class InvalidCredentialsError(LoginError):
    kind = ErrorKind.INVALID_CREDENTIALS


class LoginTimeoutError(LoginError):
    kind = ErrorKind.TIMEOUT


class MissingSessionCookiesError(LoginError):
    kind = ErrorKind.MISSING_SESSION_COOKIES


class DebugTimeoutError(LoginError):
    kind = ErrorKind.DEBUG_TIMEOUT
