"""python-hilink exceptions."""

from __future__ import annotations

from asyncio import TimeoutError as _asyncioTimeoutError
from enum import IntEnum
from typing import Any


class HilinkException(Exception):
    """Base exception for library errors."""


class TimeoutError(HilinkException, _asyncioTimeoutError):
    """Timeout exception for device errors."""

    def __repr__(self) -> str:
        return HilinkException.__repr__(self)

    def __str__(self) -> str:
        return HilinkException.__str__(self)


class _ConnectionError(HilinkException):
    """Connection exception for device errors."""


class ResponseError(HilinkException):
    """Device answered with an error envelope."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self.error_code: int | None = kwargs.get("error_code")
        super().__init__(*args)

    @property
    def message(self) -> str:
        """Descriptive message of the error."""
        return str(self.args[0]) if self.args else ""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, {self.error_code!r})"


class NotSupportedError(ResponseError):
    """Endpoint is not supported by the device or its firmware."""


class AuthenticationError(ResponseError):
    """Base exception for device authentication errors."""


class UsernameWrongError(AuthenticationError):
    """Username is not known to the device."""


class PasswordWrongError(AuthenticationError):
    """Password was rejected."""


class AlreadyLoggedInError(AuthenticationError):
    """Device reports the user is already logged in."""


class UsernameOrPasswordWrongError(AuthenticationError):
    """Username and password combination was rejected."""


class CredentialAttemptsExhaustedError(AuthenticationError):
    """Too many failed login attempts, device is refusing logins."""


class PasswordMustBeChangedError(AuthenticationError):
    """Password has to be changed before logging in."""


class GenericLoginError(AuthenticationError):
    """Login failed with an error code the library does not know."""


class ResponseCode(IntEnum):
    """Enum for generic API response error codes."""

    def __str__(self) -> str:
        return f"{self.name}({self.value})"

    ERROR_SYSTEM_UNKNOWN = 100001
    ERROR_SYSTEM_NO_SUPPORT = 100002
    ERROR_SYSTEM_NO_RIGHTS = 100003
    ERROR_SYSTEM_BUSY = 100004
    ERROR_FORMAT_ERROR = 100005
    ERROR_PARAMETER_ERROR = 100006

    # Session errors
    ERROR_WRONG_TOKEN = 125001
    ERROR_WRONG_SESSION = 125002
    ERROR_WRONG_SESSION_TOKEN = 125003


class LoginErrorCode(IntEnum):
    """Enum for error codes returned by user/login."""

    def __str__(self) -> str:
        return f"{self.name}({self.value})"

    USERNAME_WRONG = 108001
    PASSWORD_WRONG = 108002
    ALREADY_LOGIN = 108003
    USERNAME_PWD_WRONG = 108006
    USERNAME_PWD_OVERRUN = 108007
    USERNAME_PWD_MODIFY = 115002


def response_error_for_code(code: int, message: str = "") -> ResponseError:
    """Return the generic response error for an envelope error code."""
    msg = f"{code}: {message}" if message else str(code)
    if code == ResponseCode.ERROR_SYSTEM_NO_SUPPORT:
        return NotSupportedError(msg, error_code=code)
    return ResponseError(msg, error_code=code)


def login_error_for_code(code: int) -> AuthenticationError:
    """Classify a user/login error code into a typed authentication error."""
    match code:
        case LoginErrorCode.USERNAME_WRONG:
            exc, message = UsernameWrongError, "Username wrong"
        case LoginErrorCode.PASSWORD_WRONG:
            exc, message = PasswordWrongError, "Password wrong"
        case LoginErrorCode.ALREADY_LOGIN:
            exc, message = AlreadyLoggedInError, "Already login"
        case LoginErrorCode.USERNAME_PWD_WRONG:
            exc, message = UsernameOrPasswordWrongError, "Username and Password wrong"
        case LoginErrorCode.USERNAME_PWD_OVERRUN:
            exc, message = CredentialAttemptsExhaustedError, "Password overrun"
        case LoginErrorCode.USERNAME_PWD_MODIFY:
            exc, message = PasswordMustBeChangedError, "Password modify"
        case _:
            exc, message = GenericLoginError, "Unknown"
    return exc(f"{code}: {message}", error_code=code)
