"""Login related enums reported by the device."""

from __future__ import annotations

from enum import IntEnum


class LoginState(IntEnum):
    """Login state as reported by user/state-login."""

    LOGGED_IN = 0
    LOGGED_OUT = -1
    REPEAT = -2


class PasswordType(IntEnum):
    """Password encoding demanded by the device."""

    BASE_64 = 0
    SHA256 = 4
