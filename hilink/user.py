"""Endpoints of the user api group, including login negotiation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .apigroup import ApiGroup
from .connection import RESPONSE_OK, BaseConnection
from .credentials import Credentials
from .enums import LoginState, PasswordType
from .exceptions import NotSupportedError, ResponseError, login_error_for_code
from .password import encode_password
from .retry import RetryPolicy, retry_call

_LOGGER = logging.getLogger(__name__)


def _int_or_default(response: dict[str, Any], key: str, default: int) -> int:
    value = response.get(key)
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        _LOGGER.debug("Unable to parse %s=%r, using %s", key, value, default)
        return default


@dataclass(frozen=True)
class LoginStatus:
    """Login state and password type reported by user/state-login."""

    state: int
    password_type: int

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> LoginStatus:
        """Parse the user/state-login response.

        Missing or unparsable fields are read as logged out with a base64
        password, so a login is attempted.
        """
        return cls(
            state=_int_or_default(response, "State", LoginState.LOGGED_OUT),
            password_type=_int_or_default(
                response, "password_type", PasswordType.BASE_64
            ),
        )


class User(ApiGroup):
    """User endpoints of the device."""

    #: Some models close the connection when the login state is queried too soon
    #: after setting up the session, so the probe is retried with a growing delay.
    STATE_PROBE_POLICY = RetryPolicy(
        attempts=5,
        backoff=lambda attempt: (attempt + 1) / 10,
        is_short_circuit=lambda ex: isinstance(ex, NotSupportedError),
    )

    def __init__(
        self, connection: BaseConnection, credentials: Credentials | None = None
    ) -> None:
        super().__init__(connection)
        self._credentials = credentials or Credentials()

    @property
    def username(self) -> str:
        """Return the username used to login."""
        return self._credentials.username

    async def probe_state(self) -> LoginStatus | None:
        """Return the current login state.

        None is returned when the device does not support user/state-login,
        which is treated the same as being logged in.
        """
        try:
            response = await retry_call(self.state_login, self.STATE_PROBE_POLICY)
        except NotSupportedError:
            _LOGGER.debug(
                "%s does not support login state, assuming logged in",
                self._connection.config.host,
            )
            return None
        return LoginStatus.from_response(response)

    async def login(self, force_new_login: bool = False) -> bool:
        """Login to the device.

        :param force_new_login: Login even when the device reports the
            session as already logged in.
        """
        status = await self.probe_state()
        if status is None:
            return True

        if status.state == LoginState.LOGGED_IN and not force_new_login:
            _LOGGER.debug("%s already logged in", self._connection.config.host)
            return True

        return await self._attempt_login(status.password_type)

    async def _attempt_login(self, password_type: int = PasswordType.BASE_64) -> bool:
        password = encode_password(
            self._credentials.password,
            password_type,
            username=self.username,
            verification_token=self._connection.verification_token,
        )
        try:
            response = await self._connection.post_set(
                "user/login",
                {
                    "Username": self.username,
                    "Password": password,
                    "password_type": str(int(password_type)),
                },
                is_login=True,
            )
        except ResponseError as ex:
            if ex.error_code is None:
                raise
            raise login_error_for_code(ex.error_code) from ex

        return response == RESPONSE_OK

    async def logout(self) -> str:
        """Logout from the device."""
        return await self._connection.post_set("user/logout", {"Logout": 1})

    async def state_login(self) -> dict[str, Any]:
        """Return the raw login state."""
        return await self._connection.get("user/state-login")

    async def remind(self) -> dict[str, Any]:
        """Return the password change reminder settings."""
        return await self._connection.get("user/remind")

    async def set_remind(self, remind_state: str) -> str:
        """Set the password change reminder state."""
        return await self._connection.post_set(
            "user/remind", {"remindstate": remind_state}
        )

    async def password(self) -> dict[str, Any]:
        return await self._connection.get("user/password")

    async def pwd(self) -> dict[str, Any]:
        return await self._connection.get("user/pwd")

    async def authentication_login(self) -> dict[str, Any]:
        return await self._connection.get("user/authentication_login")

    async def challenge_login(self) -> dict[str, Any]:
        return await self._connection.get("user/challenge_login")

    async def hilink_login(self) -> dict[str, Any]:
        return await self._connection.get("user/hilink_login")

    async def history_login(self) -> dict[str, Any]:
        return await self._connection.get("user/history-login")

    async def heartbeat(self) -> dict[str, Any]:
        return await self._connection.get("user/heartbeat")

    async def web_feature_switch(self) -> dict[str, Any]:
        return await self._connection.get("user/web-feature-switch")

    # Usage of the following endpoints is unknown, found in B310s-22 firmware
    async def input_event(self) -> dict[str, Any]:
        return await self._connection.get("user/input_event")

    async def screen_state(self) -> dict[str, Any]:
        return await self._connection.get("user/screen_state")

    async def session(self) -> dict[str, Any]:
        return await self._connection.get("user/session")
