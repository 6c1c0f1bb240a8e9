"""Client for a device's web management API.

>>> from hilink import Client, Credentials, DeviceConfig
>>> config = DeviceConfig("192.168.8.1", credentials=Credentials("admin", "pw"))
>>> async with Client(config) as client:
>>>     print(await client.user.heartbeat())
{'userlevel': '2'}
"""

from __future__ import annotations

import logging
from types import TracebackType

from .connection import BaseConnection, HttpConnection
from .credentials import Credentials
from .deviceconfig import DeviceConfig
from .exceptions import HilinkException
from .user import User

_LOGGER = logging.getLogger(__name__)


class Client:
    """Entry point owning the connection and the api groups."""

    def __init__(
        self,
        config: DeviceConfig,
        *,
        connection: BaseConnection | None = None,
    ) -> None:
        self._config = config
        self._credentials = config.credentials or Credentials()
        self._connection = connection or HttpConnection(config=config)
        self.user = User(self._connection, self._credentials)

    @property
    def config(self) -> DeviceConfig:
        """Return the connection parameters."""
        return self._config

    @property
    def connection(self) -> BaseConnection:
        """Return the underlying connection."""
        return self._connection

    async def open_session(self) -> None:
        """Start a session without logging in."""
        await self._connection.connect()

    async def connect(self, force_new_login: bool = False) -> bool:
        """Open the session and login."""
        await self.open_session()
        return await self.user.login(force_new_login)

    async def disconnect(self) -> None:
        """Logout when credentials were used and close the connection."""
        try:
            if self._credentials.password:
                await self.user.logout()
        except HilinkException as ex:
            _LOGGER.debug("Unable to logout from %s: %s", self._config.host, ex)
        finally:
            await self._connection.close()

    async def __aenter__(self) -> Client:
        try:
            if not await self.connect():
                raise HilinkException(
                    f"Login to {self._config.host} was not acknowledged"
                )
        except BaseException:
            await self._connection.close()
            raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.disconnect()
