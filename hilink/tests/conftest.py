from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping
from typing import Any

import pytest

from hilink import Client, Credentials, DeviceConfig
from hilink.connection import RESPONSE_OK, BaseConnection

TOKEN = "P0cuWZXh7xMlL1oqrlctpjzHSUCLYq7E"


class FakeConnection(BaseConnection):
    """Connection replaying scripted responses per path.

    A scripted exception is raised instead of returned, a list of responses
    is consumed one per call with the last one repeating.
    """

    def __init__(
        self,
        responses: dict[str, Any] | None = None,
        *,
        config: DeviceConfig | None = None,
        verification_token: str | None = TOKEN,
    ) -> None:
        super().__init__(config=config or DeviceConfig(host="127.0.0.123"))
        self.responses: dict[str, Any] = {"user/login": RESPONSE_OK, **(responses or {})}
        self.calls: dict[str, list[Any]] = defaultdict(list)
        self.login_flags: list[bool] = []
        self._verification_token = verification_token
        self.connected = False
        self.closed = False

    @property
    def verification_token(self) -> str | None:
        return self._verification_token

    def _next(self, path: str) -> Any:
        response = self.responses[path]
        if isinstance(response, list):
            response = response.pop(0) if len(response) > 1 else response[0]
        if isinstance(response, BaseException):
            raise response
        return response

    async def get(self, path: str) -> dict[str, Any]:
        self.calls[path].append(None)
        return self._next(path)

    async def post_set(
        self, path: str, data: Mapping[str, Any], *, is_login: bool = False
    ) -> str:
        self.calls[path].append(dict(data))
        if path == "user/login":
            self.login_flags.append(is_login)
        return self._next(path)

    async def connect(self) -> None:
        self.connected = True

    async def close(self) -> None:
        self.closed = True


def login_state(state: int, password_type: int = 4) -> dict[str, str]:
    return {"State": str(state), "Username": "", "password_type": str(password_type)}


@pytest.fixture
def credentials():
    return Credentials("admin", "secret")


@pytest.fixture
def fake_connection():
    return FakeConnection()


@pytest.fixture
def sleep_mock(mocker):
    """Patch the backoff sleep of the retry loop."""
    return mocker.patch("hilink.retry.asyncio.sleep", return_value=None)


@pytest.fixture
def client(fake_connection, credentials):
    config = DeviceConfig(host="127.0.0.123", credentials=credentials)
    return Client(config, connection=fake_connection)
