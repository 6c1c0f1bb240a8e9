"""Configuration for connecting to a device's web management API.

Connection parameters are held in :class:`DeviceConfig`:

>>> from hilink import Credentials, DeviceConfig
>>> config = DeviceConfig("192.168.8.1", credentials=Credentials("admin", "pw"))
>>> config.base_url
URL('http://192.168.8.1/api/')

>>> config.to_dict()  # credentials are never serialized
{'host': '192.168.8.1', 'timeout': 5, 'https': False}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Self

from aiohttp import ClientSession
from mashumaro import field_options
from mashumaro.config import BaseConfig
from mashumaro.types import SerializationStrategy
from yarl import URL

from .credentials import Credentials
from .json import DataClassJSONMixin

_LOGGER = logging.getLogger(__name__)


class _DoNotSerialize(SerializationStrategy):
    def serialize(self, value: Any) -> None:
        return None

    def deserialize(self, value: Any) -> None:
        return None


@dataclass
class DeviceConfig(DataClassJSONMixin):
    """Class to represent paramaters that determine how to connect to devices."""

    DEFAULT_TIMEOUT = 5

    class Config(BaseConfig):
        """Serialization config."""

        omit_none = True

    #: IP address or hostname
    host: str
    #: Timeout for querying the device
    timeout: int | None = DEFAULT_TIMEOUT
    #: Override the default http(s) port to support port forwarding
    port_override: int | None = None
    #: Use https instead of http
    https: bool = False
    #: Credentials for devices requiring authentication
    credentials: Credentials | None = field(default=None, compare=False)

    # compare=False will be excluded from object comparison.
    #: Set a custom http_client for the device to use.
    http_client: ClientSession | None = field(
        default=None,
        compare=False,
        metadata=field_options(serialization_strategy=_DoNotSerialize()),
    )

    def __pre_serialize__(self) -> Self:
        return replace(self, credentials=None, http_client=None)

    @property
    def base_url(self) -> URL:
        """Return the api root of the device."""
        return URL.build(
            scheme="https" if self.https else "http",
            host=self.host,
            port=self.port_override,
            path="/api/",
        )
