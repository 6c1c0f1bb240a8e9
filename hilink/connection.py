"""Connections to the device's web management API.

Every endpoint is addressed by a path below ``/api/`` and exchanges XML
envelopes. Successful responses are wrapped in ``<response>``, failures in
``<error>`` carrying a numeric ``<code>``.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Callable, TypeVar, cast

from .deviceconfig import DeviceConfig
from .exceptions import (
    HilinkException,
    ResponseCode,
    ResponseError,
    response_error_for_code,
)
from .httpclient import HttpClient

_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")

RESPONSE_OK = "OK"
TOKEN_HEADER = "__RequestVerificationToken"

REDACTORS: dict[str, Callable[[Any], Any] | None] = {
    "Password": None,
    "password": None,
    "SesInfo": None,
    "TokInfo": None,
}


def redact_data(data: _T, redactors: dict[str, Callable[[Any], Any] | None]) -> _T:
    """Redact sensitive data for logging."""
    if not isinstance(data, (dict, list)):
        return data

    if isinstance(data, list):
        return cast(_T, [redact_data(val, redactors) for val in data])

    redacted = {**data}

    for key, value in redacted.items():
        if value is None:
            continue
        if isinstance(value, str) and not value:
            continue
        if key in redactors:
            if redactor := redactors[key]:
                redacted[key] = redactor(value)
            else:
                redacted[key] = "**REDACTED**"
        elif isinstance(value, dict):
            redacted[key] = redact_data(value, redactors)
        elif isinstance(value, list):
            redacted[key] = [redact_data(item, redactors) for item in value]

    return cast(_T, redacted)


def _element_to_value(element: ET.Element) -> Any:
    children = list(element)
    if not children:
        return element.text or ""

    result: dict[str, Any] = {}
    for child in children:
        value = _element_to_value(child)
        if child.tag in result:
            existing = result[child.tag]
            if not isinstance(existing, list):
                result[child.tag] = existing = [existing]
            existing.append(value)
        else:
            result[child.tag] = value
    return result


def _append_value(parent: ET.Element, tag: str, value: Any) -> None:
    if isinstance(value, list):
        for item in value:
            _append_value(parent, tag, item)
        return
    child = ET.SubElement(parent, tag)
    if isinstance(value, Mapping):
        for key, item in value.items():
            _append_value(child, key, item)
    elif value is not None:
        child.text = str(value)


def encode_request(data: Mapping[str, Any]) -> bytes:
    """Encode a request body as an XML ``<request>`` envelope."""
    root = ET.Element("request")
    for key, value in data.items():
        _append_value(root, key, value)
    return b'<?xml version="1.0" encoding="UTF-8"?>' + ET.tostring(
        root, encoding="utf-8", xml_declaration=False
    )


def decode_response(payload: bytes) -> Any:
    """Decode a ``<response>`` envelope.

    Raises the matching :class:`ResponseError` for an ``<error>`` envelope.
    """
    try:
        root = ET.fromstring(payload)
    except ET.ParseError as ex:
        raise HilinkException(f"Unable to parse response: {payload!r}", ex) from ex

    if root.tag == "error":
        raise parse_error(root)
    if root.tag != "response":
        raise HilinkException(f"Unexpected response envelope <{root.tag}>")
    return _element_to_value(root)


def parse_error(root: ET.Element) -> ResponseError:
    """Return the generic response error for an ``<error>`` envelope."""
    code_text = (root.findtext("code") or "").strip()
    message = (root.findtext("message") or "").strip()
    try:
        code = int(code_text)
    except ValueError:
        code = ResponseCode.ERROR_SYSTEM_UNKNOWN
    if not message:
        try:
            message = ResponseCode(code).name
        except ValueError:
            message = ""
    return response_error_for_code(code, message)


class BaseConnection(ABC):
    """Base class for connections to the web management API."""

    def __init__(self, *, config: DeviceConfig) -> None:
        self._config = config
        self._host = config.host

    @property
    def config(self) -> DeviceConfig:
        """Return the connection parameters the device is using."""
        return self._config

    @property
    @abstractmethod
    def verification_token(self) -> str | None:
        """Current anti-CSRF token of the session."""

    @abstractmethod
    async def get(self, path: str) -> dict[str, Any]:
        """Fetch the value stored under path."""

    @abstractmethod
    async def post_set(
        self, path: str, data: Mapping[str, Any], *, is_login: bool = False
    ) -> str:
        """Submit data to path and return the acknowledgement status.

        When is_login is set error responses are raised as plain
        :class:`ResponseError` so the caller can classify them.
        """

    async def connect(self) -> None:
        """Start a session with the device."""

    @abstractmethod
    async def close(self) -> None:
        """Close the connection."""


class HttpConnection(BaseConnection):
    """Connection speaking XML over http(s) with the device."""

    SESSION_TOKEN_PATH = "webserver/SesTokInfo"
    COMMON_HEADERS = {
        "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
        "X-Requested-With": "XMLHttpRequest",
    }

    def __init__(self, *, config: DeviceConfig) -> None:
        super().__init__(config=config)
        self._http_client = HttpClient(config)
        self._base_url = config.base_url
        self._session_cookie: str | None = None
        self._verification_token: str | None = None

        _LOGGER.debug("Created http connection for %s", self._host)

    @property
    def verification_token(self) -> str | None:
        """Current anti-CSRF token of the session."""
        return self._verification_token

    async def connect(self) -> None:
        """Start a session by fetching the session cookie and token."""
        try:
            session = await self.get(self.SESSION_TOKEN_PATH)
        except ResponseError as ex:
            _LOGGER.debug("%s does not provide session tokens: %s", self._host, ex)
            return
        self._session_cookie = session.get("SesInfo") or None
        self._verification_token = session.get("TokInfo") or None

    def _headers(self) -> dict[str, str]:
        headers = {**self.COMMON_HEADERS}
        if self._verification_token:
            headers[TOKEN_HEADER] = self._verification_token
        if self._session_cookie:
            headers["Cookie"] = self._session_cookie
        return headers

    def _update_token(self, headers: Mapping[str, str]) -> None:
        # Login responses carry a list of tokens separated by #
        if token_header := headers.get(TOKEN_HEADER):
            tokens = [token for token in token_header.split("#") if token]
            if tokens:
                self._verification_token = tokens[0]

    def _check_status(self, status: int, path: str) -> None:
        if status != 200:
            raise HilinkException(
                f"{self._host} responded with an unexpected "
                + f"status code {status} to {path}"
            )

    async def get(self, path: str) -> dict[str, Any]:
        """Fetch the value stored under path."""
        status, payload, headers = await self._http_client.get(
            self._base_url / path, headers=self._headers()
        )
        self._check_status(status, path)
        self._update_token(headers)
        response = decode_response(payload)
        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug(
                "%s %s << %s", self._host, path, redact_data(response, REDACTORS)
            )
        return response if isinstance(response, dict) else {}

    async def post_set(
        self, path: str, data: Mapping[str, Any], *, is_login: bool = False
    ) -> str:
        """Submit data to path and return the acknowledgement status."""
        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug(
                "%s %s >> %s", self._host, path, redact_data(dict(data), REDACTORS)
            )
        status, payload, headers = await self._http_client.post(
            self._base_url / path, data=encode_request(data), headers=self._headers()
        )
        self._check_status(status, path)
        self._update_token(headers)
        try:
            response = decode_response(payload)
        except ResponseError as ex:
            if is_login:
                raise ResponseError(str(ex), error_code=ex.error_code) from ex
            raise
        _LOGGER.debug("%s %s << %s", self._host, path, response)
        return response if isinstance(response, str) else ""

    async def close(self) -> None:
        """Close the http client."""
        await self._http_client.close()
