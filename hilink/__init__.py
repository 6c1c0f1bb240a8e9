"""Python interface for the web management api of Huawei HiLink devices.

Sessions are opened with :class:`Client`::

>>> from hilink import Client, Credentials, DeviceConfig
>>> config = DeviceConfig("192.168.8.1", credentials=Credentials("admin", "pw"))
>>> async with Client(config) as client:
>>>     print(await client.user.state_login())

Login failures are raised as subclasses of `AuthenticationError` carrying
the device error code, other device errors as `ResponseError`.
"""

from importlib.metadata import version

from hilink.client import Client
from hilink.connection import BaseConnection, HttpConnection
from hilink.credentials import Credentials
from hilink.deviceconfig import DeviceConfig
from hilink.enums import LoginState, PasswordType
from hilink.exceptions import (
    AlreadyLoggedInError,
    AuthenticationError,
    CredentialAttemptsExhaustedError,
    GenericLoginError,
    HilinkException,
    LoginErrorCode,
    NotSupportedError,
    PasswordMustBeChangedError,
    PasswordWrongError,
    ResponseCode,
    ResponseError,
    TimeoutError,
    UsernameOrPasswordWrongError,
    UsernameWrongError,
)
from hilink.user import LoginStatus, User

__version__ = version("python-hilink")


__all__ = [
    "Client",
    "BaseConnection",
    "HttpConnection",
    "Credentials",
    "DeviceConfig",
    "LoginState",
    "LoginStatus",
    "PasswordType",
    "User",
    "HilinkException",
    "TimeoutError",
    "ResponseError",
    "ResponseCode",
    "NotSupportedError",
    "AuthenticationError",
    "LoginErrorCode",
    "UsernameWrongError",
    "PasswordWrongError",
    "AlreadyLoggedInError",
    "UsernameOrPasswordWrongError",
    "CredentialAttemptsExhaustedError",
    "PasswordMustBeChangedError",
    "GenericLoginError",
]
