"""Password encoding for user/login."""

from __future__ import annotations

import base64
import hashlib

from .enums import PasswordType
from .exceptions import HilinkException


def _sha256(payload: bytes) -> str:
    sha256_algo = hashlib.sha256()
    sha256_algo.update(payload)
    return sha256_algo.hexdigest()


def _b64(payload: str) -> str:
    return base64.b64encode(payload.encode()).decode()


def encode_password(
    password: str | None,
    password_type: int,
    *,
    username: str,
    verification_token: str | None,
) -> str:
    """Return the password as the device expects it in the login request.

    For :attr:`PasswordType.SHA256` the hex digest of the password is base64
    encoded, prefixed with the username, suffixed with the session verification
    token and hashed again, binding the credential to the current session.
    Every other password type is sent base64 encoded.
    An empty string is returned when there is no password.
    """
    if not password:
        return ""
    if password_type != PasswordType.SHA256:
        return _b64(password)

    if not verification_token:
        raise HilinkException(
            "A verification token is required to encode a SHA256 password"
        )
    concatenated = username + _b64(_sha256(password.encode())) + verification_token
    return _b64(_sha256(concatenated.encode()))
