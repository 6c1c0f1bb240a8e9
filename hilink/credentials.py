"""Credentials class for username / passwords."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_USERNAME = "admin"


@dataclass(frozen=True)
class Credentials:
    """Credentials for authentication."""

    #: Username of the web management account
    username: str = field(default=DEFAULT_USERNAME, repr=False)
    #: Password of the account, None for devices without authentication
    password: str | None = field(default=None, repr=False)
