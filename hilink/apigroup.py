"""Base class for groups of related api endpoints."""

from __future__ import annotations

from .connection import BaseConnection


class ApiGroup:
    """Group of endpoints sharing a path prefix."""

    def __init__(self, connection: BaseConnection) -> None:
        self._connection = connection

    @property
    def connection(self) -> BaseConnection:
        """Return the connection used by the group."""
        return self._connection
