"""JSON abstraction."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import orjson
from mashumaro.mixins.orjson import DataClassORJSONMixin


def dumps(obj: Any, *, default: Callable | None = None, indent: bool = False) -> str:
    """Dump JSON."""
    return orjson.dumps(
        obj, default=default, option=orjson.OPT_INDENT_2 if indent else None
    ).decode()


DataClassJSONMixin = DataClassORJSONMixin
