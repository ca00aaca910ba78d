"""Small helpers shared across the package."""

from __future__ import annotations

import json
import time
from datetime import datetime
from typing import Any

from mapsync.contracts.document import format_timestamp


def epoch_now() -> int:
    return int(time.time())


def _json_default(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return format_timestamp(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def dump_json(payload: Any, *, indent: int | None = 2) -> str:
    """Serialize cache payloads; ``indent=None`` gives the compact single-line form."""
    separators = (",", ":") if indent is None else None
    return json.dumps(payload, indent=indent, separators=separators, ensure_ascii=False, default=_json_default)
