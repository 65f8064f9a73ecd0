from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger("intake.events")


def _fmt(value: Any) -> str:
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return repr(value)


def record_event(event: str, level: int = logging.INFO, **fields: Any) -> None:
    """Emit one structured ``event=<name> key=value`` line on the intake.events logger."""
    parts = [f"event={event}"] + [f"{k}={_fmt(v)}" for k, v in sorted(fields.items())]
    logger.log(level, " ".join(parts))
