"""
Debug prints and structured step records for the step pipeline.

Step records go to the ``gwignite.step`` logger as one sorted-key JSON object
per step. Nothing is formatted unless a handler is attached, and records carry
no wall-clock fields so two runs over the same events log identical lines.
"""

from __future__ import annotations

import json
import logging
from typing import Any

DEBUG = False

STEP_LOGGER = logging.getLogger("gwignite.step")


def _dbg(msg: str, *, t: int | None = None) -> None:
    """Print a debug line when DEBUG is enabled. Does not alter control flow."""
    if not DEBUG:
        return
    prefix = "[gwignite.step] " if t is None else f"[gwignite.step t={int(t)}] "
    print(prefix + str(msg))


def _log_step_event(kind: str, details: dict[str, Any]) -> None:
    """Emit `details` tagged with `kind` when the step logger has a handler."""
    if not STEP_LOGGER.handlers:
        return
    payload: dict[str, Any] = {"kind": kind}
    payload.update(details)
    STEP_LOGGER.info(json.dumps(payload, sort_keys=True))
