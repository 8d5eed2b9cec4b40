"""Line-delimited JSON event reader.

Each non-blank line is one event object with the wire keys

    t, o, A_shape, A_flat_col, p_prior, task_vec,
    q0 (optional; ``q_before`` accepted for single-shot records),
    sniff_strength, touch_pressure (optional)

Validation failures are fatal: the reader raises and the run aborts before
the offending event reaches the core. Blank lines are skipped silently.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

import numpy as np

from ..types import StepEvent

_REQUIRED = ("t", "o", "A_shape", "A_flat_col", "p_prior", "task_vec")


class EventValidationError(ValueError):
    """An input record failed shape/length validation."""

    def __init__(self, message: str, *, line_no: Optional[int] = None) -> None:
        self.line_no = line_no
        prefix = f"line {line_no}: " if line_no is not None else ""
        super().__init__(prefix + message)


def _vec(record: Mapping[str, Any], key: str, line_no: Optional[int]) -> np.ndarray:
    try:
        return np.asarray(record[key], dtype=float).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise EventValidationError(f"{key} must be a list of numbers", line_no=line_no) from exc


def _ints(record: Mapping[str, Any], key: str, line_no: Optional[int]) -> Tuple[int, ...]:
    try:
        return tuple(int(v) for v in record[key])
    except (TypeError, ValueError) as exc:
        raise EventValidationError(f"{key} must be a list of integers", line_no=line_no) from exc


def _opt_float(record: Mapping[str, Any], key: str, line_no: Optional[int]) -> Optional[float]:
    value = record.get(key)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise EventValidationError(f"{key} must be a number", line_no=line_no) from exc


def parse_event(record: Mapping[str, Any], *, line_no: Optional[int] = None) -> StepEvent:
    """Validate one decoded record and build a :class:`StepEvent`."""
    missing = [k for k in _REQUIRED if k not in record]
    if missing:
        raise EventValidationError(f"missing keys {missing}", line_no=line_no)

    p_prior = _vec(record, "p_prior", line_no)
    n = int(p_prior.size)
    a_shape = _ints(record, "A_shape", line_no)
    if not a_shape or a_shape[0] != n:
        raise EventValidationError(
            f"A_shape mismatch: expected first dim {n}, got {list(a_shape)}", line_no=line_no
        )

    a_flat_col = _vec(record, "A_flat_col", line_no)
    if a_flat_col.size != n:
        raise EventValidationError(
            f"A_flat_col length mismatch: expected {n}, got {a_flat_col.size}", line_no=line_no
        )

    o = _ints(record, "o", line_no)
    if len(o) != len(a_shape) - 1:
        raise EventValidationError(
            f"observation index {list(o)} does not match A_shape[1:]={list(a_shape[1:])}", line_no=line_no
        )

    q0_key = "q0" if record.get("q0") is not None else "q_before"
    q0 = None
    if record.get(q0_key) is not None:
        q0 = _vec(record, q0_key, line_no)
        if q0.size != n:
            raise EventValidationError(f"q0 length mismatch: expected {n}, got {q0.size}", line_no=line_no)

    try:
        t = int(record["t"])
    except (TypeError, ValueError) as exc:
        raise EventValidationError("t must be an integer", line_no=line_no) from exc

    return StepEvent(
        t=t,
        o=o,
        a_shape=a_shape,
        a_flat_col=a_flat_col,
        p_prior=p_prior,
        task_vec=_vec(record, "task_vec", line_no),
        q0=q0,
        sniff_strength=_opt_float(record, "sniff_strength", line_no),
        touch_pressure=_opt_float(record, "touch_pressure", line_no),
    )


def parse_line(line: str, *, line_no: Optional[int] = None) -> StepEvent:
    try:
        record: Dict[str, Any] = json.loads(line)
    except json.JSONDecodeError as exc:
        raise EventValidationError(f"invalid JSON: {exc.msg}", line_no=line_no) from exc
    if not isinstance(record, dict):
        raise EventValidationError("event must be a JSON object", line_no=line_no)
    return parse_event(record, line_no=line_no)


def iter_events(path: Path) -> Iterator[StepEvent]:
    """Yield validated events from an NDJSON file, in file order."""
    with Path(path).open("r", encoding="utf-8") as fh:
        for line_no, line in enumerate(fh, start=1):
            if not line.strip():
                continue
            yield parse_line(line, line_no=line_no)
