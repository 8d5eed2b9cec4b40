"""Append-only NDJSON output streams (trace and replay)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, TextIO, Union

from ..types import ReplayRow, StepResult, TraceRow


def _dump(row: Union[TraceRow, ReplayRow, Dict[str, Any]]) -> str:
    payload = row if isinstance(row, dict) else row.to_dict()
    return json.dumps(payload, separators=(",", ":"))


class NdjsonWriter:
    """One JSON object per line; rows are written once and never rewritten."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._fh: Optional[TextIO] = None
        self.rows_written = 0

    def __enter__(self) -> "NdjsonWriter":
        self.open()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def open(self) -> None:
        if self._fh is None:
            self._fh = self.path.open("w", encoding="utf-8")

    def write(self, row: Union[TraceRow, ReplayRow, Dict[str, Any]]) -> None:
        if self._fh is None:
            raise RuntimeError(f"writer for {self.path} is not open")
        self._fh.write(_dump(row) + "\n")
        self.rows_written += 1

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None


class StepLedger:
    """Paired trace/replay writers fed from one StepResult per event."""

    def __init__(self, trace_path: Path, replay_path: Path) -> None:
        self.trace = NdjsonWriter(trace_path)
        self.replay = NdjsonWriter(replay_path)

    def __enter__(self) -> "StepLedger":
        self.trace.open()
        self.replay.open()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.trace.close()
        self.replay.close()

    def record(self, result: StepResult) -> None:
        self.trace.write(TraceRow.from_result(result))
        self.replay.write(ReplayRow.from_result(result))
