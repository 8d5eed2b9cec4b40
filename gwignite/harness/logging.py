"""Logging helpers for the harness run loop."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from ..types import StepResult


def log_step(*, step_idx: int, result: StepResult) -> None:
    print(
        f"[gwignite] step={step_idx} t={result.t} o_idx={result.o_idx} "
        f"source={result.action_source.value} s={result.action.sniff_strength:.3f} "
        f"p={result.action.touch_pressure:.3f} T={result.sensory.temperature:.3f} "
        f"theta={result.theta:.4f} survivors={result.survivors_n} "
        f"levels={result.survivor_levels} coherence={result.coherence:.4f} "
        f"dG_local={result.d_g_local:.4f} dG_broadcast={result.d_g_broadcast:.4f} "
        f"reason={result.reason.value}"
    )


def log_outputs(*, paths: Sequence[Path]) -> None:
    print("Wrote " + " and ".join(str(p) for p in paths))


def attach_file_logger(path: Path, name: str = "gwignite.step") -> logging.Logger:
    """Send JSON step payloads to `path`, one per line."""
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    if not logger.handlers:
        handler = logging.FileHandler(str(path), mode="w", encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
