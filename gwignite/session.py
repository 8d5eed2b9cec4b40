"""gwignite/session.py

Public session wrapper.

This file MUST remain a thin orchestrator:
- It owns the running belief and the history window explicitly; there is
  no process-wide state anywhere in the loop.
- It exposes a stable `step()` API.
- It delegates the single authoritative step order to
  `gwignite.step_pipeline.step_pipeline`.

Events must be stepped strictly in order: event t+1 starts from the belief
that the ignition outcome of event t left behind.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .config import LoopConfig, default_config
from .state.history import History
from .step_pipeline import step_pipeline
from .types import StepEvent, StepResult


class LoopSession:
    """Running belief + bounded history for one sequential stream of events."""

    def __init__(self, cfg: Optional[LoopConfig] = None, history_capacity: Optional[int] = None) -> None:
        self.cfg = cfg if cfg is not None else default_config()
        self.cfg.validate()
        capacity = int(history_capacity) if history_capacity is not None else int(self.cfg.history_capacity)
        self.history = History(capacity)
        self.belief: Optional[np.ndarray] = None
        self.steps = 0

    def step(self, event: StepEvent) -> StepResult:
        result = step_pipeline(self, event, self.cfg)
        self.steps += 1
        return result

    def reset(self) -> None:
        """Forget the running belief and the history window."""
        self.belief = None
        self.history.clear()
        self.steps = 0
