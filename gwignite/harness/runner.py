"""Harness drivers: single-shot and streaming, both over the one core."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional

import numpy as np

from ..config import LoopConfig, default_config
from ..session import LoopSession
from ..types import ActionSource, StepEvent
from .events import iter_events, parse_event
from .ledger import StepLedger
from .logging import log_outputs, log_step

# Canonical single-shot event: strong sniff, no touch, task pointing at state 1.
FIXTURE_RECORD = {
    "t": 0,
    "o": [1, 2],
    "A_shape": [4, 3, 5],
    "A_flat_col": [0.2, 0.6, 0.1, 0.1],
    "p_prior": [0.4, 0.2, 0.2, 0.2],
    "q0": [0.35, 0.22, 0.25, 0.18],
    "task_vec": [0.0, 1.0, 0.0, 0.0],
    "sniff_strength": 1.2,
    "touch_pressure": 0.0,
}


def fixture_event() -> StepEvent:
    return parse_event(FIXTURE_RECORD)


@dataclass
class RunSummary:
    mode: str
    trace_path: Path
    replay_path: Path
    events: int = 0
    ignitions: int = 0
    policy_actions: int = 0
    reasons: Dict[str, int] = field(default_factory=dict)
    last_t: int = 0
    window_len: int = 0
    ignite_rate: float = 0.0
    mean_d_g_broadcast: float = 0.0
    final_belief: Optional[np.ndarray] = None


def _run(
    events: Iterable[StepEvent],
    *,
    mode: str,
    out_dir: Path,
    trace_name: str,
    replay_name: str,
    cfg: LoopConfig,
    log_every: int,
) -> RunSummary:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    summary = RunSummary(mode=mode, trace_path=out_dir / trace_name, replay_path=out_dir / replay_name)
    session = LoopSession(cfg)
    reasons: Counter = Counter()

    with StepLedger(summary.trace_path, summary.replay_path) as ledger:
        for idx, event in enumerate(events):
            result = session.step(event)
            ledger.record(result)
            summary.events += 1
            summary.last_t = int(result.t)
            summary.ignitions += int(result.ignited)
            summary.policy_actions += int(result.action_source is ActionSource.POLICY)
            reasons[result.reason.value] += 1
            if log_every > 0 and idx % log_every == 0:
                log_step(step_idx=idx, result=result)

    features = session.history.features(summary.last_t)
    summary.reasons = dict(reasons)
    summary.window_len = int(features.window_len)
    summary.ignite_rate = float(features.ignite_rate)
    summary.mean_d_g_broadcast = float(features.mean_d_g_broadcast)
    summary.final_belief = None if session.belief is None else np.array(session.belief, dtype=float)
    if log_every > 0:
        log_outputs(paths=[summary.trace_path, summary.replay_path])
    return summary


def run_single(
    event: Optional[StepEvent] = None,
    out_dir: Path = Path("out"),
    cfg: Optional[LoopConfig] = None,
    *,
    log_every: int = 0,
) -> RunSummary:
    """Process one event from a fresh session; writes trace.ndjson / replay.ndjson."""
    return _run(
        [event if event is not None else fixture_event()],
        mode="single",
        out_dir=out_dir,
        trace_name="trace.ndjson",
        replay_name="replay.ndjson",
        cfg=cfg if cfg is not None else default_config(),
        log_every=log_every,
    )


def run_stream(
    events_path: Path,
    out_dir: Path = Path("out"),
    cfg: Optional[LoopConfig] = None,
    *,
    log_every: int = 0,
) -> RunSummary:
    """Process an NDJSON event stream in order; writes trace_loop / replay_loop."""
    return _run(
        iter_events(Path(events_path)),
        mode="stream",
        out_dir=out_dir,
        trace_name="trace_loop.ndjson",
        replay_name="replay_loop.ndjson",
        cfg=cfg if cfg is not None else default_config(),
        log_every=log_every,
    )
