"""gwignite/types.py

This file is the *shared contract* across gwignite modules.

It keeps cross-module imports stable: the pipeline, the harness and the tests
all import these names directly. It contains no decision logic; only data
structures and small conversion helpers.

WARNING:
- The `TraceRow` / `ReplayRow` field names are the wire keys of the two
  append-only output streams. Renaming a field changes the output format.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np


# =============================================================================
# Enumerations
# =============================================================================


class IgnitionReason(str, Enum):
    """Terminal outcome of the ignition decision, in evaluation order."""

    NO_SURVIVORS = "no_survivors"
    COHERENCE_FAIL = "coherence_fail"
    DELTA_G_FAIL = "deltaG_fail"
    IGNITE = "ignite"


class ActionSource(str, Enum):
    """Where a step's exploration inputs came from."""

    EVENT = "event"
    POLICY = "policy"


# =============================================================================
# Sensory
# =============================================================================


@dataclass(frozen=True)
class ActionParams:
    """Exploration inputs: sniff strength s and touch pressure p."""

    sniff_strength: float
    touch_pressure: float


@dataclass
class SensoryOut:
    """Raw and modulated likelihood column plus the temperature used."""

    lik_raw: np.ndarray
    lik_mod: np.ndarray
    temperature: float


# =============================================================================
# Messages
# =============================================================================


@dataclass
class Message:
    """Leveled summary of one belief transition.

    Fields:
      - level: 0 (local Bayes update) or 1 (task-biased reinterpretation)
      - dx: delta vector (full length n, or coarse-grained once admitted)
      - prec: unit-norm precision vector (always full length n)
      - e: energy, KL(after || before)
      - p: precision gain, H(before) - H(after)
      - k: complexity
      - eta: efficiency (e + p) / k, set by the filter
      - eta_rg: efficiency under the coarse-graining penalty, set by the filter
    """

    level: int
    dx: np.ndarray
    prec: np.ndarray
    e: float
    p: float
    k: float
    eta: float = 0.0
    eta_rg: float = 0.0


# =============================================================================
# History
# =============================================================================


@dataclass(frozen=True)
class HistoryRow:
    """Outcome of one step, retained in the bounded history window."""

    t: int
    ignited: bool
    d_g_broadcast: float
    temperature: float
    sniff_strength: float
    touch_pressure: float


@dataclass(frozen=True)
class HistoryFeatures:
    """Rolling aggregates over the history window at time t.

    Also satisfies the two-method read-only capability the fallback policy
    consumes, so synthetic snapshots can stand in for a live History.
    """

    t: int
    window_len: int
    ignite_rate: float
    mean_d_g_broadcast: float
    mean_temperature: float
    mean_sniff_strength: float
    mean_touch_pressure: float
    decay_hint: float = 1.0

    def mem_ignite_rate(self) -> float:
        return float(self.ignite_rate)

    def mem_mean_d_g_broadcast(self) -> float:
        return float(self.mean_d_g_broadcast)


# =============================================================================
# Per-event input
# =============================================================================


@dataclass
class StepEvent:
    """One validated input record.

    Fields:
      - t: timestep
      - o: observation multi-index into A_shape[1:]
      - a_shape: likelihood tensor shape; a_shape[0] == len(p_prior)
      - a_flat_col: likelihood column already sliced by the observation
      - p_prior: prior simplex (length n)
      - task_vec: task vector (any length)
      - q0: optional initial belief, used only to seed the first event
      - sniff_strength / touch_pressure: optional exploration inputs
    """

    t: int
    o: Tuple[int, ...]
    a_shape: Tuple[int, ...]
    a_flat_col: np.ndarray
    p_prior: np.ndarray
    task_vec: np.ndarray
    q0: Optional[np.ndarray] = None
    sniff_strength: Optional[float] = None
    touch_pressure: Optional[float] = None

    @property
    def n(self) -> int:
        return int(self.p_prior.shape[0])

    @property
    def has_action(self) -> bool:
        return self.sniff_strength is not None and self.touch_pressure is not None


# =============================================================================
# Per-step output
# =============================================================================


@dataclass
class IgnitionOutcome:
    reason: IgnitionReason
    ignited: bool
    q_next: np.ndarray


@dataclass
class StepResult:
    """Everything the core computed for one event.

    This is the single source the Trace and Replay records are built from.
    """

    t: int
    o_idx: int
    action: ActionParams
    action_source: ActionSource
    sensory: SensoryOut
    u_t: float
    theta: float
    q_before: np.ndarray
    q_after: np.ndarray
    q_broadcast: np.ndarray
    q_next: np.ndarray
    messages: List[Message]
    survivors: List[Message]
    coherence: float
    broadcast: np.ndarray
    b_expanded: np.ndarray
    g_before: float
    g_after_local: float
    g_after_broadcast: float
    reason: IgnitionReason
    features_pre: HistoryFeatures
    features_post: HistoryFeatures

    @property
    def ignited(self) -> bool:
        return self.reason is IgnitionReason.IGNITE

    @property
    def d_g_local(self) -> float:
        return float(self.g_before - self.g_after_local)

    @property
    def d_g_broadcast(self) -> float:
        return float(self.g_before - self.g_after_broadcast)

    @property
    def survivors_n(self) -> int:
        return len(self.survivors)

    @property
    def survivor_levels(self) -> List[int]:
        return [int(m.level) for m in self.survivors]


# =============================================================================
# Output records
# =============================================================================


def _floats(v: Any) -> List[float]:
    return [float(x) for x in np.asarray(v, dtype=float).reshape(-1)]


@dataclass
class TraceRow:
    t: int
    o_idx: int
    u_t: float
    g_before: float
    g_after_local: float
    g_after_broadcast: float
    d_g_local: float
    d_g_broadcast: float
    ignited: bool
    ignite_reason: str
    theta: float
    survivors_n: int
    coherence: float
    survivor_levels: List[int]
    q_after: List[float]
    broadcast: List[float]
    dx: List[float]
    e: float
    p: float
    k: float
    eta: float

    @classmethod
    def from_result(cls, res: StepResult) -> "TraceRow":
        if res.survivors:
            first = res.survivors[0]
            dx, e, p, k, eta = _floats(first.dx), first.e, first.p, first.k, first.eta
        else:
            dx, e, p, k, eta = [], 0.0, 0.0, 0.0, 0.0
        return cls(
            t=int(res.t),
            o_idx=int(res.o_idx),
            u_t=float(res.u_t),
            g_before=float(res.g_before),
            g_after_local=float(res.g_after_local),
            g_after_broadcast=float(res.g_after_broadcast),
            d_g_local=res.d_g_local,
            d_g_broadcast=res.d_g_broadcast,
            ignited=res.ignited,
            ignite_reason=res.reason.value,
            theta=float(res.theta),
            survivors_n=res.survivors_n,
            coherence=float(res.coherence),
            survivor_levels=res.survivor_levels,
            q_after=_floats(res.q_after),
            broadcast=_floats(res.broadcast),
            dx=dx,
            e=float(e),
            p=float(p),
            k=float(k),
            eta=float(eta),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ReplayRow(TraceRow):
    sniff_strength: float = 0.0
    touch_pressure: float = 0.0
    action_source: str = ActionSource.EVENT.value
    temperature: float = 1.0
    q_before: List[float] = field(default_factory=list)
    q_broadcast: List[float] = field(default_factory=list)
    q_next: List[float] = field(default_factory=list)
    b_expanded: List[float] = field(default_factory=list)
    mem_window_len: int = 0
    mem_ignite_rate: float = 0.0
    mem_mean_d_g_broadcast: float = 0.0

    @classmethod
    def from_result(cls, res: StepResult) -> "ReplayRow":
        base = asdict(TraceRow.from_result(res))
        return cls(
            **base,
            sniff_strength=float(res.action.sniff_strength),
            touch_pressure=float(res.action.touch_pressure),
            action_source=res.action_source.value,
            temperature=float(res.sensory.temperature),
            q_before=_floats(res.q_before),
            q_broadcast=_floats(res.q_broadcast),
            q_next=_floats(res.q_next),
            b_expanded=_floats(res.b_expanded),
            mem_window_len=int(res.features_post.window_len),
            mem_ignite_rate=float(res.features_post.ignite_rate),
            mem_mean_d_g_broadcast=float(res.features_post.mean_d_g_broadcast),
        )
