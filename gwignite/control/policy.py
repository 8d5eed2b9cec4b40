"""gwignite/control/policy.py

Fallback exploration policy.

Invoked only when an event does not carry both exploration inputs. The
policy explores harder when the belief is uncertain, when recent steps have
not ignited, or when the task vector asks for it, and it backs off when
recent broadcasts already lowered free energy:

    h         = H(normalize(q)) / ln n
    task_mean = mean(max(task_i, 0)) over the overlap of q and task
    strength  = clamp(1 + 1.25 h + 0.50 (1 - r) + 0.35 task_mean - 0.15 dG, [0.1, 3])
    pressure  = clamp(0.25 + 0.75 (1 - h) + 0.25 r + 0.10 (1 - task_mean), [0, 3])

with r the recent ignite rate and dG the recent mean broadcast improvement.
"""

from __future__ import annotations

from typing import Protocol, Tuple

import numpy as np

from ..belief.metrics import normalized_uncertainty
from ..config import LoopConfig
from ..types import ActionParams, ActionSource, StepEvent


class HistoryStats(Protocol):
    """Read-only view of recent history the policy is allowed to use."""

    def mem_ignite_rate(self) -> float: ...

    def mem_mean_d_g_broadcast(self) -> float: ...


def _clamp(x: float, lo: float, hi: float) -> float:
    return float(min(max(x, lo), hi))


def _task_mean(q: np.ndarray, task: np.ndarray) -> float:
    overlap = min(int(np.asarray(q).size), int(np.asarray(task).size))
    if overlap == 0:
        return 0.0
    head = np.maximum(np.asarray(task, dtype=float).reshape(-1)[:overlap], 0.0)
    return float(np.mean(head))


def choose_action(q_before: np.ndarray, stats: HistoryStats, task: np.ndarray, cfg: LoopConfig) -> ActionParams:
    """Pick exploration inputs from belief uncertainty, history and task demand.

    Inputs
    ------
    q_before:
        Belief at the start of the step.
    stats:
        Anything exposing mem_ignite_rate() / mem_mean_d_g_broadcast(); a live
        History or a HistoryFeatures snapshot.
    task:
        Task vector (any length).
    cfg:
        Policy coefficients and clamps.

    Outputs
    -------
    ActionParams(sniff_strength, touch_pressure)
    """
    h = normalized_uncertainty(q_before, cfg.eps, cfg.normalize_eps)
    rate = float(stats.mem_ignite_rate())
    mean_dg = float(stats.mem_mean_d_g_broadcast())
    task_mean = _task_mean(q_before, task)

    strength = (
        cfg.policy_strength_base
        + cfg.policy_strength_uncertainty * h
        + cfg.policy_strength_quiet * (1.0 - rate)
        + cfg.policy_strength_task * task_mean
        - cfg.policy_strength_dg * mean_dg
    )
    pressure = (
        cfg.policy_pressure_base
        + cfg.policy_pressure_certainty * (1.0 - h)
        + cfg.policy_pressure_ignite * rate
        + cfg.policy_pressure_task * (1.0 - task_mean)
    )
    return ActionParams(
        sniff_strength=_clamp(strength, cfg.policy_strength_min, cfg.policy_strength_max),
        touch_pressure=_clamp(pressure, cfg.policy_pressure_min, cfg.policy_pressure_max),
    )


def resolve_action(
    event: StepEvent,
    q_before: np.ndarray,
    stats: HistoryStats,
    cfg: LoopConfig,
) -> Tuple[ActionParams, ActionSource]:
    """Use the event's inputs when it carries both, otherwise ask the policy."""
    if event.has_action:
        return (
            ActionParams(
                sniff_strength=float(event.sniff_strength),
                touch_pressure=float(event.touch_pressure),
            ),
            ActionSource.EVENT,
        )
    return choose_action(q_before, stats, event.task_vec, cfg), ActionSource.POLICY
