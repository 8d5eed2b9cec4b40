"""gwignite/messages/filter.py

Efficiency filter and coarse-grainer.

Admission is two-staged:

  Stage A  eta = (e + p) / (k + eps) must reach theta = alpha + beta * u.
  Stage B  the message is coarse-grained (average pooling, window 2**rg_level)
           and must keep eta_rg = (e + p) / (k + rg_cost + eps) >= gamma * theta.

A survivor carries the coarse-grained delta forward. Its recorded e, p and k
are the pre-penalty values; rg_cost enters the Stage B test only. Both
efficiencies are stored on the message for audit.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List

import numpy as np

from ..belief.metrics import normalized_uncertainty
from ..config import LoopConfig
from ..types import Message


def efficiency(e: float, p: float, k: float, eps: float = 1e-9) -> float:
    return (float(e) + float(p)) / (float(k) + eps)


def admission_threshold(q_before: np.ndarray, cfg: LoopConfig) -> float:
    """theta = alpha + beta * normalized uncertainty of the starting belief."""
    u = normalized_uncertainty(q_before, cfg.eps, cfg.normalize_eps)
    return float(cfg.alpha) + float(cfg.beta) * u


def rg_avg_pool(v: np.ndarray, rg_level: int) -> np.ndarray:
    """Non-overlapping average pooling with window 2**rg_level.

    A trailing partial window is dropped. If no full window fits, the result
    is a single zero.
    """
    arr = np.asarray(v, dtype=float).reshape(-1)
    window = 1 << int(rg_level)
    if window <= 1:
        return arr.copy()
    n_full = (arr.size // window) * window
    if n_full == 0:
        return np.zeros(1, dtype=float)
    return arr[:n_full].reshape(-1, window).mean(axis=1)


def filter_messages(messages: Iterable[Message], theta: float, cfg: LoopConfig) -> List[Message]:
    """Return the survivors of both stages, in input order."""
    eps = float(cfg.eps)
    survivors: List[Message] = []
    for m in messages:
        eta = efficiency(m.e, m.p, m.k, eps)
        if eta < theta:
            continue
        eta_rg = efficiency(m.e, m.p, m.k + float(cfg.rg_cost), eps)
        if eta_rg >= float(cfg.gamma) * theta:
            survivors.append(replace(m, dx=rg_avg_pool(m.dx, cfg.rg_level), eta=eta, eta_rg=eta_rg))
    return survivors
