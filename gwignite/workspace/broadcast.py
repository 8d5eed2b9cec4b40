"""gwignite/workspace/broadcast.py

Broadcast combiner.

Survivors are merged in the coarse-grained space with softmax weights over
their efficiencies, the merged vector is expanded back to the belief length
by repetition, and it is applied to the local posterior in log space:

    q_broadcast = softmax(log q_after + lambda * b_expanded)
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..belief.metrics import softmax_logits
from ..config import LoopConfig
from ..types import Message


def combine_survivors(survivors: Sequence[Message], cfg: LoopConfig) -> np.ndarray:
    """Softmax(eta)-weighted sum of survivor deltas; empty if there are none."""
    if not survivors:
        return np.zeros(0, dtype=float)
    etas = np.array([float(m.eta) for m in survivors], dtype=float)
    ex = np.exp(etas - float(np.max(etas)))
    weights = ex / max(float(np.sum(ex)), float(cfg.eps))

    b = np.zeros(np.asarray(survivors[0].dx).size, dtype=float)
    for w, m in zip(weights, survivors):
        b = b + float(w) * np.asarray(m.dx, dtype=float)
    return b


def expand_rg_to_n(b_rg: np.ndarray, n: int, rg_level: int) -> np.ndarray:
    """Repeat each coarse value 2**rg_level times, then truncate/zero-pad to n."""
    coarse = np.asarray(b_rg, dtype=float).reshape(-1)
    n = int(n)
    if coarse.size == 0:
        return np.zeros(n, dtype=float)
    # window may exceed n; only n entries are ever built
    idx = np.arange(n) // (1 << int(rg_level))
    return np.where(idx < coarse.size, coarse[np.minimum(idx, coarse.size - 1)], 0.0)


def apply_broadcast(q: np.ndarray, b_expanded: np.ndarray, lam: float, eps: float = 1e-9) -> np.ndarray:
    logits = np.log(np.maximum(np.asarray(q, dtype=float).reshape(-1), eps))
    logits = logits + float(lam) * np.asarray(b_expanded, dtype=float).reshape(-1)
    return softmax_logits(logits, eps)
