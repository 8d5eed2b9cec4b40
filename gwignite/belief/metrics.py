"""gwignite/belief/metrics.py

Information-theoretic quantities over discrete beliefs.

Every function here treats its probability arguments as *unnormalized*:
components are floored at ``eps`` and renormalized before any logarithm is
taken, so all-zero or sparse inputs yield defined, finite values.

Definitions
-----------
- H(q)         = -sum_i q_i ln q_i
- KL(q || p)   = sum_i q_i (ln q_i - ln p_i)
- G(q)         = KL(normalize(q) || normalize(prior)) - E_q[ln lik]
- u(q)         = H(normalize(q)) / max(ln n, eps)
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .adapter import NORMALIZE_EPS, normalize

EPS = 1e-9


def _floor_renorm(q: np.ndarray, eps: float) -> np.ndarray:
    arr = np.maximum(np.asarray(q, dtype=float).reshape(-1), eps)
    return arr / max(float(np.sum(arr)), eps)


def entropy(q: np.ndarray, eps: float = EPS) -> float:
    """Shannon entropy in nats."""
    qn = _floor_renorm(q, eps)
    return float(-np.sum(qn * np.log(qn)))


def kl(q: np.ndarray, p: np.ndarray, eps: float = EPS) -> float:
    """KL divergence KL(q || p) in nats."""
    qn = _floor_renorm(q, eps)
    pn = _floor_renorm(p, eps)
    return float(np.sum(qn * (np.log(qn) - np.log(pn))))


def free_energy(
    q: np.ndarray,
    prior: np.ndarray,
    likelihood: np.ndarray,
    eps: float = EPS,
    normalize_eps: float = NORMALIZE_EPS,
) -> float:
    """Variational free energy G(q) = KL(q || prior) - E_q[ln likelihood].

    Lower values mean the belief explains the observation better at a smaller
    departure from the prior.
    """
    qn = normalize(q, normalize_eps)
    pn = normalize(prior, normalize_eps)
    lik = np.maximum(np.asarray(likelihood, dtype=float).reshape(-1), eps)
    eloglik = float(np.sum(qn * np.log(lik)))
    return kl(qn, pn, eps) - eloglik


def safe_ln_n(n: int, eps: float = EPS) -> float:
    return max(math.log(n), eps) if n > 0 else eps


def normalized_uncertainty(q: np.ndarray, eps: float = EPS, normalize_eps: float = NORMALIZE_EPS) -> float:
    """Entropy of normalize(q) divided by ln(n): 0 for a point mass, 1 for uniform."""
    qn = normalize(q, normalize_eps)
    return entropy(qn, eps) / safe_ln_n(int(qn.size), eps)


def softmax_logits(logits: np.ndarray, eps: float = EPS) -> np.ndarray:
    """Max-stabilized softmax with an eps-floored partition function."""
    z = np.asarray(logits, dtype=float).reshape(-1)
    if z.size == 0:
        return z.copy()
    ex = np.exp(z - float(np.max(z)))
    return ex / max(float(np.sum(ex)), eps)


def ravel_multi_index(o: Sequence[int], shape: Sequence[int]) -> int:
    """Row-major flat index of observation `o` within `shape`.

    The last dimension varies fastest. An empty shape (a likelihood tensor
    with no observation axes) maps every observation to index 0.
    """
    idx = 0
    stride = 1
    for oi, dim in zip(reversed(list(o)), reversed(list(shape))):
        idx += int(oi) * stride
        stride *= int(dim)
    return idx
