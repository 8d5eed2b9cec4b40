"""gwignite/belief/adapter.py

Belief adapter: simplex projection and Bayes combination.

Semantics
---------
`normalize` floors every component at ``eps`` and divides by the
``eps``-floored sum of the *original* vector. For nonnegative inputs with a
positive sum the result is a probability vector (up to the floor added to
zero entries). For vectors whose sum is zero or negative the denominator is
the floor itself, so the output is nonnegative and finite but does not sum
to 1. That behavior is kept as-is; callers that need a strict simplex feed
nonnegative vectors.
"""

from __future__ import annotations

import numpy as np

NORMALIZE_EPS = 1e-12


def normalize(v: np.ndarray, eps: float = NORMALIZE_EPS) -> np.ndarray:
    """Project `v` toward the probability simplex.

    Inputs
    ------
    v:
        1D array of finite reals.
    eps:
        Element and denominator floor.

    Outputs
    -------
    np.ndarray of the same length, nonnegative and finite.
    """
    arr = np.asarray(v, dtype=float).reshape(-1)
    s = float(np.sum(arr))
    return np.maximum(arr, eps) / max(s, eps)


def bayes_update(prior: np.ndarray, likelihood: np.ndarray, eps: float = NORMALIZE_EPS) -> np.ndarray:
    """Posterior over states: normalize(prior * likelihood)."""
    post = np.asarray(prior, dtype=float).reshape(-1) * np.asarray(likelihood, dtype=float).reshape(-1)
    return normalize(post, eps)
