"""gwignite/workspace/coherence.py

Coherence of the surviving messages.

    coherence = (1 / m^2) * sum_i sum_j cos(prec_i, prec_j)
    cos(a, b) = a.b / (||a|| ||b|| + eps)

Diagonal terms are included, so a single survivor scores ~1. No survivors
score 0.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..types import Message


def coherence(precisions: np.ndarray, eps: float = 1e-9) -> float:
    """Mean pairwise cosine similarity over the rows of an (m, d) matrix."""
    mat = np.asarray(precisions, dtype=float)
    if mat.ndim != 2 or mat.shape[0] == 0:
        return 0.0
    m = mat.shape[0]
    norms = np.sqrt(np.sum(mat * mat, axis=1))
    dots = mat @ mat.T
    cos = dots / (np.outer(norms, norms) + eps)
    return float(np.sum(cos) / float(m * m))


def survivor_coherence(survivors: Sequence[Message], eps: float = 1e-9) -> float:
    if not survivors:
        return 0.0
    return coherence(np.vstack([np.asarray(m.prec, dtype=float) for m in survivors]), eps)
