"""gwignite/messages/generator.py

Message generator: per-level summaries of a belief transition.

For a transition ``before -> after`` (both normalized first):

- dx   = after - before
- e    = KL(after || before)                       (energy)
- p    = H(before) - H(after)                      (precision gain)
- k    = ||dx||_2 + 0.5 * nnz(dx) / (len(dx) + eps) (complexity)
- prec = |dx| (+ task term at level 1), unit L2 norm

Two messages are produced per event. Level 0 summarizes the local Bayes
update; level 1 summarizes a task-biased reinterpretation of its result.
"""

from __future__ import annotations

import numpy as np

from ..belief.adapter import normalize
from ..belief.metrics import entropy, kl, softmax_logits
from ..config import LoopConfig
from ..types import Message


def precision_from_delta(dx: np.ndarray, task: np.ndarray, level: int, cfg: LoopConfig) -> np.ndarray:
    """Unit-norm precision vector for a message.

    At level 1 the task vector is added (scaled by task_precision_gain) on the
    overlapping prefix before normalizing.
    """
    prec = np.abs(np.asarray(dx, dtype=float).reshape(-1))
    if int(level) == 1:
        task_arr = np.asarray(task, dtype=float).reshape(-1)
        overlap = min(prec.size, task_arr.size)
        prec[:overlap] += float(cfg.task_precision_gain) * task_arr[:overlap]
    norm = max(float(np.sqrt(np.sum(prec * prec))), float(cfg.eps))
    return prec / norm


def message_metrics(
    q_before: np.ndarray,
    q_after: np.ndarray,
    task: np.ndarray,
    level: int,
    cfg: LoopConfig,
) -> Message:
    """Build the level-`level` message for the transition q_before -> q_after."""
    eps = float(cfg.eps)
    qb = normalize(q_before, cfg.normalize_eps)
    qa = normalize(q_after, cfg.normalize_eps)
    dx = qa - qb

    e = kl(qa, qb, eps)
    p = entropy(qb, eps) - entropy(qa, eps)
    l2 = float(np.sqrt(np.sum(dx * dx)))
    nnz = float(np.count_nonzero(np.abs(dx) > float(cfg.nnz_tol)))
    k = l2 + 0.5 * (nnz / (float(dx.size) + eps))

    prec = precision_from_delta(dx, task, level, cfg)
    return Message(level=int(level), dx=dx, prec=prec, e=float(e), p=float(p), k=float(k))


def task_biased_belief(q: np.ndarray, task: np.ndarray, gain: float, eps: float = 1e-9) -> np.ndarray:
    """softmax(log q + gain * task), task applied on the overlapping prefix only."""
    logits = np.log(np.maximum(np.asarray(q, dtype=float).reshape(-1), eps))
    task_arr = np.asarray(task, dtype=float).reshape(-1)
    overlap = min(logits.size, task_arr.size)
    logits[:overlap] += float(gain) * task_arr[:overlap]
    return softmax_logits(logits, eps)
