"""gwignite/workspace/ignition.py

Ignition decision.

Outcomes are terminal and checked in strict order; the first match wins:

  1. no survivors                 -> no_survivors
  2. coherence < c_crit           -> coherence_fail
  3. dG_broadcast < delta         -> deltaG_fail
  4. otherwise                    -> ignite

Only an ignition admits the broadcast belief. On every other outcome the
local Bayes update is still kept as the next running belief.
"""

from __future__ import annotations

import numpy as np

from ..config import LoopConfig
from ..types import IgnitionOutcome, IgnitionReason


def decide_ignition(survivors_n: int, coherence: float, d_g_broadcast: float, cfg: LoopConfig) -> IgnitionReason:
    if int(survivors_n) == 0:
        return IgnitionReason.NO_SURVIVORS
    if float(coherence) < float(cfg.c_crit):
        return IgnitionReason.COHERENCE_FAIL
    if float(d_g_broadcast) < float(cfg.delta):
        return IgnitionReason.DELTA_G_FAIL
    return IgnitionReason.IGNITE


def resolve_ignition(
    *,
    survivors_n: int,
    coherence: float,
    d_g_broadcast: float,
    q_after: np.ndarray,
    q_broadcast: np.ndarray,
    cfg: LoopConfig,
) -> IgnitionOutcome:
    reason = decide_ignition(survivors_n, coherence, d_g_broadcast, cfg)
    ignited = reason is IgnitionReason.IGNITE
    q_next = np.array(q_broadcast if ignited else q_after, dtype=float)
    return IgnitionOutcome(reason=reason, ignited=ignited, q_next=q_next)
