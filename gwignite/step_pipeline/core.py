"""gwignite/step_pipeline/core.py

The one authoritative per-event step.

Order of operations
-------------------
 1. flat observation index; seed the running belief on the first event
 2. history features (prior rows only); exploration inputs (event or policy)
 3. sensory modulation of the likelihood column; u_t; G(before)
 4. local Bayes update of the prior; G(after, local)
 5. level-0 and level-1 messages; threshold; two-stage filter
 6. coherence; broadcast merge; expanded broadcast; G(after, broadcast)
 7. ignition; running belief <- q_next; history push; features after push

Both drivers (single-shot and streaming) call this function; there is no
other copy of the step.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from ..belief.adapter import bayes_update, normalize
from ..belief.metrics import free_energy, normalized_uncertainty, ravel_multi_index
from ..config import LoopConfig
from ..control.policy import resolve_action
from ..messages.filter import admission_threshold, filter_messages
from ..messages.generator import message_metrics, task_biased_belief
from ..sensory import sensory_from_flat_col
from ..types import HistoryRow, StepEvent, StepResult
from ..workspace.broadcast import apply_broadcast, combine_survivors, expand_rg_to_n
from ..workspace.coherence import survivor_coherence
from ..workspace.ignition import resolve_ignition
from .logging import _dbg, _log_step_event

if TYPE_CHECKING:
    from ..session import LoopSession


def step_pipeline(session: "LoopSession", event: StepEvent, cfg: LoopConfig) -> StepResult:
    """Advance `session` by one event.

    Inputs
    ------
    session:
        Owner of the running belief and the history window. Mutated: its
        belief is replaced by the ignition outcome and one history row is
        pushed.
    event:
        A validated input record (lengths already checked by the reader).
    cfg:
        Loop constants.

    Outputs
    -------
    StepResult with every quantity computed for the event.
    """
    eps = float(cfg.eps)
    n = event.n
    o_idx = ravel_multi_index(event.o, event.a_shape[1:])

    prior = np.asarray(event.p_prior, dtype=float)
    task = np.asarray(event.task_vec, dtype=float)

    if session.belief is None:
        seed = event.q0 if event.q0 is not None else prior
        session.belief = np.array(seed, dtype=float)
        _dbg(f"[seed] source={'q0' if event.q0 is not None else 'prior'}", t=event.t)
    q_before = np.array(session.belief, dtype=float)

    history = session.history
    features_pre = history.features(event.t)
    action, action_source = resolve_action(event, q_before, history, cfg)

    sensory = sensory_from_flat_col(event.a_flat_col, action.sniff_strength, action.touch_pressure, cfg)
    lik = sensory.lik_mod

    u_t = normalized_uncertainty(q_before, eps, cfg.normalize_eps)
    g_before = free_energy(q_before, prior, lik, eps, cfg.normalize_eps)

    q_after = bayes_update(normalize(prior, cfg.normalize_eps), normalize(lik, cfg.normalize_eps), cfg.normalize_eps)
    g_after_local = free_energy(q_after, prior, lik, eps, cfg.normalize_eps)

    q_task = task_biased_belief(q_after, task, cfg.task_gain, eps)
    messages = [
        message_metrics(q_before, q_after, task, 0, cfg),
        message_metrics(q_after, q_task, task, 1, cfg),
    ]

    theta = admission_threshold(q_before, cfg)
    survivors = filter_messages(messages, theta, cfg)
    coh = survivor_coherence(survivors, eps)

    broadcast = combine_survivors(survivors, cfg)
    b_expanded = expand_rg_to_n(broadcast, n, cfg.rg_level)
    q_broadcast = apply_broadcast(q_after, b_expanded, cfg.lambda_broadcast, eps)
    g_after_broadcast = free_energy(q_broadcast, prior, lik, eps, cfg.normalize_eps)
    d_g_broadcast = g_before - g_after_broadcast

    outcome = resolve_ignition(
        survivors_n=len(survivors),
        coherence=coh,
        d_g_broadcast=d_g_broadcast,
        q_after=q_after,
        q_broadcast=q_broadcast,
        cfg=cfg,
    )
    session.belief = outcome.q_next

    history.push(
        HistoryRow(
            t=int(event.t),
            ignited=outcome.ignited,
            d_g_broadcast=float(d_g_broadcast),
            temperature=float(sensory.temperature),
            sniff_strength=float(action.sniff_strength),
            touch_pressure=float(action.touch_pressure),
        )
    )
    features_post = history.features(event.t)

    _dbg(
        f"[ignition] reason={outcome.reason.value} survivors={len(survivors)} "
        f"coherence={coh:.4f} theta={theta:.4f} dG_broadcast={d_g_broadcast:.4f}",
        t=event.t,
    )
    _log_step_event(
        "step",
        {
            "t": int(event.t),
            "o_idx": int(o_idx),
            "action_source": action_source.value,
            "sniff_strength": float(action.sniff_strength),
            "touch_pressure": float(action.touch_pressure),
            "temperature": float(sensory.temperature),
            "theta": float(theta),
            "survivors_n": len(survivors),
            "survivor_levels": [int(m.level) for m in survivors],
            "coherence": float(coh),
            "d_g_broadcast": float(d_g_broadcast),
            "ignited": bool(outcome.ignited),
            "ignite_reason": outcome.reason.value,
            "window_len": int(features_post.window_len),
        },
    )

    return StepResult(
        t=int(event.t),
        o_idx=int(o_idx),
        action=action,
        action_source=action_source,
        sensory=sensory,
        u_t=float(u_t),
        theta=float(theta),
        q_before=q_before,
        q_after=q_after,
        q_broadcast=q_broadcast,
        q_next=np.array(outcome.q_next, dtype=float),
        messages=messages,
        survivors=survivors,
        coherence=float(coh),
        broadcast=broadcast,
        b_expanded=b_expanded,
        g_before=float(g_before),
        g_after_local=float(g_after_local),
        g_after_broadcast=float(g_after_broadcast),
        reason=outcome.reason,
        features_pre=features_pre,
        features_post=features_post,
    )
