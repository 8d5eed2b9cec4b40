import numpy as np
import pytest

from gwignite.config import LoopConfig
from gwignite.types import IgnitionReason, Message
from gwignite.workspace import (apply_broadcast, coherence, combine_survivors,
                                decide_ignition, expand_rg_to_n, resolve_ignition,
                                survivor_coherence)


def _survivor(dx, eta, prec=(1.0, 0.0, 0.0, 0.0), level=0) -> Message:
    return Message(level=level, dx=np.array(dx), prec=np.array(prec), e=0.0, p=0.0, k=1.0, eta=eta)


def test_coherence_identical_rows_is_one() -> None:
    row = np.array([0.5, 0.5, 0.5, 0.5])
    assert coherence(np.vstack([row, row, row])) == pytest.approx(1.0, abs=1e-6)


def test_coherence_empty_is_zero() -> None:
    assert coherence(np.zeros((0, 4))) == 0.0
    assert survivor_coherence([]) == 0.0


def test_coherence_orthogonal_rows_counts_diagonal_only() -> None:
    mat = np.array([[1.0, 0.0], [0.0, 1.0]])
    assert coherence(mat) == pytest.approx(0.5, abs=1e-6)


def test_toy_coherence_matches_reference_value() -> None:
    mat = np.array([[0.1, 0.7, 0.1, 0.1], [0.2, 0.6, 0.1, 0.1]])
    a, b = mat
    cos = a @ b / (np.linalg.norm(a) * np.linalg.norm(b))
    assert coherence(mat) == pytest.approx((2.0 + 2.0 * cos) / 4.0, abs=1e-6)


def test_combine_survivors_softmax_weights() -> None:
    cfg = LoopConfig()
    assert combine_survivors([], cfg).size == 0
    equal = combine_survivors([_survivor([1.0, 0.0], 2.0), _survivor([0.0, 1.0], 2.0)], cfg)
    assert np.allclose(equal, [0.5, 0.5])
    skewed = combine_survivors([_survivor([1.0, 0.0], 3.0), _survivor([0.0, 1.0], 1.0)], cfg)
    w = np.exp(2.0) / (np.exp(2.0) + 1.0)
    assert np.allclose(skewed, [w, 1.0 - w])


def test_expand_rg_to_n_repeats_truncates_and_pads() -> None:
    assert np.allclose(expand_rg_to_n(np.array([1.0, 2.0]), 5, 1), [1.0, 1.0, 2.0, 2.0, 0.0])
    assert np.allclose(expand_rg_to_n(np.array([1.0, 2.0, 3.0]), 4, 1), [1.0, 1.0, 2.0, 2.0])
    assert np.allclose(expand_rg_to_n(np.zeros(0), 3, 1), [0.0, 0.0, 0.0])


def test_expand_rg_to_n_huge_window_fills_from_first_value() -> None:
    assert np.allclose(expand_rg_to_n(np.array([0.0]), 4, 40), np.zeros(4))
    assert np.allclose(expand_rg_to_n(np.array([0.7, 9.0]), 3, 40), [0.7, 0.7, 0.7])
    assert np.allclose(expand_rg_to_n(np.array([1.0, 2.0]), 2, 0), [1.0, 2.0])


def test_apply_broadcast_zero_vector_keeps_belief() -> None:
    q = np.array([0.1, 0.2, 0.3, 0.4])
    assert np.allclose(apply_broadcast(q, np.zeros(4), 1.0), q)
    shifted = apply_broadcast(q, np.array([1.0, 0.0, 0.0, 0.0]), 1.0)
    assert shifted[0] > q[0]
    assert shifted.sum() == pytest.approx(1.0)


def test_ignition_order_of_outcomes() -> None:
    cfg = LoopConfig()
    assert decide_ignition(0, 1.0, 1.0, cfg) is IgnitionReason.NO_SURVIVORS
    assert decide_ignition(2, 0.3, 1.0, cfg) is IgnitionReason.COHERENCE_FAIL
    assert decide_ignition(2, 0.3, 0.0, cfg) is IgnitionReason.COHERENCE_FAIL
    assert decide_ignition(2, 0.9, 0.01, cfg) is IgnitionReason.DELTA_G_FAIL
    assert decide_ignition(2, 0.9, 0.2, cfg) is IgnitionReason.IGNITE


def test_failed_ignition_keeps_local_update() -> None:
    cfg = LoopConfig()
    q_after = np.array([0.6, 0.4])
    q_broadcast = np.array([0.9, 0.1])
    kept = resolve_ignition(
        survivors_n=1, coherence=0.2, d_g_broadcast=1.0, q_after=q_after, q_broadcast=q_broadcast, cfg=cfg
    )
    assert not kept.ignited
    assert np.allclose(kept.q_next, q_after)
    fired = resolve_ignition(
        survivors_n=1, coherence=0.9, d_g_broadcast=1.0, q_after=q_after, q_broadcast=q_broadcast, cfg=cfg
    )
    assert fired.ignited
    assert np.allclose(fired.q_next, q_broadcast)
