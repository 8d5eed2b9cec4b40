import numpy as np
import pytest

from gwignite.config import LoopConfig
from gwignite.messages import (admission_threshold, efficiency, filter_messages,
                               message_metrics, precision_from_delta, rg_avg_pool,
                               task_biased_belief)
from gwignite.types import Message


def make_message(**overrides) -> Message:
    fields = dict(
        level=0,
        dx=np.array([0.1, -0.1, 0.2, -0.2]),
        prec=np.array([0.5, 0.5, 0.5, 0.5]),
        e=0.5,
        p=0.5,
        k=0.9,
    )
    fields.update(overrides)
    return Message(**fields)


def test_identical_beliefs_give_empty_message() -> None:
    q = np.array([0.25, 0.25, 0.25, 0.25])
    m = message_metrics(q, q, np.zeros(4), 0, LoopConfig())
    assert np.allclose(m.dx, 0.0)
    assert m.e == pytest.approx(0.0, abs=1e-12)
    assert m.p == pytest.approx(0.0, abs=1e-12)
    assert m.k == pytest.approx(0.0)
    assert np.allclose(m.prec, 0.0)


def test_message_metrics_for_sharpening_update() -> None:
    before = np.array([0.25, 0.25, 0.25, 0.25])
    after = np.array([0.1, 0.7, 0.1, 0.1])
    m = message_metrics(before, after, np.zeros(4), 0, LoopConfig())
    assert np.allclose(m.dx, after - before)
    assert m.e > 0.0
    assert m.p > 0.0
    expected_k = np.linalg.norm(after - before) + 0.5 * (4.0 / (4.0 + 1e-9))
    assert m.k == pytest.approx(expected_k)
    assert np.linalg.norm(m.prec) == pytest.approx(1.0)


def test_level_one_precision_includes_task_prefix() -> None:
    cfg = LoopConfig()
    dx = np.array([0.1, -0.1, 0.0])
    p0 = precision_from_delta(dx, np.array([1.0]), 0, cfg)
    p1 = precision_from_delta(dx, np.array([1.0]), 1, cfg)
    assert np.allclose(p0, [np.sqrt(0.5), np.sqrt(0.5), 0.0])
    assert p1[0] > p1[1]
    assert np.linalg.norm(p1) == pytest.approx(1.0)


def test_task_biased_belief_moves_mass_to_task_index() -> None:
    q = np.array([0.3, 0.5, 0.1, 0.1])
    biased = task_biased_belief(q, np.array([0.0, 1.0]), 0.05)
    assert biased.sum() == pytest.approx(1.0)
    assert biased[1] > q[1]
    assert np.allclose(biased[2:] / biased[0], q[2:] / q[0])


def test_rg_avg_pool_pairs_and_edge_cases() -> None:
    assert np.allclose(rg_avg_pool(np.array([1.0, 2.0, 3.0, 4.0, 5.0]), 1), [1.5, 3.5])
    assert np.allclose(rg_avg_pool(np.array([1.0, 2.0, 3.0, 4.0]), 2), [2.5])
    assert np.allclose(rg_avg_pool(np.array([1.0]), 1), [0.0])
    assert np.allclose(rg_avg_pool(np.array([1.0, 2.0]), 0), [1.0, 2.0])


def test_efficiency_and_threshold() -> None:
    cfg = LoopConfig()
    assert efficiency(0.30, 0.25, 0.90) == pytest.approx(0.55 / 0.90)
    assert admission_threshold(np.full(4, 0.25), cfg) == pytest.approx(0.10 + 0.25)
    assert admission_threshold(np.array([1.0, 0.0, 0.0, 0.0]), cfg) == pytest.approx(0.10, abs=1e-6)


def test_survivor_carries_coarse_delta_and_original_complexity() -> None:
    survivors = filter_messages([make_message()], 0.5, LoopConfig())
    assert len(survivors) == 1
    s = survivors[0]
    assert np.allclose(s.dx, [0.0, 0.0])
    assert s.k == pytest.approx(0.9)
    assert s.eta == pytest.approx(1.0 / 0.9)
    assert s.eta_rg == pytest.approx(1.0 / 1.0)
    assert s.prec.shape == (4,)


def test_stage_a_rejects_inefficient_message() -> None:
    assert filter_messages([make_message(e=0.01, p=0.01)], 0.5, LoopConfig()) == []


def test_stage_b_rejects_message_that_cannot_pay_rg_cost() -> None:
    cfg = LoopConfig(gamma=1.0, rg_cost=0.5)
    # eta = 1/0.9 passes theta = 1, eta_rg = 1/1.4 does not
    assert filter_messages([make_message()], 1.0, cfg) == []
