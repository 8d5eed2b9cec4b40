import json
import logging
import logging.handlers

import numpy as np
import pytest

from gwignite.belief import free_energy
from gwignite.config import LoopConfig
from gwignite.harness.runner import fixture_event
from gwignite.session import LoopSession
from gwignite.step_pipeline import logging as step_logging
from gwignite.types import ActionSource, IgnitionReason, ReplayRow, TraceRow


def test_fixture_step_ignites_and_shifts_mass_to_state_one() -> None:
    session = LoopSession()
    res = session.step(fixture_event())

    assert res.action_source is ActionSource.EVENT
    assert res.sensory.temperature == pytest.approx(1.0 / 1.2)
    assert np.allclose(res.q_before, [0.35, 0.22, 0.25, 0.18])
    assert int(np.argmax(res.q_after)) == 1
    assert res.q_after[1] > res.q_before[1]

    assert res.survivor_levels == [0]
    assert res.survivors[0].dx.shape == (2,)
    assert res.coherence == pytest.approx(1.0, abs=1e-6)
    assert res.broadcast.shape == (2,)
    assert res.b_expanded.shape == (4,)
    assert res.d_g_broadcast >= LoopConfig().delta
    assert res.reason is IgnitionReason.IGNITE
    assert np.allclose(session.belief, res.q_broadcast)


def test_free_energy_bookkeeping_matches_beliefs() -> None:
    ev = fixture_event()
    res = LoopSession().step(ev)
    lik = res.sensory.lik_mod
    assert res.g_before == pytest.approx(free_energy(res.q_before, ev.p_prior, lik))
    assert res.g_after_local == pytest.approx(free_energy(res.q_after, ev.p_prior, lik))
    assert res.d_g_local == pytest.approx(res.g_before - res.g_after_local)


def test_high_threshold_leaves_no_survivors() -> None:
    session = LoopSession(LoopConfig(alpha=1.0, beta=0.0))
    res = session.step(fixture_event())
    assert res.theta == pytest.approx(1.0)
    assert res.survivors_n == 0
    assert res.coherence == 0.0
    assert res.broadcast.size == 0
    assert np.allclose(res.b_expanded, 0.0)
    assert res.reason is IgnitionReason.NO_SURVIVORS
    assert np.allclose(session.belief, res.q_after)

    row = TraceRow.from_result(res)
    assert row.dx == []
    assert (row.e, row.p, row.k, row.eta) == (0.0, 0.0, 0.0, 0.0)


def test_coherence_failure_takes_priority_over_delta_g() -> None:
    session = LoopSession(LoopConfig(c_crit=1.5))
    res = session.step(fixture_event())
    assert res.survivors_n > 0
    assert res.d_g_broadcast >= session.cfg.delta
    assert res.reason is IgnitionReason.COHERENCE_FAIL
    assert np.allclose(session.belief, res.q_after)


def test_small_improvement_fails_delta_g() -> None:
    res = LoopSession(LoopConfig(delta=50.0)).step(fixture_event())
    assert res.reason is IgnitionReason.DELTA_G_FAIL
    assert not res.ignited


def test_history_row_is_pushed_after_decision() -> None:
    session = LoopSession(history_capacity=4)
    first = session.step(fixture_event())
    assert first.features_pre.window_len == 0
    assert first.features_post.window_len == 1
    assert first.features_post.ignite_rate == pytest.approx(1.0)

    second = session.step(fixture_event())
    assert second.features_pre.window_len == 1
    assert second.features_post.window_len == 2


def test_belief_is_seeded_once_and_carried_forward() -> None:
    session = LoopSession()
    first = session.step(fixture_event())
    ev = fixture_event()
    ev.q0 = np.array([0.97, 0.01, 0.01, 0.01])
    second = session.step(ev)
    assert np.allclose(second.q_before, first.q_next)


def test_missing_inputs_invoke_policy() -> None:
    ev = fixture_event()
    ev.sniff_strength = None
    ev.touch_pressure = None
    res = LoopSession().step(ev)
    assert res.action_source is ActionSource.POLICY
    assert 0.1 <= res.action.sniff_strength <= 3.0
    assert 0.0 <= res.action.touch_pressure <= 3.0


def test_prior_seeds_belief_without_q0() -> None:
    ev = fixture_event()
    ev.q0 = None
    res = LoopSession().step(ev)
    assert np.allclose(res.q_before, ev.p_prior)


def test_session_reset_forgets_state() -> None:
    session = LoopSession()
    session.step(fixture_event())
    session.reset()
    assert session.belief is None
    assert len(session.history) == 0
    assert session.steps == 0


def test_replay_row_extends_trace_row() -> None:
    res = LoopSession().step(fixture_event())
    trace = TraceRow.from_result(res).to_dict()
    replay = ReplayRow.from_result(res).to_dict()
    for key, value in trace.items():
        assert replay[key] == value
    assert replay["action_source"] == "event"
    assert replay["mem_window_len"] == 1
    assert replay["q_next"] == replay["q_broadcast"]
    assert trace["o_idx"] == 1 * 5 + 2


def test_zero_thresholds_admit_both_levels_and_mix_by_efficiency() -> None:
    res = LoopSession(LoopConfig(alpha=0.0, beta=0.0, gamma=0.0)).step(fixture_event())
    assert res.theta == 0.0
    assert res.survivor_levels == [0, 1]
    for s in res.survivors:
        assert s.dx.shape == (2,)
    assert 0.0 < res.coherence <= 1.0

    etas = np.array([s.eta for s in res.survivors])
    weights = np.exp(etas - etas.max())
    weights = weights / weights.sum()
    expected = sum(w * s.dx for w, s in zip(weights, res.survivors))
    assert np.allclose(res.broadcast, expected)
    assert np.allclose(res.b_expanded, np.repeat(expected, 2))


def test_pooling_window_wider_than_belief_runs_without_blowup() -> None:
    res = LoopSession(LoopConfig(rg_level=40)).step(fixture_event())
    assert res.survivor_levels == [0]
    assert np.allclose(res.broadcast, [0.0])
    assert res.b_expanded.shape == (4,)
    assert np.allclose(res.b_expanded, 0.0)
    assert np.allclose(res.q_broadcast, res.q_after)


def test_step_logger_emits_one_json_record_per_step() -> None:
    handler = logging.handlers.BufferingHandler(capacity=100)
    logger = step_logging.STEP_LOGGER
    old_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        session = LoopSession()
        session.step(fixture_event())
        session.step(fixture_event())
    finally:
        logger.removeHandler(handler)
        logger.setLevel(old_level)

    records = [json.loads(r.getMessage()) for r in handler.buffer]
    assert [r["t"] for r in records] == [0, 0]
    assert [r["window_len"] for r in records] == [1, 2]
    first = records[0]
    assert first["kind"] == "step"
    assert first["ignited"] is True
    assert first["ignite_reason"] == "ignite"
    assert first["survivor_levels"] == [0]
    assert "timestamp" not in first


def test_debug_lines_are_prefixed_with_event_time(monkeypatch, capsys) -> None:
    monkeypatch.setattr(step_logging, "DEBUG", True)
    LoopSession().step(fixture_event())
    lines = capsys.readouterr().out.splitlines()
    assert lines
    assert all(line.startswith("[gwignite.step t=0] ") for line in lines)
