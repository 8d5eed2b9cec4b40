import numpy as np
import pytest

from gwignite.belief import normalize
from gwignite.config import LoopConfig
from gwignite.sensory import compute_temperature, modulate_likelihood, sensory_from_flat_col

LIK = np.array([0.2, 0.6, 0.1, 0.1])


def test_strong_inputs_clamp_to_min_temperature_and_sharpen() -> None:
    cfg = LoopConfig()
    lik_mod, temp = modulate_likelihood(LIK, 1e6, 0.0, cfg)
    assert temp == pytest.approx(0.25)
    assert lik_mod.max() > normalize(LIK).max()


def test_weak_inputs_clamp_to_max_temperature_and_flatten() -> None:
    cfg = LoopConfig()
    lik_mod, temp = modulate_likelihood(LIK, 0.0, 0.0, cfg)
    assert temp == pytest.approx(4.0)
    assert lik_mod.max() < normalize(LIK).max()
    assert np.isclose(lik_mod.sum(), 1.0)


def test_negative_inputs_are_treated_as_zero() -> None:
    cfg = LoopConfig()
    assert compute_temperature(-3.0, -1.0, cfg) == pytest.approx(cfg.t_max)


def test_touch_pressure_is_weighted() -> None:
    cfg = LoopConfig()
    assert compute_temperature(0.5, 1.0, cfg) == pytest.approx(1.0 / (0.5 + 0.75))


def test_fixture_temperature_is_unclamped() -> None:
    out = sensory_from_flat_col(LIK, 1.2, 0.0, LoopConfig())
    assert out.temperature == pytest.approx(1.0 / 1.2)
    assert np.allclose(out.lik_raw, LIK)
    assert np.isclose(out.lik_mod.sum(), 1.0)
    assert int(np.argmax(out.lik_mod)) == 1
