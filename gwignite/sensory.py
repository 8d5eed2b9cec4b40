"""gwignite/sensory.py

Sensory modulator: exploration inputs reshape the likelihood column.

    T = clamp(t0 / max(max(s, 0) + k_touch * max(p, 0), eps), [t_min, t_max])
    lik_mod = max(lik, eps) ** (1 / T) / sum(...)

Stronger sniffing or harder touch lowers T and sharpens the likelihood;
weak inputs raise T and flatten it toward uniform.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .config import LoopConfig
from .types import SensoryOut


def compute_temperature(sniff_strength: float, touch_pressure: float, cfg: LoopConfig) -> float:
    """Temperature derived from the two exploration inputs."""
    eps = float(cfg.eps)
    denom = max(max(float(sniff_strength), 0.0) + float(cfg.k_touch) * max(float(touch_pressure), 0.0), eps)
    temp = float(cfg.t0) / denom
    return float(min(max(temp, float(cfg.t_min)), float(cfg.t_max)))


def modulate_likelihood(
    lik: np.ndarray,
    sniff_strength: float,
    touch_pressure: float,
    cfg: LoopConfig,
) -> Tuple[np.ndarray, float]:
    """Temper the likelihood column.

    Inputs
    ------
    lik:
        Raw likelihood column (length n, nonnegative).
    sniff_strength, touch_pressure:
        Exploration inputs; negatives are treated as 0.
    cfg:
        Temperature law constants (t0, k_touch, t_min, t_max, eps).

    Outputs
    -------
    (lik_mod, temperature)
    """
    eps = float(cfg.eps)
    temp = compute_temperature(sniff_strength, touch_pressure, cfg)
    v = np.power(np.maximum(np.asarray(lik, dtype=float).reshape(-1), eps), 1.0 / temp)
    z = max(float(np.sum(v)), eps)
    return v / z, temp


def sensory_from_flat_col(
    a_flat_col: np.ndarray,
    sniff_strength: float,
    touch_pressure: float,
    cfg: LoopConfig,
) -> SensoryOut:
    lik_raw = np.asarray(a_flat_col, dtype=float).reshape(-1).copy()
    lik_mod, temperature = modulate_likelihood(lik_raw, sniff_strength, touch_pressure, cfg)
    return SensoryOut(lik_raw=lik_raw, lik_mod=lik_mod, temperature=temperature)
