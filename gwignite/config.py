"""
gwignite/config.py

Loop configuration.

What this file does
-------------------
This module defines :class:`LoopConfig`, an immutable (frozen) dataclass that
collects *all* numeric constants referenced by the belief/ignition loop.

Implementation modules read constants from config rather than hard-coding
them. This file exists to:
  - centralize those constants,
  - provide the reference defaults the fixtures were produced with,
  - make missing/invalid parameters fail fast via validate().

Groups
------
- Ignition gate: alpha, beta, gamma, c_crit, delta
- Coarse-graining and broadcast: rg_level, rg_cost, lambda_broadcast
- Level-1 interpretation: task_gain, task_precision_gain
- Message complexity: nnz_tol
- Sensory temperature law: t0, k_touch, t_min, t_max
- Fallback policy law: policy_* coefficients and clamps
- Numerical guards: eps, normalize_eps
- Bookkeeping: history_capacity

This file is deliberately *not* a "framework" configuration system; it's a
plain dataclass with clear, auditable defaults.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace as dc_replace
from typing import Any, Dict


@dataclass(frozen=True)
class LoopConfig:
    """
    Immutable configuration for a gwignite loop.

    Inputs
    ------
    This dataclass is typically constructed either:
      - directly (e.g., LoopConfig(alpha=1.0, beta=0.0)), or
      - via :func:`default_config` and then :meth:`replace`.

    Outputs
    -------
    An immutable configuration object whose attributes are read by all modules.
    """

    # =========================================================================
    # Ignition gate
    # =========================================================================
    # Admission threshold θ = alpha + beta * u, u = normalized uncertainty.
    alpha: float = 0.10
    beta: float = 0.25

    # Coarse-grained message must keep eta_rg >= gamma * θ.
    gamma: float = 0.80

    # Minimum coherence among survivors for a broadcast to ignite.
    c_crit: float = 0.70

    # Minimum free-energy improvement of the broadcast belief.
    delta: float = 0.05

    # =========================================================================
    # Coarse-graining / broadcast
    # =========================================================================
    # Pooling window is 2**rg_level; 0 disables pooling.
    rg_level: int = 1

    # Added to complexity for the admission test only.
    rg_cost: float = 0.10

    # Log-space mixing weight of the expanded broadcast.
    lambda_broadcast: float = 1.0

    # =========================================================================
    # Level-1 (task-biased) interpretation
    # =========================================================================
    task_gain: float = 0.05
    task_precision_gain: float = 0.10

    # |delta_i| above this counts toward message complexity.
    nnz_tol: float = 1e-6

    # =========================================================================
    # Sensory temperature law: T = t0 / (s + k_touch * p), clamped
    # =========================================================================
    t0: float = 1.0
    k_touch: float = 0.75
    t_min: float = 0.25
    t_max: float = 4.0

    # =========================================================================
    # Fallback policy law
    # =========================================================================
    policy_strength_base: float = 1.0
    policy_strength_uncertainty: float = 1.25
    policy_strength_quiet: float = 0.50
    policy_strength_task: float = 0.35
    policy_strength_dg: float = 0.15
    policy_strength_min: float = 0.1
    policy_strength_max: float = 3.0

    policy_pressure_base: float = 0.25
    policy_pressure_certainty: float = 0.75
    policy_pressure_ignite: float = 0.25
    policy_pressure_task: float = 0.10
    policy_pressure_min: float = 0.0
    policy_pressure_max: float = 3.0

    # =========================================================================
    # Numerical guards
    # =========================================================================
    eps: float = 1e-9

    # normalize() floors elements and the sum at this value.
    normalize_eps: float = 1e-12

    # =========================================================================
    # Bookkeeping
    # =========================================================================
    history_capacity: int = 64

    # =========================================================================
    # Derived
    # =========================================================================
    @property
    def rg_window(self) -> int:
        """Pooling window size 2**rg_level."""
        return 1 << int(self.rg_level)

    # =========================================================================
    # Methods
    # =========================================================================
    def validate(self) -> None:
        """
        Validate basic invariants.

        Inputs
        ------
        None (reads self).

        Outputs
        -------
        None. Raises ValueError if an invariant is violated.
        """
        if not isinstance(self.rg_level, int) or self.rg_level < 0:
            raise ValueError("rg_level must be a non-negative int.")
        if not isinstance(self.history_capacity, int) or self.history_capacity <= 0:
            raise ValueError("history_capacity must be a positive int.")

        for name in ("alpha", "beta", "gamma", "c_crit", "rg_cost", "nnz_tol"):
            v = getattr(self, name)
            if v < 0.0:
                raise ValueError(f"{name} must be >= 0.")

        for name in ("eps", "normalize_eps", "t0"):
            v = getattr(self, name)
            if not (v > 0.0):
                raise ValueError(f"{name} must be > 0.")

        if self.k_touch < 0.0:
            raise ValueError("k_touch must be >= 0.")
        if not (0.0 < self.t_min <= self.t_max):
            raise ValueError("temperature clamp must satisfy 0 < t_min <= t_max.")
        if self.policy_strength_min > self.policy_strength_max:
            raise ValueError("policy_strength_min must be <= policy_strength_max.")
        if self.policy_pressure_min > self.policy_pressure_max:
            raise ValueError("policy_pressure_min must be <= policy_pressure_max.")

    def replace(self, **overrides: Any) -> "LoopConfig":
        """
        Create a modified copy of this config (immutable update).

        Inputs
        ------
        overrides:
            Keyword arguments mapping field names to new values.

        Outputs
        -------
        LoopConfig:
            A new config instance with the specified overrides applied.
        """
        return dc_replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        """Convert this configuration to a plain, JSON-serializable dict."""
        return asdict(self)


def default_config() -> LoopConfig:
    """
    Return the default LoopConfig.

    Notes
    -----
    The returned config reproduces the reference fixtures and is intended as
    the baseline against which overrides are applied.
    """
    cfg = LoopConfig()
    cfg.validate()
    return cfg
