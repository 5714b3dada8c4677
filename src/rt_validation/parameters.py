"""
SEIR simulation parameters and the piecewise R0 schedule.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from . import config
from .errors import InvalidParameters

METHODS = ("stochastic", "ode")


@dataclass(frozen=True)
class R0Change:
    """Move R0 linearly to ``r0`` over ``ramp`` days starting at ``start``."""

    r0: float
    start: float
    ramp: float = 0.0


@dataclass(frozen=True)
class SimulationParameters:
    """
    Population, residence times and transmission schedule of one SEIR run.

    The first entry of ``schedule`` gives the baseline R0 (its start and ramp
    are ignored); each later entry ramps from the previous level to its own
    value. A ramp of 0 days is a step change.
    """

    N: int = config.POPULATION
    E_init: int = config.E_INIT
    I_init: int = config.I_INIT
    t_E: float = config.T_E
    t_I: float = config.T_I
    n_t: int = config.N_T
    schedule: tuple[R0Change, ...] = field(default=(R0Change(2.0, 0.0),))
    method: str = "stochastic"

    def __post_init__(self):
        object.__setattr__(self, "schedule", tuple(self.schedule))
        if self.N <= 0:
            raise InvalidParameters(f"population size must be positive, got {self.N}")
        if self.t_E <= 0 or self.t_I <= 0:
            raise InvalidParameters(
                f"residence times must be positive, got t_E={self.t_E}, t_I={self.t_I}"
            )
        if self.E_init < 0 or self.I_init < 0:
            raise InvalidParameters("initial counts must be nonnegative")
        if self.E_init + self.I_init > self.N:
            raise InvalidParameters(
                f"initial counts E={self.E_init}, I={self.I_init} exceed N={self.N}"
            )
        if self.n_t < 1:
            raise InvalidParameters(f"need at least one timestep, got n_t={self.n_t}")
        if self.method not in METHODS:
            raise InvalidParameters(
                f"unknown simulation method '{self.method}', expected one of {METHODS}"
            )
        if not self.schedule:
            raise InvalidParameters("transmission schedule is empty")
        for change in self.schedule:
            if change.r0 < 0 or change.ramp < 0:
                raise InvalidParameters(f"invalid schedule entry {change}")
        for prev, nxt in zip(self.schedule[1:], self.schedule[2:]):
            if nxt.start < prev.start + prev.ramp:
                raise InvalidParameters(
                    f"schedule entry {nxt} starts before {prev} has finished"
                )

    @classmethod
    def intervention(
        cls,
        pre_intervention_R0: float,
        intervention_time_1: float,
        days_intervention_to_min: float,
        min_R0: float,
        intervention_time_2: float,
        days_to_Rt_rise: float,
        post_intervention_R0: float,
        **kwargs,
    ) -> "SimulationParameters":
        """Two-phase intervention: ramp down to ``min_R0``, later ramp back up."""
        schedule = (
            R0Change(pre_intervention_R0, 0.0),
            R0Change(min_R0, intervention_time_1, days_intervention_to_min),
            R0Change(post_intervention_R0, intervention_time_2, days_to_Rt_rise),
        )
        return cls(schedule=schedule, **kwargs)

    def r0_at(self, t: float) -> float:
        r0 = self.schedule[0].r0
        for change in self.schedule[1:]:
            if t < change.start:
                break
            if change.ramp > 0 and t < change.start + change.ramp:
                frac = (t - change.start) / change.ramp
                return r0 + frac * (change.r0 - r0)
            r0 = change.r0
        return r0

    @property
    def serial_interval_mean(self) -> float:
        return self.t_E + self.t_I

    @property
    def serial_interval_var(self) -> float:
        # Sum of the exponential residence-time variances; 2*t^2 when t_E == t_I
        return self.t_E**2 + self.t_I**2

    def result_key(self) -> tuple:
        """(pre_intervention_R0, method, intervention_time_1, days_intervention_to_min)"""
        first = self.schedule[1] if len(self.schedule) > 1 else R0Change(0.0, 0.0)
        return (self.schedule[0].r0, self.method, first.start, first.ramp)
