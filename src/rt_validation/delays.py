"""
Infection-to-observation delays and forward delay imputation.

A delay distribution is only ever used as a sampler: given a count ``n`` and a
random generator it returns ``n`` nonnegative delays in days. Continuous draws
are mapped to whole-day offsets with ``numpy.rint`` (round half to even), which
keeps the mean offset equal to the mean delay and never produces a negative
offset from a nonnegative draw.
"""

from __future__ import annotations

import logging
import math
import warnings
from collections.abc import Callable

import numpy as np
from numpy.random import Generator, default_rng

from . import config
from .errors import EmptyInput, InvalidParameters
from .series import IncidenceSeries

logger = logging.getLogger(__name__)

Sampler = Callable[[int, Generator], np.ndarray]


class DelayDistribution:
    """Sampler of nonnegative delays, in days."""

    def __init__(self, sampler: Sampler, name: str = "delay"):
        self._sampler = sampler
        self.name = name

    def __repr__(self) -> str:
        return f"DelayDistribution({self.name})"

    def sample(self, n: int, rng: Generator | None = None) -> np.ndarray:
        rng = rng or default_rng()
        draws = np.asarray(self._sampler(int(n), rng), dtype=float)
        if draws.shape != (n,):
            raise InvalidParameters(
                f"{self.name} sampler returned shape {draws.shape}, expected ({n},)"
            )
        if np.any(draws < 0) or not np.all(np.isfinite(draws)):
            raise InvalidParameters(f"{self.name} sampler returned negative or non-finite delays")
        return draws

    def sample_days(self, n: int, rng: Generator | None = None) -> np.ndarray:
        """Draw ``n`` delays rounded to whole days."""
        return np.rint(self.sample(n, rng)).astype(np.int64)

    def mean(self, n_draws: int = config.MEAN_DELAY_DRAWS, rng: Generator | None = None) -> float:
        """Monte Carlo estimate of the mean delay."""
        return float(self.sample(n_draws, rng).mean())

    @classmethod
    def from_scipy(cls, dist, name: str | None = None) -> "DelayDistribution":
        """Wrap a frozen ``scipy.stats`` distribution."""
        return cls(
            lambda n, rng: dist.rvs(size=n, random_state=rng),
            name or f"{dist.dist.name}{dist.args}",
        )

    @classmethod
    def gamma(cls, mean: float, sd: float) -> "DelayDistribution":
        if mean <= 0 or sd <= 0:
            raise InvalidParameters(f"gamma delay needs positive mean and sd, got {mean}, {sd}")
        shape = (mean / sd) ** 2
        scale = sd**2 / mean
        return cls(
            lambda n, rng: rng.gamma(shape, scale, size=n),
            f"gamma(mean={mean}, sd={sd})",
        )

    @classmethod
    def constant(cls, days: float) -> "DelayDistribution":
        if days < 0:
            raise InvalidParameters(f"delay must be nonnegative, got {days}")
        return cls(lambda n, rng: np.full(n, float(days)), f"constant({days})")


def forward_impute(
    infections: IncidenceSeries,
    delay: DelayDistribution,
    seed: int | None = None,
    rng: Generator | None = None,
    horizon_multiplier: float = config.HORIZON_MULTIPLIER,
    name: str = "observed",
) -> IncidenceSeries:
    """
    Push every infection forward by an independently drawn delay.

    Each of the ``c_t`` infections on day ``t`` lands on day ``t + offset``.
    Individuals are reassigned, never redrawn, so the output total equals the
    input total exactly.

    Parameters
    ----------
    infections : IncidenceSeries
        True infections per day. Non-integer counts are rounded.
    delay : DelayDistribution
        Infection-to-observation delay.
    seed : int, optional
        Seed for a fresh generator; ignored when ``rng`` is given.
    rng : numpy.random.Generator, optional
        Random source for the delay draws.
    horizon_multiplier : float
        The output runs at least ``horizon_multiplier`` mean delays past the
        last input day, and always far enough to hold every drawn delay.

    Returns
    -------
    IncidenceSeries
        Observed counts from the first input day to the end of the horizon.
    """
    rng = rng or default_rng(seed)
    infections = infections.complete()
    if len(infections) == 0:
        raise InvalidParameters("cannot impute delays for an empty series")

    counts = np.rint(infections.counts).astype(np.int64)
    if np.any(counts < 0):
        raise InvalidParameters(f"series '{infections.name}' has negative counts")

    extension = math.ceil(horizon_multiplier * delay.mean(rng=rng))
    end = infections.end + extension

    total = int(counts.sum())
    if total == 0:
        msg = f"series '{infections.name}' is all zero; observed series is all zero"
        logger.warning(msg)
        warnings.warn(msg, EmptyInput, stacklevel=2)
        return IncidenceSeries.zeros(name, infections.start, end)

    # One delay per infected individual, then bucket by landing day
    onset_days = np.repeat(infections.time, counts) + delay.sample_days(total, rng)
    end = max(end, int(onset_days.max()))
    observed = np.bincount(onset_days - infections.start, minlength=end - infections.start + 1)

    logger.debug(
        "forward imputed %d infections with %s over days %d..%d",
        total,
        delay.name,
        infections.start,
        end,
    )
    return IncidenceSeries(name, np.arange(infections.start, end + 1), observed.astype(float))
