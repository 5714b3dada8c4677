"""
Back-imputation of infection times from observed counts.

``MeanShiftImputer`` is the crude baseline: every observed count is moved back
by the rounded mean delay. A deconvolution imputer (Richardson-Lucy style,
iteratively re-estimating infections whose forward convolution with the delay
pmf reproduces the observations) slots in as another ``InfectionTimeImputer``
with the same ``impute(observed, delay, rng)`` signature; the pipeline only
depends on that interface.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import numpy as np
from numpy.random import Generator

from . import config
from .delays import DelayDistribution
from .errors import InvalidParameters
from .series import IncidenceSeries

logger = logging.getLogger(__name__)


def shift_series(series: IncidenceSeries, days: int, name: str | None = None) -> IncidenceSeries:
    """
    Shift counts back in time on a fixed time axis.

    ``shifted[t] = series[t + days]``; days whose source falls past the end of
    the series are 0. Shifting by ``d1`` then ``d2`` equals shifting by
    ``d1 + d2``.
    """
    series = series.complete()
    days = int(days)
    if days < 0:
        raise InvalidParameters(f"shift must be nonnegative, got {days}")
    shifted = np.zeros(len(series))
    if days < len(series):
        shifted[: len(series) - days] = series.counts[days:]
    return IncidenceSeries(name or series.name, series.time.copy(), shifted)


class InfectionTimeImputer(ABC):
    """Maps an observed series back to estimated infections per day."""

    name = "imputed"

    @abstractmethod
    def impute(
        self,
        observed: IncidenceSeries,
        delay: DelayDistribution,
        rng: Generator | None = None,
    ) -> IncidenceSeries: ...


class MeanShiftImputer(InfectionTimeImputer):
    """Shift observations back by the rounded Monte Carlo mean delay."""

    def __init__(self, n_draws: int = config.MEAN_DELAY_DRAWS):
        self.n_draws = n_draws

    def impute(
        self,
        observed: IncidenceSeries,
        delay: DelayDistribution,
        rng: Generator | None = None,
    ) -> IncidenceSeries:
        mean_delay = delay.mean(self.n_draws, rng)
        days = int(round(mean_delay))
        logger.info("mean delay %.2f days, shifting observations back %d days", mean_delay, days)
        return shift_series(observed, days, name=self.name)
