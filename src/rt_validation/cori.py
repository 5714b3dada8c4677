"""
Cori et al. (2013) instantaneous reproduction number with uncertain serial
interval.

For each sliding window the posterior of R under a Poisson renewal likelihood
and a Gamma prior is again Gamma:

    R | I ~ Gamma(shape = a + Σ_window I_t, scale = 1 / (1/b + Σ_window Λ_t))

Uncertainty in the serial interval is integrated by Monte Carlo: ``n1``
(mean, sd) pairs are drawn from truncated normals, and ``n2`` posterior draws
of R are taken for each pair. The pooled ``n1 * n2`` draws give the reported
mean and credible interval.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import reduce

import numpy as np
import pandas as pd
from numpy.random import Generator, default_rng
from scipy.stats import truncnorm

from . import config
from .errors import InsufficientData, InvalidParameters
from .renewal import compute_infectiousness, serial_interval_weights, window_sums
from .series import IncidenceSeries

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoriConfig:
    """Prior on R and serial interval uncertainty for ``estimate_rt``."""

    mean_prior: float = config.MEAN_PRIOR
    std_prior: float = config.STD_PRIOR
    std_mean_si: float = config.STD_MEAN_SI
    mean_si_half_width: float = config.MEAN_SI_HALF_WIDTH
    std_std_si: float = config.STD_STD_SI
    std_si_bounds: tuple[float, float] = config.STD_SI_BOUNDS
    n1: int = config.N1
    n2: int = config.N2
    max_redraws: int = config.MAX_SI_REDRAWS
    lower_quantile: float = config.LOWER_QUANTILE
    upper_quantile: float = config.UPPER_QUANTILE

    @property
    def prior_shape(self) -> float:
        return (self.mean_prior / self.std_prior) ** 2

    @property
    def prior_scale(self) -> float:
        return self.std_prior**2 / self.mean_prior


@dataclass(frozen=True)
class RtEstimate:
    """Windowed Rt summary for one incidence series.

    ``frame`` has ``time`` (window end) and ``<name>_mean``, ``<name>_lower``,
    ``<name>_upper`` columns.
    """

    name: str
    window: int
    frame: pd.DataFrame

    @property
    def mean_column(self) -> str:
        return f"{self.name}_mean"

    @property
    def lower_column(self) -> str:
        return f"{self.name}_lower"

    @property
    def upper_column(self) -> str:
        return f"{self.name}_upper"

    @property
    def mean(self) -> pd.Series:
        return self.frame.set_index("time")[self.mean_column]


def sample_serial_intervals(
    mean_si: float, std_si: float, cfg: CoriConfig, rng: Generator
) -> list[tuple[float, float]]:
    """
    Draw ``cfg.n1`` (mean, sd) serial interval pairs.

    Each component comes from a normal truncated to its bounds; a pair is
    redrawn until the mean exceeds the sd.
    """
    mean_lo = mean_si - cfg.mean_si_half_width
    mean_hi = mean_si + cfg.mean_si_half_width
    std_lo, std_hi = (f * std_si for f in cfg.std_si_bounds)

    def draw(mu, sd, lo, hi):
        return float(
            truncnorm.rvs((lo - mu) / sd, (hi - mu) / sd, loc=mu, scale=sd, random_state=rng)
        )

    if mean_hi <= std_lo:
        raise InvalidParameters(
            f"serial interval sd bounds [{std_lo:.3g}, {std_hi:.3g}] lie above the "
            f"mean bounds [{mean_lo:.3g}, {mean_hi:.3g}]; no draw has mean > sd"
        )

    pairs = []
    attempts = 0
    while len(pairs) < cfg.n1:
        if attempts >= cfg.max_redraws * cfg.n1:
            raise InvalidParameters(
                f"drew only {len(pairs)} of {cfg.n1} serial intervals with mean > sd "
                f"in {attempts} attempts"
            )
        attempts += 1
        m = draw(mean_si, cfg.std_mean_si, mean_lo, mean_hi)
        s = draw(std_si, cfg.std_std_si, std_lo, std_hi)
        if m > s:
            pairs.append((m, s))
    return pairs


def estimate_rt(
    incidence: IncidenceSeries,
    mean_si: float,
    var_si: float,
    window: int = config.WINDOW,
    seed: int | None = None,
    rng: Generator | None = None,
    cfg: CoriConfig | None = None,
) -> RtEstimate:
    """
    Estimate Rt over sliding windows of ``window`` days.

    Parameters
    ----------
    incidence : IncidenceSeries
        Daily counts; gaps and NA are treated as 0.
    mean_si, var_si : float
        Assumed serial interval mean and variance, in days.
    window : int
        Window width. Windows start at the second day of the series and the
        last one ends on its final day.
    seed : int, optional
        Seed for a fresh generator; ignored when ``rng`` is given.
    rng : numpy.random.Generator, optional
        Random source for the serial interval and posterior draws.
    cfg : CoriConfig, optional
        Prior and serial interval uncertainty settings.

    Returns
    -------
    RtEstimate
        One row per window whose total infectiousness is positive.

    Raises
    ------
    InsufficientData
        If the series has fewer than ``window + 1`` days, the serial interval
        variance is not positive, or no window has any infectiousness.
    InvalidParameters
        If ``window < 1``, the series has negative counts, the serial interval
        mean is too small to discretise, or its variance is so large that no
        sampled sd can fall below the sampled mean.
    """
    cfg = cfg or CoriConfig()
    rng = rng or default_rng(seed)

    if window < 1:
        raise InvalidParameters(f"window must be at least 1 day, got {window}")
    if var_si <= 0:
        raise InsufficientData(f"serial interval variance must be positive, got {var_si}")
    if mean_si - cfg.mean_si_half_width < 1:
        raise InvalidParameters(
            f"mean serial interval {mean_si} leaves the lower bound below 1 day"
        )
    if mean_si + cfg.mean_si_half_width <= cfg.std_si_bounds[0] * np.sqrt(var_si):
        raise InvalidParameters(
            f"serial interval variance {var_si} is too large for mean {mean_si}: "
            "no draw can have mean > sd"
        )

    series = incidence.complete()
    if np.any(series.counts < 0):
        raise InvalidParameters(f"series '{series.name}' has negative counts")
    T = len(series)
    if T < window + 1:
        raise InsufficientData(
            f"series '{series.name}' has {T} days, need at least {window + 1} for window {window}"
        )

    counts = series.counts
    # 0-based start positions 1..T-window, i.e. t_start in [2, T - window + 1]
    starts = np.arange(1, T - window + 1)
    ends = starts + window - 1
    cases_in_window = window_sums(counts, starts, ends)

    draws = np.empty((cfg.n1, cfg.n2, len(starts)))
    valid = np.ones(len(starts), dtype=bool)
    for i, (m, s) in enumerate(sample_serial_intervals(mean_si, np.sqrt(var_si), cfg, rng)):
        weights = serial_interval_weights(T, m, s)
        infectiousness = window_sums(compute_infectiousness(counts, weights), starts, ends)
        valid &= infectiousness > 0
        shape = cfg.prior_shape + cases_in_window
        scale = 1.0 / (1.0 / cfg.prior_scale + infectiousness)
        draws[i] = rng.gamma(shape, scale, size=(cfg.n2, len(starts)))

    if not valid.any():
        raise InsufficientData(f"series '{series.name}' has no window with past cases")
    if not valid.all():
        logger.debug(
            "skipping %d window(s) of '%s' with zero infectiousness",
            int((~valid).sum()),
            series.name,
        )

    pooled = draws.reshape(-1, len(starts))[:, valid]
    lower, upper = np.quantile(pooled, [cfg.lower_quantile, cfg.upper_quantile], axis=0)
    frame = pd.DataFrame(
        {
            "time": series.time[ends[valid]],
            f"{series.name}_mean": pooled.mean(axis=0),
            f"{series.name}_lower": lower,
            f"{series.name}_upper": upper,
        }
    )
    logger.info(
        "estimated Rt for '%s' over %d windows of %d days", series.name, len(frame), window
    )
    return RtEstimate(series.name, window, frame)


def merge_estimates(*estimates: RtEstimate) -> pd.DataFrame:
    """Outer-join estimates on window end time."""
    if not estimates:
        raise ValueError("need at least one estimate to merge")
    frames = [e.frame for e in estimates]
    merged = reduce(lambda left, right: left.merge(right, on="time", how="outer"), frames)
    return merged.sort_values("time").reset_index(drop=True)
