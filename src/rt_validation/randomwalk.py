"""
Time-varying Rt estimation using PyMC with a Gaussian random walk on log(Rt).

A smooth alternative to the windowed Cori estimate: one Rt per day, tied
together by the random walk instead of a fixed window, with negative binomial
observations to absorb overdispersion.
"""

from __future__ import annotations

import logging

import arviz as az
import numpy as np
import pandas as pd
import pymc as pm

from .cori import RtEstimate
from .errors import InsufficientData
from .renewal import compute_infectiousness, serial_interval_weights
from .series import IncidenceSeries

logger = logging.getLogger(__name__)


def estimate_rt_randomwalk(
    incidence: IncidenceSeries,
    mean_si: float,
    var_si: float,
    draws: int = 1000,
    tune: int = 1000,
    chains: int = 4,
    random_seed: int | None = 42,
    target_accept: float = 0.95,
) -> RtEstimate:
    """
    Fit log(Rt) as a Gaussian random walk under the renewal equation.

    Parameters
    ----------
    incidence : IncidenceSeries
        Daily counts; gaps and NA are treated as 0.
    mean_si, var_si : float
        Serial interval mean and variance, in days.
    draws, tune, chains, random_seed, target_accept
        Passed to ``pm.sample``.

    Returns
    -------
    RtEstimate
        One row per day with positive infectiousness; ``window`` is 1.
    """
    if var_si <= 0:
        raise InsufficientData(f"serial interval variance must be positive, got {var_si}")
    series = incidence.complete()
    weights = serial_interval_weights(len(series), mean_si, np.sqrt(var_si))
    infectiousness = compute_infectiousness(series.counts, weights)

    keep = infectiousness > 0
    n_times = int(keep.sum())
    if n_times < 2:
        raise InsufficientData(f"series '{series.name}' has fewer than 2 days with past cases")
    cases = np.rint(series.counts[keep]).astype(np.int64)
    lam = infectiousness[keep]

    logger.info("fitting random walk Rt model to %d days of '%s'", n_times, series.name)
    with pm.Model():
        # LogNormal(0, 0.5) prior on the initial Rt
        log_rt_init = pm.Normal("log_rt_init", mu=0, sigma=0.5)

        # Random walk innovation standard deviation
        rw_sigma = pm.HalfNormal("rw_sigma", sigma=0.1)
        log_rt_innovations = pm.Normal(
            "log_rt_innovations", mu=0, sigma=rw_sigma, shape=n_times - 1
        )
        log_rt = pm.Deterministic(
            "log_rt",
            pm.math.concatenate(
                [[log_rt_init], log_rt_init + pm.math.cumsum(log_rt_innovations)]
            ),
        )
        rt = pm.Deterministic("rt", pm.math.exp(log_rt))

        # Overdispersed observations around the renewal-equation expectation
        phi = pm.HalfNormal("phi", sigma=5)
        pm.NegativeBinomial("cases_obs", mu=rt * lam, alpha=phi, observed=cases)

        trace = pm.sample(
            draws=draws,
            tune=tune,
            chains=chains,
            random_seed=random_seed,
            target_accept=target_accept,
            return_inferencedata=True,
            progressbar=False,
        )

    logger.debug("%s", az.summary(trace, var_names=["log_rt_init", "rw_sigma", "phi"]))

    rt_samples = trace.posterior["rt"].values.reshape(-1, n_times)
    frame = pd.DataFrame(
        {
            "time": series.time[keep],
            f"{series.name}_mean": rt_samples.mean(axis=0),
            f"{series.name}_lower": np.percentile(rt_samples, 2.5, axis=0),
            f"{series.name}_upper": np.percentile(rt_samples, 97.5, axis=0),
        }
    )
    return RtEstimate(series.name, 1, frame)
