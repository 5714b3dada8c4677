"""
End-to-end validation run: simulate, delay, impute, estimate, compare.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd
from numpy.random import SeedSequence, default_rng

from . import config
from .cori import CoriConfig, RtEstimate, estimate_rt
from .delays import DelayDistribution, forward_impute
from .imputation import InfectionTimeImputer, MeanShiftImputer
from .parameters import SimulationParameters
from .reporting import comparison_table, plot_comparison
from .seir import SimulationTrajectory, simulate
from .series import IncidenceSeries
from .storage import TrajectoryStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisConfig:
    parameters: SimulationParameters = field(default_factory=SimulationParameters)
    delay: DelayDistribution = field(
        default_factory=lambda: DelayDistribution.gamma(config.DELAY_MEAN, config.DELAY_SD)
    )
    imputer: InfectionTimeImputer = field(default_factory=MeanShiftImputer)
    window: int = config.WINDOW
    cori: CoriConfig = field(default_factory=CoriConfig)
    seed: int | None = config.SEED
    results_dir: Path | None = None
    reuse_cached: bool = True
    plot: bool = False


@dataclass
class AnalysisResult:
    trajectory: SimulationTrajectory
    observed: IncidenceSeries
    imputed: IncidenceSeries
    estimates: list[RtEstimate]
    table: pd.DataFrame

    @property
    def true_estimate(self) -> RtEstimate:
        return self.estimates[0]

    @property
    def imputed_estimate(self) -> RtEstimate:
        return self.estimates[1]


def run_analysis(cfg: AnalysisConfig) -> AnalysisResult:
    """
    Run the whole validation for one scenario.

    Each stage gets its own child generator spawned from ``cfg.seed``, so a
    cached trajectory does not change the delay and estimator draws. The cache
    is only reused when it was simulated from the same parameters and seed;
    otherwise the trajectory is simulated again and the cache overwritten.
    """
    sim_ss, delay_ss, impute_ss, est_ss = SeedSequence(cfg.seed).spawn(4)
    p = cfg.parameters

    store = TrajectoryStore(cfg.results_dir) if cfg.results_dir is not None else None
    key = p.result_key()
    trajectory = None
    if store is not None and cfg.reuse_cached and store.exists(key):
        cached = store.load(key)
        if cfg.seed is not None and cached.parameters == p and store.seed_for(key) == cfg.seed:
            trajectory = cached
        else:
            logger.info(
                "cached trajectory at %s has other parameters or seed; re-simulating",
                store.path_for(key),
            )
    if trajectory is None:
        trajectory = simulate(p, rng=default_rng(sim_ss))
        if store is not None:
            store.save(trajectory, key, seed=cfg.seed)

    infections = trajectory.infections
    observed = forward_impute(infections, cfg.delay, rng=default_rng(delay_ss))
    imputed = cfg.imputer.impute(observed, cfg.delay, rng=default_rng(impute_ss))

    est_rng = default_rng(est_ss)
    estimates = [
        estimate_rt(
            series,
            p.serial_interval_mean,
            p.serial_interval_var,
            window=cfg.window,
            rng=est_rng,
            cfg=cfg.cori,
        )
        for series in (infections, imputed)
    ]
    table = comparison_table(trajectory, *estimates)

    if cfg.results_dir is not None:
        stem = store.path_for(key).stem
        table_path = Path(cfg.results_dir) / f"{stem}_rt_w{cfg.window}.csv"
        table.to_csv(table_path, index=False)
        logger.info("saved comparison table to %s", table_path)
        if cfg.plot:
            fig = plot_comparison(
                [infections, observed, imputed],
                table,
                estimates,
                path=Path(cfg.results_dir) / f"{stem}_rt_w{cfg.window}.png",
            )
            plt.close(fig)

    return AnalysisResult(trajectory, observed, imputed, estimates, table)
