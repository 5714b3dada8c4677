"""Validate Rt estimation against simulated SEIR epidemics with reporting delays."""

__version__ = "0.1.0"

from rt_validation.cori import CoriConfig, RtEstimate, estimate_rt, merge_estimates
from rt_validation.delays import DelayDistribution, forward_impute
from rt_validation.errors import (
    EmptyInput,
    InsufficientData,
    InvalidParameters,
    NumericalInstability,
    RtValidationError,
)
from rt_validation.imputation import InfectionTimeImputer, MeanShiftImputer, shift_series
from rt_validation.parameters import R0Change, SimulationParameters
from rt_validation.pipeline import AnalysisConfig, AnalysisResult, run_analysis
from rt_validation.randomwalk import estimate_rt_randomwalk
from rt_validation.seir import SimulationTrajectory, simulate
from rt_validation.series import IncidenceSeries
from rt_validation.storage import TrajectoryStore

__all__ = [
    "AnalysisConfig",
    "AnalysisResult",
    "CoriConfig",
    "DelayDistribution",
    "EmptyInput",
    "IncidenceSeries",
    "InfectionTimeImputer",
    "InsufficientData",
    "InvalidParameters",
    "MeanShiftImputer",
    "NumericalInstability",
    "R0Change",
    "RtEstimate",
    "RtValidationError",
    "SimulationParameters",
    "SimulationTrajectory",
    "TrajectoryStore",
    "estimate_rt",
    "estimate_rt_randomwalk",
    "forward_impute",
    "merge_estimates",
    "run_analysis",
    "shift_series",
    "simulate",
]
