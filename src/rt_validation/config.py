"""
Default settings for the Rt validation study.

Everything tunable lives here so the simulation, imputation and estimation
modules stay free of magic numbers. Override per run through the dataclasses
that consume these values (SimulationParameters, CoriConfig, AnalysisConfig).
"""

from pathlib import Path

# ==============================================================================
# --- Cori estimator: prior on R ---
# ==============================================================================
# Gamma prior with mean 5 and sd 5, i.e. shape 1 and rate 0.2
MEAN_PRIOR = 5.0
STD_PRIOR = 5.0

# Quantiles reported for the credible interval
LOWER_QUANTILE = 0.025
UPPER_QUANTILE = 0.975

# ==============================================================================
# --- Cori estimator: serial interval uncertainty ---
# ==============================================================================
# Mean SI is drawn within +/- MEAN_SI_HALF_WIDTH of the assumed mean
STD_MEAN_SI = 1.5
MEAN_SI_HALF_WIDTH = 1.0
# Std SI is drawn within these multiples of the assumed std
STD_STD_SI = 1.5
STD_SI_BOUNDS = (0.8, 1.2)
# Outer draws of (mean_si, std_si) and inner posterior draws per outer draw
N1 = 50
N2 = 100
# Attempts per requested pair before giving up on mean > sd
MAX_SI_REDRAWS = 1000

# Sliding window width in days
WINDOW = 7

# ==============================================================================
# --- Reporting delay ---
# ==============================================================================
# Infection -> observation delay, gamma distributed
DELAY_MEAN = 10.0
DELAY_SD = 5.0
# Output horizon extends past the last infection day by this many mean delays
HORIZON_MULTIPLIER = 4
# Draws used to estimate the mean delay for the mean-shift imputer
MEAN_DELAY_DRAWS = 1000

# ==============================================================================
# --- Simulation defaults ---
# ==============================================================================
POPULATION = 1_000_000
E_INIT = 100
I_INIT = 100
T_E = 4.0
T_I = 4.0
N_T = 150
SEED = 2025

# ==============================================================================
# --- Directory configuration ---
# ==============================================================================
RESULTS_DIR = Path("results")

# ==============================================================================
# --- Scenarios ---
# ==============================================================================
# Keyword arguments for SimulationParameters.intervention()
SCENARIOS = {
    "step_down": {
        "pre_intervention_R0": 2.0,
        "intervention_time_1": 30,
        "days_intervention_to_min": 0,
        "min_R0": 0.8,
        "intervention_time_2": 200,
        "days_to_Rt_rise": 0,
        "post_intervention_R0": 0.8,
        "n_t": 80,
    },
    "lockdown_then_release": {
        "pre_intervention_R0": 2.5,
        "intervention_time_1": 40,
        "days_intervention_to_min": 7,
        "min_R0": 0.7,
        "intervention_time_2": 90,
        "days_to_Rt_rise": 14,
        "post_intervention_R0": 1.3,
    },
    "slow_decline": {
        "pre_intervention_R0": 2.0,
        "intervention_time_1": 40,
        "days_intervention_to_min": 30,
        "min_R0": 0.9,
        "intervention_time_2": 120,
        "days_to_Rt_rise": 10,
        "post_intervention_R0": 1.1,
    },
}
