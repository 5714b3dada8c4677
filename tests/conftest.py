import matplotlib

matplotlib.use("Agg")

import pytest

from rt_validation.parameters import SimulationParameters


@pytest.fixture
def step_down_parameters():
    """R0 drops from 2.0 to 0.8 on day 30; t_E = t_I = 4."""
    return SimulationParameters.intervention(
        pre_intervention_R0=2.0,
        intervention_time_1=30,
        days_intervention_to_min=0,
        min_R0=0.8,
        intervention_time_2=500,
        days_to_Rt_rise=0,
        post_intervention_R0=0.8,
        N=1_000_000,
        E_init=200,
        I_init=200,
        t_E=4.0,
        t_I=4.0,
        n_t=70,
    )
