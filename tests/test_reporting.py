import numpy as np
import pandas as pd

from rt_validation.cori import estimate_rt
from rt_validation.reporting import comparison_table, detection_lag, first_crossing, plot_comparison
from rt_validation.seir import simulate


def _table():
    return pd.DataFrame(
        {
            "time": np.arange(25, 45),
            "true_mean": np.r_[np.full(8, 1.8), np.full(12, 0.7)],
            "imputed_mean": np.r_[np.full(13, 1.6), np.full(7, 0.9)],
        }
    )


class TestCrossings:
    def test_first_crossing(self):
        assert first_crossing(_table(), "true_mean", after=30) == 33
        assert first_crossing(_table(), "imputed_mean", after=30) == 38

    def test_never_crosses(self):
        assert first_crossing(_table(), "true_mean", after=30, threshold=0.5) is None

    def test_detection_lag(self):
        lags = detection_lag(_table(), 30, ["true_mean", "imputed_mean"])
        assert lags == {"true_mean": 3, "imputed_mean": 8}


class TestComparison:
    def test_table_joins_truth_and_estimates(self, step_down_parameters):
        traj = simulate(step_down_parameters, seed=0)
        est = estimate_rt(traj.infections, 8.0, 32.0, seed=0)
        table = comparison_table(traj, est)
        assert {"time", "R0", "Rt", "true_mean", "true_lower", "true_upper"} <= set(table.columns)
        assert len(table) == step_down_parameters.n_t + 1
        # Window ends start at day 7
        assert table["true_mean"].iloc[:7].isna().all()
        assert table["true_mean"].iloc[7:].notna().all()

    def test_table_without_estimates(self, step_down_parameters):
        traj = simulate(step_down_parameters, seed=0)
        assert list(comparison_table(traj).columns) == ["time", "R0", "Rt"]

    def test_plot_written(self, tmp_path, step_down_parameters):
        traj = simulate(step_down_parameters, seed=0)
        est = estimate_rt(traj.infections, 8.0, 32.0, seed=0)
        path = tmp_path / "plots" / "comparison.png"
        fig = plot_comparison([traj.infections], comparison_table(traj, est), [est], path=path)
        assert path.exists()
        assert len(fig.axes) == 2
