import pandas as pd
import pytest

from rt_validation.parameters import SimulationParameters
from rt_validation.seir import simulate
from rt_validation.storage import TrajectoryStore


class TestTrajectoryStore:
    def test_round_trip(self, tmp_path, step_down_parameters):
        store = TrajectoryStore(tmp_path / "results")
        traj = simulate(step_down_parameters, seed=0)
        path = store.save(traj)

        assert path.exists()
        assert path.with_suffix(".json").exists()
        key = step_down_parameters.result_key()
        assert store.exists(key)

        loaded = store.load(key)
        assert loaded.parameters == step_down_parameters
        pd.testing.assert_frame_equal(loaded.frame, traj.frame)

    def test_records_seed(self, tmp_path, step_down_parameters):
        store = TrajectoryStore(tmp_path)
        key = step_down_parameters.result_key()
        store.save(simulate(step_down_parameters, seed=7), seed=7)
        assert store.seed_for(key) == 7

        store.save(simulate(step_down_parameters, seed=8))
        assert store.seed_for(key) is None

    def test_path_derived_from_key(self, tmp_path):
        store = TrajectoryStore(tmp_path)
        path = store.path_for((2.5, "stochastic", 40, 7.5))
        assert path == tmp_path / "seir_R0=2p5_method=stochastic_t1=40_min=7p5.csv"
        assert store.path_for((2.5, "stochastic", 40.0, 7.5)) == path

    def test_distinct_scenarios_distinct_paths(self, tmp_path):
        store = TrajectoryStore(tmp_path)
        a = SimulationParameters.intervention(2.0, 30, 0, 0.8, 90, 0, 1.0)
        b = SimulationParameters.intervention(2.0, 30, 7, 0.8, 90, 0, 1.0)
        c = SimulationParameters.intervention(2.0, 30, 0, 0.8, 90, 0, 1.0, method="ode")
        paths = {store.path_for(p.result_key()) for p in (a, b, c)}
        assert len(paths) == 3

    def test_missing_key(self, tmp_path):
        store = TrajectoryStore(tmp_path)
        with pytest.raises(FileNotFoundError):
            store.load((2.0, "stochastic", 30, 0))
