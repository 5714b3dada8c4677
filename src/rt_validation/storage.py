"""
On-disk cache of simulated trajectories.

A trajectory is stored as ``<key>.csv`` with its parameters and seed in
``<key>.json`` next to it. The key is derived from the scenario values that
distinguish runs in a study: pre-intervention R0, simulation method, first
intervention time and days to reach the minimum R0. Runs that share a key but
differ in other parameters or seed overwrite each other.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path

import pandas as pd

from . import config
from .parameters import R0Change, SimulationParameters
from .seir import COLUMNS, SimulationTrajectory

logger = logging.getLogger(__name__)


def _fmt(value) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).replace(".", "p")


class TrajectoryStore:
    """Save and load trajectories under a results directory."""

    def __init__(self, root: str | Path = config.RESULTS_DIR):
        self.root = Path(root)

    def path_for(self, key: tuple) -> Path:
        r0, method, t1, days_to_min = key
        name = f"seir_R0={_fmt(r0)}_method={method}_t1={_fmt(t1)}_min={_fmt(days_to_min)}"
        return self.root / f"{name}.csv"

    def exists(self, key: tuple) -> bool:
        return self.path_for(key).exists()

    def save(
        self, trajectory: SimulationTrajectory, key: tuple | None = None, seed: int | None = None
    ) -> Path:
        """Write the trajectory and a sidecar with its parameters and seed."""
        key = key or trajectory.parameters.result_key()
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        trajectory.frame.to_csv(path, index=False)
        with open(path.with_suffix(".json"), "w") as f:
            json.dump({"seed": seed, "parameters": asdict(trajectory.parameters)}, f, indent=2)
        logger.info("saved trajectory to %s", path)
        return path

    def _sidecar(self, key: tuple) -> dict:
        path = self.path_for(key)
        if not path.exists():
            raise FileNotFoundError(f"No cached trajectory for {key} at {path}")
        with open(path.with_suffix(".json")) as f:
            return json.load(f)

    def seed_for(self, key: tuple) -> int | None:
        """Seed the cached trajectory was simulated with, if recorded."""
        return self._sidecar(key).get("seed")

    def load(self, key: tuple) -> SimulationTrajectory:
        meta = self._sidecar(key)
        path = self.path_for(key)
        frame = pd.read_csv(path)
        raw = dict(meta["parameters"])
        raw["schedule"] = tuple(R0Change(**change) for change in raw["schedule"])
        logger.info("loaded trajectory from %s", path)
        return SimulationTrajectory(SimulationParameters(**raw), frame[COLUMNS])
