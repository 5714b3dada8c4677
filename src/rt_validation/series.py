"""
Typed incidence series passed between the pipeline stages.

True infections, observed counts and imputed infections are all daily counts
on an integer time axis; they differ only in where they came from, which the
``name`` records. The name is also what tags estimator output columns.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from .errors import InvalidParameters


@dataclass(frozen=True)
class IncidenceSeries:
    """Daily counts on a strictly increasing integer time axis."""

    name: str
    time: np.ndarray
    counts: np.ndarray

    def __post_init__(self):
        time = np.asarray(self.time)
        counts = np.asarray(self.counts, dtype=float)
        if time.ndim != 1 or counts.ndim != 1 or len(time) != len(counts):
            raise InvalidParameters(
                f"time and counts must be 1-D arrays of equal length, "
                f"got {time.shape} and {counts.shape}"
            )
        if len(time) and not np.all(np.equal(np.mod(time, 1), 0)):
            raise InvalidParameters(f"series '{self.name}' has non-integer days")
        object.__setattr__(self, "time", time.astype(np.int64))
        object.__setattr__(self, "counts", counts)

    def __len__(self) -> int:
        return len(self.time)

    @property
    def total(self) -> float:
        return float(np.nansum(self.counts))

    @property
    def start(self) -> int:
        return int(self.time[0])

    @property
    def end(self) -> int:
        return int(self.time[-1])

    def complete(self) -> "IncidenceSeries":
        """
        Normalise the series for estimation.

        Sorts by day, fills missing days and NA counts with 0 and rejects
        duplicate days.

        Returns
        -------
        IncidenceSeries
            Series covering every day from the first to the last time point.
        """
        if len(self.time) == 0:
            return self
        order = np.argsort(self.time, kind="stable")
        time = self.time[order]
        counts = self.counts[order]
        if np.any(np.diff(time) == 0):
            dupes = np.unique(time[:-1][np.diff(time) == 0])
            raise InvalidParameters(
                f"series '{self.name}' has duplicate days: {dupes.tolist()}"
            )
        full = np.arange(time[0], time[-1] + 1)
        filled = (
            pd.Series(counts, index=time)
            .reindex(full)
            .fillna(0.0)
            .to_numpy()
        )
        return IncidenceSeries(self.name, full, filled)

    def renamed(self, name: str) -> "IncidenceSeries":
        return IncidenceSeries(name, self.time.copy(), self.counts.copy())

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"time": self.time, self.name: self.counts})

    @classmethod
    def from_frame(
        cls, df: pd.DataFrame, column: str, time_column: str = "time"
    ) -> "IncidenceSeries":
        return cls(column, df[time_column].to_numpy(), df[column].to_numpy())

    @classmethod
    def zeros(cls, name: str, start: int, end: int) -> "IncidenceSeries":
        time = np.arange(start, end + 1)
        return cls(name, time, np.zeros(len(time)))
