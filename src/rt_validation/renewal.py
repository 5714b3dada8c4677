"""
Renewal-equation building blocks shared by the Rt estimators.
"""

import numpy as np
from scipy.stats import gamma as gamma_dist


def discretise_serial_interval(k: np.ndarray, mean: float, sd: float) -> np.ndarray:
    """
    Discretised gamma serial interval, offset by one day.

    Mathematical form:
        w_k = k F(k) + (k-2) F(k-2) - 2(k-1) F(k-1)
              + a b [2 G(k-1) - G(k-2) - G(k)]

    where F is the CDF of Gamma(a, b) with mean ``mean - 1`` and sd ``sd``,
    and G that of Gamma(a + 1, b). ``w_0 = 0`` and the weights sum to 1 over
    ``k >= 0``. Requires ``mean > 1``.
    """
    k = np.asarray(k, dtype=float)
    a = ((mean - 1) / sd) ** 2
    b = sd**2 / (mean - 1)

    def F(x):
        return gamma_dist.cdf(x, a, scale=b)

    def G(x):
        return gamma_dist.cdf(x, a + 1, scale=b)

    w = k * F(k) + (k - 2) * F(k - 2) - 2 * (k - 1) * F(k - 1)
    w += a * b * (2 * G(k - 1) - G(k - 2) - G(k))
    return np.maximum(w, 0.0)


def serial_interval_weights(n_days: int, mean: float, sd: float) -> np.ndarray:
    """
    Serial interval pmf over lags ``0..n_days-1``, normalised to sum to 1.
    """
    w = discretise_serial_interval(np.arange(n_days), mean, sd)
    total = w.sum()
    return w / total if total > 0 else w


def compute_infectiousness(incidence: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """
    Total infectiousness of past cases at each day.

    Mathematical form:
        Λ_t = Σ_{s=1}^{t} I_{t-s} · w_s  (discrete convolution)

    ``weights[s]`` is the pmf at lag ``s``; ``weights[0]`` is ignored.
    """
    incidence = np.asarray(incidence, dtype=float)
    # Same-day cases never contribute, so start the kernel at lag 1
    padded = np.concatenate([[0.0], incidence[:-1]])
    return np.convolve(padded, weights[1:], mode="full")[: len(incidence)]


def window_sums(values: np.ndarray, starts: np.ndarray, ends: np.ndarray) -> np.ndarray:
    """Sum ``values[start..end]`` (inclusive, 0-based) for each window via cumsum."""
    cum = np.concatenate([[0.0], np.cumsum(values)])
    return cum[ends + 1] - cum[starts]
