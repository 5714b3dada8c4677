import numpy as np
import pytest
from numpy.random import default_rng
from scipy.stats import gamma

from rt_validation.delays import DelayDistribution, forward_impute
from rt_validation.errors import EmptyInput, InvalidParameters
from rt_validation.series import IncidenceSeries


def _wave():
    t = np.arange(0, 60)
    return IncidenceSeries("true", t, np.round(500 * np.exp(-((t - 30) ** 2) / 80)))


class TestDelayDistribution:
    def test_gamma_moments(self):
        d = DelayDistribution.gamma(10.0, 5.0)
        draws = d.sample(20_000, default_rng(0))
        assert draws.min() >= 0
        assert draws.mean() == pytest.approx(10.0, rel=0.03)
        assert draws.std() == pytest.approx(5.0, rel=0.05)

    def test_from_scipy(self):
        d = DelayDistribution.from_scipy(gamma(a=2.0, scale=3.0))
        assert d.mean(n_draws=5000, rng=default_rng(1)) == pytest.approx(6.0, rel=0.05)

    def test_callable_sampler(self):
        d = DelayDistribution(lambda n, rng: rng.exponential(2.0, size=n), "exp")
        assert d.sample(7, default_rng(0)).shape == (7,)

    @pytest.mark.parametrize("delay, expected", [(2.4, 2), (2.6, 3), (0.0, 0)])
    def test_rounds_to_nearest_day(self, delay, expected):
        days = DelayDistribution.constant(delay).sample_days(4)
        np.testing.assert_array_equal(days, np.full(4, expected))

    def test_rejects_negative_draws(self):
        d = DelayDistribution(lambda n, rng: -np.ones(n), "bad")
        with pytest.raises(InvalidParameters):
            d.sample(3)

    def test_rejects_wrong_shape(self):
        d = DelayDistribution(lambda n, rng: np.ones(n + 1), "bad")
        with pytest.raises(InvalidParameters):
            d.sample(3)

    @pytest.mark.parametrize("mean, sd", [(0, 1), (5, 0), (-1, 2)])
    def test_invalid_gamma(self, mean, sd):
        with pytest.raises(InvalidParameters):
            DelayDistribution.gamma(mean, sd)


class TestForwardImpute:
    def test_conserves_total(self):
        infections = _wave()
        observed = forward_impute(infections, DelayDistribution.gamma(10.0, 5.0), seed=3)
        assert observed.total == infections.total
        assert observed.start == infections.start

    def test_constant_delay_is_a_shift(self):
        infections = _wave()
        observed = forward_impute(infections, DelayDistribution.constant(3))
        np.testing.assert_array_equal(observed.counts[3:63], infections.counts)
        assert observed.counts[:3].sum() == 0

    def test_horizon_extension(self):
        infections = _wave()
        observed = forward_impute(
            infections, DelayDistribution.constant(3), horizon_multiplier=4
        )
        assert observed.end == infections.end + 12
        np.testing.assert_array_equal(observed.time, np.arange(0, observed.end + 1))

    def test_horizon_covers_long_tail(self):
        # Mean delay ~1 but every 100th individual waits 50 days
        d = DelayDistribution(
            lambda n, rng: np.where(np.arange(n) % 100 == 0, 50.0, 0.5), "tail"
        )
        infections = IncidenceSeries("true", np.arange(10), np.full(10, 20.0))
        observed = forward_impute(infections, d, seed=0)
        # Individual 100 was infected on day 5
        assert observed.end == 5 + 50
        assert observed.total == infections.total

    def test_seed_reproducible(self):
        d = DelayDistribution.gamma(8.0, 3.0)
        a = forward_impute(_wave(), d, seed=11)
        b = forward_impute(_wave(), d, seed=11)
        np.testing.assert_array_equal(a.counts, b.counts)

    def test_fills_gaps_and_na(self):
        infections = IncidenceSeries("true", [0, 1, 4], [5.0, np.nan, 7.0])
        observed = forward_impute(infections, DelayDistribution.constant(0))
        np.testing.assert_array_equal(observed.counts[:5], [5, 0, 0, 0, 7])

    def test_all_zero_warns_and_returns_zeros(self):
        infections = IncidenceSeries("true", np.arange(20), np.zeros(20))
        with pytest.warns(EmptyInput):
            observed = forward_impute(infections, DelayDistribution.constant(2))
        assert observed.total == 0
        assert observed.end == 19 + 8

    def test_negative_counts_rejected(self):
        infections = IncidenceSeries("true", np.arange(3), [1.0, -2.0, 3.0])
        with pytest.raises(InvalidParameters):
            forward_impute(infections, DelayDistribution.constant(1))
