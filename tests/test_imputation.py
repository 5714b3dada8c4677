import numpy as np
import pytest

from rt_validation.delays import DelayDistribution, forward_impute
from rt_validation.errors import InvalidParameters
from rt_validation.imputation import InfectionTimeImputer, MeanShiftImputer, shift_series
from rt_validation.series import IncidenceSeries


def _observed():
    return IncidenceSeries("observed", np.arange(5, 25), np.arange(1.0, 21.0))


class TestShiftSeries:
    def test_shift_back(self):
        shifted = shift_series(_observed(), 3)
        np.testing.assert_array_equal(shifted.time, _observed().time)
        np.testing.assert_array_equal(shifted.counts[:17], np.arange(4.0, 21.0))
        np.testing.assert_array_equal(shifted.counts[17:], np.zeros(3))

    def test_zero_shift_is_identity(self):
        np.testing.assert_array_equal(shift_series(_observed(), 0).counts, _observed().counts)

    def test_shift_past_end(self):
        assert shift_series(_observed(), 50).total == 0

    @pytest.mark.parametrize("d1, d2", [(1, 2), (4, 0), (7, 9), (15, 10)])
    def test_shifts_compose(self, d1, d2):
        twice = shift_series(shift_series(_observed(), d1), d2)
        once = shift_series(_observed(), d1 + d2)
        np.testing.assert_array_equal(twice.counts, once.counts)

    def test_negative_shift_rejected(self):
        with pytest.raises(InvalidParameters):
            shift_series(_observed(), -1)


class TestMeanShiftImputer:
    def test_shifts_by_rounded_mean(self):
        imputed = MeanShiftImputer().impute(_observed(), DelayDistribution.constant(2.6))
        assert imputed.name == "imputed"
        np.testing.assert_array_equal(imputed.counts, shift_series(_observed(), 3).counts)

    def test_recovers_constant_delay(self):
        t = np.arange(0, 40)
        infections = IncidenceSeries("true", t, np.round(100 * np.exp(0.1 * t)))
        delay = DelayDistribution.constant(5)
        observed = forward_impute(infections, delay)
        imputed = MeanShiftImputer().impute(observed, delay)
        np.testing.assert_array_equal(imputed.counts[:40], infections.counts)

    def test_gamma_delay_preserves_mass_inside_horizon(self):
        t = np.arange(0, 60)
        infections = IncidenceSeries("true", t, np.full(60, 200.0))
        delay = DelayDistribution.gamma(6.0, 2.0)
        rng = np.random.default_rng(4)
        observed = forward_impute(infections, delay, rng=rng)
        imputed = MeanShiftImputer().impute(observed, delay, rng=rng)
        # Away from the edges the shifted series sits on the true level
        assert imputed.counts[15:45].mean() == pytest.approx(200.0, rel=0.05)

    def test_interface_is_abstract(self):
        with pytest.raises(TypeError):
            InfectionTimeImputer()

    def test_custom_imputer(self):
        class Identity(InfectionTimeImputer):
            def impute(self, observed, delay, rng=None):
                return observed.renamed(self.name)

        imputed = Identity().impute(_observed(), DelayDistribution.constant(1))
        np.testing.assert_array_equal(imputed.counts, _observed().counts)
