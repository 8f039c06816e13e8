"""Tests for density and cumulative curve sampling."""

import numpy as np
import pandas as pd
import pytest

from rar_analytics.config import AnalyticsConfig, CurveConfig
from rar_analytics.curve_sampler import CurveSample, percentile_from_curve, sample_curve
from rar_analytics.distributions import (
    BetaDistribution,
    DiscreteUniformDistribution,
    ExponentialDistribution,
    GammaDistribution,
    GeometricDistribution,
    LogNormalDistribution,
    NegativeBinomialDistribution,
    NormalDistribution,
    ParetoDistribution,
    PertDistribution,
    PoissonDistribution,
    TriangularDistribution,
    UniformDistribution,
    WeibullDistribution,
)

CONTINUOUS_SPECS = [
    TriangularDistribution(min=1000, mode=5000, max=20000),
    PertDistribution(min=0, mode=3, max=10),
    NormalDistribution(mean_value=100, std_dev=20),
    LogNormalDistribution(mu=10, sigma=0.5),
    UniformDistribution(min=10, max=30),
    BetaDistribution(alpha=2, beta=5, min=0, max=1000),
    GammaDistribution(shape=2, scale=1000),
    ParetoDistribution(x_min=1000, alpha=2),
    WeibullDistribution(k=1.5, lam=1000),
    ExponentialDistribution(lam=0.5),
]


class TestContinuousCurves:
    """Test sampling of continuous families."""

    @pytest.mark.parametrize("spec", CONTINUOUS_SPECS, ids=lambda s: s.name)
    def test_density_integrates_to_one(self, spec):
        """Trapezoidal integral of the density curve is close to one."""
        curve = sample_curve(spec, kind="density")
        assert np.trapezoid(curve.values, curve.xs) == pytest.approx(1.0, abs=0.05)

    @pytest.mark.parametrize("spec", CONTINUOUS_SPECS, ids=lambda s: s.name)
    def test_strictly_increasing_x(self, spec):
        """Sample locations are strictly increasing."""
        curve = sample_curve(spec)
        assert np.all(np.diff(curve.xs) > 0)

    @pytest.mark.parametrize("spec", CONTINUOUS_SPECS, ids=lambda s: s.name)
    def test_cumulative_is_monotone_percent(self, spec):
        """Cumulative values are non-decreasing percentages."""
        values = sample_curve(spec, kind="cumulative").values
        assert np.all(np.diff(values) >= 0)
        assert values.min() >= 0.0
        assert values.max() <= 100.0

    def test_cumulative_reaches_bounds(self):
        """A bounded family spans 0% to 100%."""
        values = sample_curve(TriangularDistribution(min=0, mode=5, max=10), "cumulative").values
        assert values[0] == 0.0
        assert values[-1] == 100.0

    def test_default_resolution(self):
        """101 evenly spaced points across [min, max]."""
        curve = sample_curve(TriangularDistribution(min=0, mode=5, max=10))
        assert len(curve) == 101
        assert curve[0].x == 0.0
        assert curve[-1].x == 10.0

    def test_normal_domain(self):
        """Normal curves span mean +/- 4 standard deviations."""
        curve = sample_curve(NormalDistribution(mean_value=100, std_dev=20))
        assert curve[0].x == pytest.approx(20.0)
        assert curve[-1].x == pytest.approx(180.0)

    def test_pareto_domain(self):
        """Pareto curves run from x_min to x_min * 100^(1/alpha)."""
        curve = sample_curve(ParetoDistribution(x_min=1000, alpha=2))
        assert curve[0].x == pytest.approx(1000.0)
        assert curve[-1].x == pytest.approx(10000.0)

    def test_lognormal_domain_follows_config(self):
        """The log-normal bounds use the configured z quantile."""
        spec = LogNormalDistribution(mu=0, sigma=1)
        wide = AnalyticsConfig(curve=CurveConfig(lognormal_z=3.0))
        assert sample_curve(spec)[-1].x == pytest.approx(np.exp(2.326), abs=1e-3)
        assert sample_curve(spec, config=wide)[-1].x == pytest.approx(np.exp(3.0), abs=1e-3)

    def test_duplicates_removed_after_rounding(self):
        """A very narrow domain collapses to distinct 3-decimal x values."""
        curve = sample_curve(UniformDistribution(min=0, max=0.01))
        assert len(curve) == 11
        assert len(set(curve.xs)) == len(curve)

    def test_configured_resolution(self):
        """n_points controls the number of samples."""
        config = AnalyticsConfig(curve=CurveConfig(n_points=200))
        curve = sample_curve(TriangularDistribution(min=0, mode=50, max=100), config=config)
        assert len(curve) == 201

    def test_infinite_density_points_dropped(self):
        """A U-shaped beta drops its infinite endpoint densities."""
        curve = sample_curve(BetaDistribution(alpha=0.5, beta=0.5, min=0, max=1))
        assert len(curve) == 99
        assert np.all(np.isfinite(curve.values))

    def test_idempotent(self):
        """Sampling the same spec twice gives identical curves."""
        spec = GammaDistribution(shape=2, scale=1000)
        assert sample_curve(spec, "cumulative").points == sample_curve(spec, "cumulative").points


class TestDiscreteCurves:
    """Test sampling of count families."""

    def test_poisson_support(self):
        """Poisson runs from 0 to min(30, max(10, lambda + 4 sqrt(lambda)))."""
        assert list(sample_curve(PoissonDistribution(lam=2)).xs) == list(range(0, 11))
        assert sample_curve(PoissonDistribution(lam=25)).xs[-1] == 30

    def test_poisson_mass_sums_to_cdf(self):
        """Summed probability mass equals the cumulative value at the end."""
        spec = PoissonDistribution(lam=2)
        density = sample_curve(spec).values
        cumulative = sample_curve(spec, "cumulative").values
        assert density.sum() * 100 == pytest.approx(cumulative[-1])

    def test_negative_binomial_support(self):
        """Negative binomial starts at r and covers at least 30 trials."""
        xs = sample_curve(NegativeBinomialDistribution(r=2, p=0.5)).xs
        assert xs[0] == 2
        assert xs[-1] == 30

    def test_geometric_support(self):
        """Geometric stops once 99.9% is covered, capped at 50 trials."""
        assert sample_curve(GeometricDistribution(p=0.5)).xs[-1] == 10
        assert sample_curve(GeometricDistribution(p=0.01)).xs[-1] == 50

    def test_discrete_uniform_support(self):
        """Discrete uniform covers exactly min..max."""
        curve = sample_curve(DiscreteUniformDistribution(min=2, max=6))
        assert list(curve.xs) == [2, 3, 4, 5, 6]
        assert np.allclose(curve.values, 0.2)


class TestEmptyAndErrors:
    """Test undefined specs and bad arguments."""

    def test_zero_alpha_beta_gives_empty_curve(self):
        """Beta with alpha = 0 samples to an empty curve."""
        curve = sample_curve(BetaDistribution(alpha=0, beta=2, min=0, max=1))
        assert curve.is_empty
        assert len(curve) == 0

    def test_missing_spec(self):
        """No distribution gives an empty curve."""
        assert sample_curve(None).is_empty

    def test_bad_kind(self):
        """Unknown curve kinds are rejected."""
        with pytest.raises(ValueError, match="kind"):
            sample_curve(TriangularDistribution(min=0, mode=5, max=10), kind="hazard")


class TestPercentileAndExport:
    """Test percentile read-out and DataFrame export."""

    def test_percentile_from_curve(self):
        """The median of N(100, 20) reads as 100."""
        curve = sample_curve(NormalDistribution(mean_value=100, std_dev=20), "cumulative")
        assert percentile_from_curve(curve, 50).x == pytest.approx(100.0)

    def test_percentile_requires_cumulative(self):
        """Density curves are rejected."""
        curve = sample_curve(NormalDistribution(mean_value=100, std_dev=20))
        with pytest.raises(ValueError):
            percentile_from_curve(curve, 50)

    def test_percentile_of_empty_curve(self):
        """An empty curve has no percentile."""
        assert percentile_from_curve(CurveSample(family=None, kind="cumulative"), 90) is None

    def test_to_dataframe(self):
        """Curves export as x plus a column named after the kind."""
        df = sample_curve(PoissonDistribution(lam=2), "cumulative").to_dataframe()
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["x", "cumulative"]
        assert len(df) == 11


class TestSmallScaleCurves:
    """Test that valid distributions at tiny scales still produce curves."""

    @pytest.mark.parametrize(
        "spec",
        [GammaDistribution(shape=2, scale=0.001), LogNormalDistribution(mu=-6, sigma=0.5)],
        ids=["gamma", "lognormal"],
    )
    def test_curve_not_empty(self, spec):
        """A defined distribution never samples to the empty placeholder curve."""
        curve = sample_curve(spec)
        assert len(curve) > 1
        assert np.all(np.diff(curve.xs) > 0)
        assert np.all(np.isfinite(curve.values))
        assert curve.xs[-1] < 0.01

    def test_numpy_parameters(self):
        """Numpy-typed parameters sample like plain numbers."""
        spec = TriangularDistribution(min=np.int64(0), mode=np.int64(5), max=np.int64(10))
        assert len(sample_curve(spec)) == 101
