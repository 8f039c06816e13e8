"""Tests for expected-loss and value-at-risk estimation."""

import math

import pytest

from rar_analytics.config import AnalyticsConfig, EstimatorConfig
from rar_analytics.distributions import (
    NormalDistribution,
    ParetoDistribution,
    PoissonDistribution,
    TriangularDistribution,
)
from rar_analytics.expected_loss import (
    AssessmentType,
    EstimateResult,
    ExpectedLossEstimator,
    calculate_ale,
    estimate_expected_loss,
    estimate_value_at_risk,
    expected_loss_from_form,
    normalize_confidence_level,
    summarize_assessment,
    value_at_risk_from_form,
)
from rar_analytics.risk_form import RiskForm

TRIANGULAR_POISSON_EAL = (1000 + 5000 + 20000) / 3 * 2


class TestAnnualizedLossExpectancy:
    """Test the simple SLE x ARO calculation."""

    def test_basic(self):
        """10,000 x 0.5 = 5,000."""
        assert calculate_ale(10000, 0.5) == pytest.approx(5000.0)

    def test_string_inputs(self):
        """Form strings are parsed."""
        result = ExpectedLossEstimator().calculate_ale("10000", "0.5")
        assert result.value == pytest.approx(5000.0)
        assert result.formatted == "$5,000"

    @pytest.mark.parametrize("sle,aro", [(None, 0.5), ("", "0.5"), ("abc", "2"), (1000, None)])
    def test_missing_inputs_count_as_zero(self, sle, aro):
        """Missing or non-numeric inputs give zero."""
        assert calculate_ale(sle, aro) == 0.0


class TestExpectedAnnualLoss:
    """Test mean(loss) x mean(frequency)."""

    def test_triangular_poisson(self):
        """EAL multiplies the two means."""
        result = estimate_expected_loss(
            TriangularDistribution(min=1000, mode=5000, max=20000), PoissonDistribution(lam=2)
        )
        assert isinstance(result, EstimateResult)
        assert result.value == pytest.approx(TRIANGULAR_POISSON_EAL)
        assert result.formatted == "$17,333.333"
        assert float(result) == pytest.approx(TRIANGULAR_POISSON_EAL)

    def test_missing_distribution(self):
        """A missing distribution gives zero."""
        assert estimate_expected_loss(None, PoissonDistribution(lam=2)).value == 0.0

    def test_infinite_mean_collapses_to_zero(self):
        """A Pareto loss without a finite mean reports zero."""
        result = estimate_expected_loss(
            ParetoDistribution(x_min=1000, alpha=0.8), PoissonDistribution(lam=2)
        )
        assert result.value == 0.0
        assert result.formatted == "$0"

    def test_currency(self):
        """The configured currency is used for formatting."""
        config = AnalyticsConfig(estimator=EstimatorConfig(currency="euro"))
        result = ExpectedLossEstimator(config).estimate_expected_loss(
            NormalDistribution(mean_value=1000, std_dev=100), PoissonDistribution(lam=1.5)
        )
        assert result.formatted == "€1,500"


class TestValueAtRisk:
    """Test quantile(loss) x mean(frequency)."""

    def test_triangular_quantile(self):
        """95% VaR of a symmetric triangle times the Poisson mean."""
        expected = (10 - math.sqrt(0.05 * 10 * 5)) * 2
        result = estimate_value_at_risk(
            TriangularDistribution(min=0, mode=5, max=10), PoissonDistribution(lam=2), 95
        )
        assert result.value == pytest.approx(expected)
        assert result.confidence_level == pytest.approx(95.0)

    def test_percent_and_fraction_agree(self):
        """Confidence levels may be given in percent or as a fraction."""
        loss = NormalDistribution(mean_value=100, std_dev=20)
        freq = PoissonDistribution(lam=1)
        assert estimate_value_at_risk(loss, freq, 99).value == pytest.approx(
            estimate_value_at_risk(loss, freq, 0.99).value
        )

    def test_default_confidence_level(self):
        """Without a level the configured default (95%) is used."""
        result = estimate_value_at_risk(
            TriangularDistribution(min=0, mode=5, max=10), PoissonDistribution(lam=1)
        )
        assert result.confidence_level == pytest.approx(95.0)

    def test_undefined_loss(self):
        """An undefined loss distribution gives zero."""
        result = estimate_value_at_risk(
            TriangularDistribution(min=0, max=10), PoissonDistribution(lam=1), 95
        )
        assert result.value == 0.0

    @pytest.mark.parametrize(
        "level,expected",
        [(95, 0.95), (99.5, 0.995), (0.9, 0.9), ("99", 0.99), (0, None), (150, None), (None, None)],
    )
    def test_normalize_confidence_level(self, level, expected):
        """Percent and fractional levels normalise to probabilities."""
        result = normalize_confidence_level(level)
        if expected is None:
            assert result is None
        else:
            assert result == pytest.approx(expected)


class TestFormEstimates:
    """Test the form-level entry points."""

    def test_assessment_type_parse(self):
        """Assessment types parse from form values."""
        assert AssessmentType.parse("advancedQuantitative") is AssessmentType.ADVANCED_QUANTITATIVE
        assert AssessmentType.parse("other") is None
        assert AssessmentType.parse(None) is None

    def test_quantitative_form_uses_ale(self, quantitative_snapshot):
        """Quantitative forms report SLE x ARO."""
        assert expected_loss_from_form(quantitative_snapshot).value == pytest.approx(5000.0)

    def test_advanced_form_uses_distributions(self, triangular_poisson_snapshot):
        """Advanced forms report mean(loss) x mean(frequency)."""
        result = expected_loss_from_form(triangular_poisson_snapshot)
        assert result.value == pytest.approx(TRIANGULAR_POISSON_EAL)

    def test_accepts_parsed_form(self, triangular_poisson_snapshot):
        """A parsed RiskForm is accepted as well as a raw snapshot."""
        form = RiskForm.from_snapshot(triangular_poisson_snapshot)
        assert expected_loss_from_form(form).value == pytest.approx(TRIANGULAR_POISSON_EAL)

    def test_qualitative_form_is_zero(self):
        """Qualitative forms have no expected loss."""
        assert expected_loss_from_form({"assessmentType": "qualitative", "sle": "100"}).value == 0.0

    def test_form_currency(self, triangular_poisson_snapshot):
        """The form's SLE currency drives the display symbol."""
        snapshot = dict(triangular_poisson_snapshot, sleCurrency="pound")
        assert expected_loss_from_form(snapshot).formatted.startswith("£")

    def test_value_at_risk_from_form(self, triangular_poisson_snapshot):
        """VaR uses the form's confidence level."""
        snapshot = dict(triangular_poisson_snapshot, confidenceLevel="99")
        loss = TriangularDistribution(min=1000, mode=5000, max=20000)
        result = value_at_risk_from_form(snapshot)
        assert result.value == pytest.approx(loss.ppf(0.99) * 2)
        assert result.confidence_level == pytest.approx(99.0)

    def test_value_at_risk_requires_advanced(self, quantitative_snapshot):
        """Only advanced quantitative forms have a VaR."""
        assert value_at_risk_from_form(quantitative_snapshot).value == 0.0


class TestSummary:
    """Test the results summary."""

    def test_summary_values(self, triangular_poisson_snapshot):
        """The summary carries the means, EAL and VaR."""
        summary = summarize_assessment(triangular_poisson_snapshot)
        data = summary.to_dict()
        assert data["loss_distribution"] == "triangular"
        assert data["frequency_distribution"] == "poisson"
        assert data["loss_mean"] == pytest.approx(26000 / 3)
        assert data["frequency_mean"] == pytest.approx(2.0)
        assert data["expected_annual_loss"] == pytest.approx(TRIANGULAR_POISSON_EAL)
        assert data["confidence_level"] == pytest.approx(95.0)

    def test_summary_text(self, triangular_poisson_snapshot):
        """The text rendering shows the formatted estimates."""
        text = summarize_assessment(triangular_poisson_snapshot).to_text()
        assert "Expected Annual Loss (EAL): $17,333.333" in text
        assert "Value at Risk (95%)" in text
        assert "Loss Distribution: triangular" in text

    def test_summary_without_distributions(self):
        """An empty advanced form summarises to zeros."""
        summary = summarize_assessment({"assessmentType": "advancedQuantitative"})
        assert summary.expected_loss.value == 0.0
        assert summary.loss_family is None
        assert "not selected" in summary.to_text()
