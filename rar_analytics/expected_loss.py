"""Analytic expected-loss and value-at-risk estimates.

The risk register labels these "Monte Carlo" results, but nothing is
sampled: the expected annual loss is ``mean(loss) * mean(frequency)`` and
the value at risk scales the loss quantile at the chosen confidence level
by the mean frequency. Simple quantitative assessments use the classic
annualized loss expectancy ``ALE = SLE * ARO``.

Every estimate collapses missing or non-finite inputs to ``0.0`` so the
form can always display a number.
"""

from dataclasses import dataclass
from enum import Enum
import logging
import math
from typing import Any, Dict, Mapping, Optional, Union

from .config import AnalyticsConfig, get_default_config
from .distributions import Distribution
from .formatting import format_currency
from .risk_form import RiskForm, parse_number

logger = logging.getLogger(__name__)

FormLike = Union[RiskForm, Mapping[str, Any]]


class AssessmentType(Enum):
    """Assessment modes of a risk-register entry."""

    QUALITATIVE = "qualitative"
    QUANTITATIVE = "quantitative"
    ADVANCED_QUANTITATIVE = "advancedQuantitative"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["AssessmentType"]:
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class EstimateResult:
    """A monetary estimate with its display string.

    Attributes:
        value: Estimate; ``0.0`` when it cannot be computed.
        formatted: Value formatted in the form's currency.
        confidence_level: Confidence level in percent, for VaR estimates.
    """

    value: float
    formatted: str
    confidence_level: Optional[float] = None

    def __float__(self) -> float:
        return self.value


def _finite_or_zero(value: float) -> float:
    if value is None or not math.isfinite(value):
        return 0.0
    return float(value)


def normalize_confidence_level(level: Optional[float]) -> Optional[float]:
    """Convert a confidence level to a probability.

    Args:
        level: Level in percent (``95``, ``99.5``) or as a fraction (``0.95``).

    Returns:
        Probability strictly inside (0, 1), or ``None`` if ``level`` is unusable.
    """
    level = parse_number(level)
    if level is None:
        return None
    if level > 1:
        level /= 100.0
    if not 0 < level < 1:
        return None
    return level


def _as_form(form: FormLike) -> RiskForm:
    if isinstance(form, RiskForm):
        return form
    return RiskForm.from_snapshot(form)


class ExpectedLossEstimator:
    """Compute ALE, expected annual loss and value at risk for risk entries.

    Args:
        config: Analytics configuration; the process default when omitted.

    Examples:
        Estimate from distributions::

            estimator = ExpectedLossEstimator()
            loss = TriangularDistribution(min=1000, mode=5000, max=20000)
            freq = PoissonDistribution(lam=2)
            estimator.estimate_expected_loss(loss, freq).value  # 17333.33

        Estimate straight from a form snapshot::

            estimator.expected_loss_from_form({"assessmentType": "quantitative",
                                               "sle": "10000", "aro": "0.5"}).value  # 5000.0
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        self.config = config if config is not None else get_default_config()

    @property
    def currency(self) -> str:
        return self.config.estimator.currency

    def _result(
        self, value: float, currency: Optional[str] = None, confidence_level: Optional[float] = None
    ) -> EstimateResult:
        value = _finite_or_zero(value)
        return EstimateResult(
            value=value,
            formatted=format_currency(value, currency or self.currency),
            confidence_level=confidence_level,
        )

    # ------------------------------------------------------------------ #
    #  Distribution-level estimates
    # ------------------------------------------------------------------ #

    def calculate_ale(
        self, sle: Any, aro: Any, currency: Optional[str] = None
    ) -> EstimateResult:
        """Annualized loss expectancy ``SLE * ARO``.

        Args:
            sle: Single loss expectancy; missing or non-numeric counts as 0.
            aro: Annual rate of occurrence; missing or non-numeric counts as 0.
            currency: Currency key for formatting.

        Returns:
            EstimateResult with the ALE.
        """
        sle_value = parse_number(sle) or 0.0
        aro_value = parse_number(aro) or 0.0
        return self._result(sle_value * aro_value, currency)

    def estimate_expected_loss(
        self,
        loss: Optional[Distribution],
        frequency: Optional[Distribution],
        currency: Optional[str] = None,
    ) -> EstimateResult:
        """Expected annual loss ``mean(loss) * mean(frequency)``.

        Means are computed from whichever parameters are present, so partly
        filled forms still produce an estimate.

        Args:
            loss: Loss severity distribution.
            frequency: Annual event frequency distribution.
            currency: Currency key for formatting.

        Returns:
            EstimateResult; ``0.0`` if either distribution is missing or a
            mean is not finite.
        """
        if loss is None or frequency is None:
            return self._result(0.0, currency)
        value = loss.mean() * frequency.mean()
        if not math.isfinite(value):
            logger.debug(
                "Non-finite expected loss for %s x %s; reporting 0", loss.name, frequency.name
            )
        return self._result(value, currency)

    def estimate_value_at_risk(
        self,
        loss: Optional[Distribution],
        frequency: Optional[Distribution],
        confidence_level: Optional[float] = None,
        currency: Optional[str] = None,
    ) -> EstimateResult:
        """Value at risk ``quantile(loss, c) * mean(frequency)``.

        Args:
            loss: Loss severity distribution; must be fully specified.
            frequency: Annual event frequency distribution.
            confidence_level: Level in percent or as a fraction; the
                configured default when omitted or unusable.
            currency: Currency key for formatting.

        Returns:
            EstimateResult carrying the confidence level in percent.
        """
        probability = normalize_confidence_level(confidence_level)
        if probability is None:
            probability = self.config.estimator.default_confidence_level / 100.0
        level_pct = round(probability * 100.0, 6)

        if loss is None or frequency is None:
            return self._result(0.0, currency, level_pct)
        value = loss.ppf(probability) * frequency.mean()
        return self._result(value, currency, level_pct)

    # ------------------------------------------------------------------ #
    #  Form-level estimates
    # ------------------------------------------------------------------ #

    def expected_loss_from_form(self, form: FormLike) -> EstimateResult:
        """Expected loss for a form according to its assessment type.

        ``quantitative`` forms give the ALE, ``advancedQuantitative`` forms
        the expected annual loss of their distributions, anything else 0.

        Args:
            form: RiskForm or raw form snapshot.

        Returns:
            EstimateResult with the expected loss.
        """
        form = _as_form(form)
        assessment = AssessmentType.parse(form.assessment_type)
        if assessment is AssessmentType.QUANTITATIVE:
            return self.calculate_ale(form.sle, form.aro, form.sle_currency)
        if assessment is AssessmentType.ADVANCED_QUANTITATIVE:
            return self.estimate_expected_loss(
                form.loss_distribution_spec(self.config),
                form.frequency_distribution_spec(self.config),
                form.sle_currency,
            )
        return self._result(0.0, form.sle_currency)

    def value_at_risk_from_form(self, form: FormLike) -> EstimateResult:
        """Value at risk for an advanced quantitative form, 0 for other types.

        Args:
            form: RiskForm or raw form snapshot.

        Returns:
            EstimateResult at the form's confidence level.
        """
        form = _as_form(form)
        if AssessmentType.parse(form.assessment_type) is not AssessmentType.ADVANCED_QUANTITATIVE:
            return self._result(0.0, form.sle_currency)
        return self.estimate_value_at_risk(
            form.loss_distribution_spec(self.config),
            form.frequency_distribution_spec(self.config),
            form.confidence_level,
            form.sle_currency,
        )

    def expected_loss_numeric(self, form: FormLike) -> float:
        """Plain float expected loss of a form, as used by sensitivity analysis."""
        return self.expected_loss_from_form(form).value

    def summarize(self, form: FormLike) -> "AssessmentSummary":
        """Build the results summary for an advanced quantitative form.

        Args:
            form: RiskForm or raw form snapshot.

        Returns:
            AssessmentSummary with EAL, VaR and the distribution means.
        """
        form = _as_form(form)
        loss = form.loss_distribution_spec(self.config)
        frequency = form.frequency_distribution_spec(self.config)
        return AssessmentSummary(
            expected_loss=self.expected_loss_from_form(form),
            value_at_risk=self.value_at_risk_from_form(form),
            loss_family=loss.name if loss is not None else None,
            frequency_family=frequency.name if frequency is not None else None,
            loss_mean=_finite_or_zero(loss.mean()) if loss is not None else 0.0,
            frequency_mean=_finite_or_zero(frequency.mean()) if frequency is not None else 0.0,
            currency=form.sle_currency or self.currency,
        )


@dataclass
class AssessmentSummary:
    """Results summary shown for an advanced quantitative assessment."""

    expected_loss: EstimateResult
    value_at_risk: EstimateResult
    loss_family: Optional[str]
    frequency_family: Optional[str]
    loss_mean: float
    frequency_mean: float
    currency: str

    def to_dict(self) -> Dict[str, Any]:
        """Flat dictionary of the summary values."""
        return {
            "expected_annual_loss": self.expected_loss.value,
            "value_at_risk": self.value_at_risk.value,
            "confidence_level": self.value_at_risk.confidence_level,
            "loss_distribution": self.loss_family,
            "frequency_distribution": self.frequency_family,
            "loss_mean": self.loss_mean,
            "frequency_mean": self.frequency_mean,
        }

    def to_text(self) -> str:
        """Multi-line plain-text rendering for the results box."""
        level = self.value_at_risk.confidence_level
        level_text = f"{level:g}%" if level is not None else "N/A"
        lines = [
            "Approximated Monte Carlo Results",
            "================================",
            f"Loss Distribution: {self.loss_family or 'not selected'}",
            f"  Mean Loss per Event: {format_currency(self.loss_mean, self.currency)}",
            f"Frequency Distribution: {self.frequency_family or 'not selected'}",
            f"  Mean Events per Year: {self.frequency_mean:,.3f}",
            "",
            f"Expected Annual Loss (EAL): {self.expected_loss.formatted}",
            f"Value at Risk ({level_text}): {self.value_at_risk.formatted}",
            "",
            "EAL = Mean(Loss) x Mean(Frequency)",
        ]
        return "\n".join(lines)


def calculate_ale(sle: Any, aro: Any) -> float:
    """``SLE * ARO`` with missing inputs counted as zero."""
    return ExpectedLossEstimator().calculate_ale(sle, aro).value


def estimate_expected_loss(
    loss: Optional[Distribution], frequency: Optional[Distribution]
) -> EstimateResult:
    """Expected annual loss with the default configuration."""
    return ExpectedLossEstimator().estimate_expected_loss(loss, frequency)


def estimate_value_at_risk(
    loss: Optional[Distribution],
    frequency: Optional[Distribution],
    confidence_level: Optional[float] = None,
) -> EstimateResult:
    """Value at risk with the default configuration."""
    return ExpectedLossEstimator().estimate_value_at_risk(loss, frequency, confidence_level)


def expected_loss_from_form(form: FormLike) -> EstimateResult:
    """Expected loss of a form with the default configuration."""
    return ExpectedLossEstimator().expected_loss_from_form(form)


def value_at_risk_from_form(form: FormLike) -> EstimateResult:
    """Value at risk of a form with the default configuration."""
    return ExpectedLossEstimator().value_at_risk_from_form(form)


def summarize_assessment(form: FormLike) -> AssessmentSummary:
    """Results summary of a form with the default configuration."""
    return ExpectedLossEstimator().summarize(form)
