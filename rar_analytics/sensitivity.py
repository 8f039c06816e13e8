"""One-at-a-time sensitivity analysis of expected annual loss.

This module produces the data behind the risk register's tornado chart.
Each distribution parameter on the form is moved down and up by a fixed
factor while every other input is held at its entered value. The
resulting expected annual loss (EAL) is expressed as a percentage change
from the baseline EAL, and parameters are ranked by the width of that
swing.

When no real analysis is possible (wrong assessment type, unsupported
distribution, no baseline) a labelled placeholder result is returned so
the chart can still show an example.

Example:
    Tornado data for a triangular / Poisson risk::

        from rar_analytics.sensitivity import analyze_sensitivity

        result = analyze_sensitivity({
            "assessmentType": "advancedQuantitative",
            "lossDistribution": "triangular",
            "minLoss": "1000", "mostLikelyLoss": "5000", "maxLoss": "20000",
            "frequencyDistribution": "poisson", "frequencyLambda": "2",
        })
        result.to_dataframe()
"""

from dataclasses import dataclass, field
from enum import Enum
import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import pandas as pd

from .config import AnalyticsConfig, get_default_config
from .distributions import DistributionFamily
from .expected_loss import AssessmentType, ExpectedLossEstimator
from .risk_form import RiskForm

logger = logging.getLogger(__name__)


class ReasonCode(Enum):
    """Why a tornado result holds real or placeholder data."""

    REAL_DATA = "real_data"
    NOT_ADVANCED_QUANTITATIVE = "not_advanced_quantitative"
    UNSUPPORTED_DISTRIBUTION = "unsupported_distribution"
    NO_BASELINE_DATA = "no_baseline_data"
    INSUFFICIENT_PARAMETERS = "insufficient_parameters"


@dataclass(frozen=True)
class ParameterPerturbation:
    """How one form field is varied.

    The low and high values are ``base * low_factor`` and
    ``base * high_factor``, or for count fields ``max(floor, base - shift)``
    and ``base + shift`` rounded to integers.

    Attributes:
        label: Parameter name shown on the chart.
        field: Form field (snake_case) holding the parameter.
        low_factor: Multiplier for the low scenario.
        high_factor: Multiplier for the high scenario.
        allow_negative: Analyse negative base values too (log-normal mu).
        shift: Additive step for count fields; ``None`` for multiplicative.
        floor: Lower bound of the low scenario for count fields.
    """

    label: str
    field: str
    low_factor: float = 1.0
    high_factor: float = 1.0
    allow_negative: bool = False
    shift: Optional[int] = None
    floor: int = 0

    @property
    def discrete(self) -> bool:
        return self.shift is not None

    def base_value(self, form: RiskForm) -> Optional[float]:
        """The form's value for this parameter, ``None`` if it is not analysable."""
        value = getattr(form, self.field)
        if value is None or math.isnan(value):
            return None
        if self.discrete:
            value = float(math.trunc(value))
        if value < 0 and not self.allow_negative:
            return None
        return value

    def scenarios(self, base: float) -> Tuple[float, float]:
        """Low and high parameter values for ``base``."""
        if self.discrete:
            low = max(self.floor, base - self.shift)  # type: ignore[operator]
            high = base + self.shift  # type: ignore[operator]
            return float(round(low)), float(round(high))
        return base * self.low_factor, base * self.high_factor


def _triangular_loss() -> List[ParameterPerturbation]:
    return [
        ParameterPerturbation("Min Loss", "min_loss", 0.5, 1.5),
        ParameterPerturbation("Most Likely Loss", "most_likely_loss", 0.7, 1.3),
        ParameterPerturbation("Max Loss", "max_loss", 0.8, 1.2),
    ]


LOSS_PERTURBATIONS: Dict[DistributionFamily, List[ParameterPerturbation]] = {
    DistributionFamily.TRIANGULAR: _triangular_loss(),
    DistributionFamily.PERT: _triangular_loss(),
    DistributionFamily.NORMAL: [
        ParameterPerturbation("Loss Mean", "loss_mean", 0.8, 1.2),
        ParameterPerturbation("Loss Std Dev", "loss_std_dev", 0.7, 1.3),
    ],
    DistributionFamily.LOGNORMAL: [
        ParameterPerturbation("Loss Mu (μ)", "loss_mean", 0.8, 1.2, allow_negative=True),
        ParameterPerturbation("Loss Sigma (σ)", "loss_std_dev", 0.7, 1.3),
    ],
    DistributionFamily.UNIFORM: [
        ParameterPerturbation("Loss Min", "min_loss", 0.7, 1.3),
        ParameterPerturbation("Loss Max", "max_loss", 0.8, 1.2),
    ],
    DistributionFamily.BETA: [
        ParameterPerturbation("Loss Alpha (α)", "loss_alpha", 0.7, 1.3),
        ParameterPerturbation("Loss Beta (β)", "loss_beta", 0.7, 1.3),
        ParameterPerturbation("Loss Min", "min_loss", 0.7, 1.3),
        ParameterPerturbation("Loss Max", "max_loss", 0.8, 1.2),
    ],
    DistributionFamily.PARETO: [
        ParameterPerturbation("Loss xMin", "loss_pareto_min", 0.7, 1.3),
        ParameterPerturbation("Loss Alpha (α)", "loss_pareto_shape", 0.7, 1.3),
    ],
    DistributionFamily.WEIBULL: [
        ParameterPerturbation("Loss Shape (k)", "loss_weibull_shape", 0.7, 1.3),
        ParameterPerturbation("Loss Scale (λ)", "loss_weibull_scale", 0.7, 1.3),
    ],
    DistributionFamily.GAMMA: [
        ParameterPerturbation("Loss Shape (α)", "loss_gamma_shape", 0.7, 1.3),
        ParameterPerturbation("Loss Scale (β)", "loss_gamma_scale", 0.7, 1.3),
    ],
}
"""Loss parameters varied per loss family, in chart order before ranking."""

FREQUENCY_PERTURBATIONS: Dict[DistributionFamily, List[ParameterPerturbation]] = {
    DistributionFamily.TRIANGULAR: [
        ParameterPerturbation("Event Frequency", "most_likely_frequency", 0.5, 1.5),
    ],
    DistributionFamily.PERT: [
        ParameterPerturbation("Event Frequency", "most_likely_frequency", 0.5, 1.5),
    ],
    DistributionFamily.NORMAL: [
        ParameterPerturbation("Freq Mean", "frequency_mean", 0.8, 1.2),
        ParameterPerturbation("Freq Std Dev", "frequency_std_dev", 0.7, 1.3),
    ],
    DistributionFamily.UNIFORM: [
        ParameterPerturbation("Freq Min", "min_frequency", 0.7, 1.3),
        ParameterPerturbation("Freq Max", "max_frequency", 0.8, 1.2),
    ],
    DistributionFamily.DISCRETE_UNIFORM: [
        ParameterPerturbation(
            "Discrete Freq Min", "frequency_discrete_uniform_min", shift=2, floor=0
        ),
        ParameterPerturbation(
            "Discrete Freq Max", "frequency_discrete_uniform_max", shift=2, floor=1
        ),
    ],
    DistributionFamily.POISSON: [
        ParameterPerturbation("Frequency Lambda (λ)", "frequency_lambda", 0.7, 1.3),
    ],
}
"""Frequency parameters varied per frequency family."""

SUPPORTED_LOSS_DISTRIBUTIONS = [
    "triangular",
    "pert",
    "normal",
    "lognormal",
    "uniform",
    "beta",
    "pareto",
    "weibull",
    "gamma",
]
SUPPORTED_FREQUENCY_DISTRIBUTIONS = [
    "triangular",
    "pert",
    "normal",
    "uniform",
    "discrete-uniform",
    "poisson",
]


@dataclass
class ImpactResult:
    """Percentage swing of the EAL for one parameter.

    Attributes:
        parameter: Chart label of the parameter.
        negative: Largest decrease in percent (``<= 0``).
        positive: Largest increase in percent (``>= 0``).
        range: Width of the swing, ``|max - min|`` of the two impacts.
        field: Form field that was varied, ``None`` for placeholder bars.
    """

    parameter: str
    negative: float
    positive: float
    range: float
    field: Optional[str] = None


def _bars(rows: List[Tuple[str, float, float, float]]) -> List[ImpactResult]:
    return [ImpactResult(label, neg, pos, rng) for label, neg, pos, rng in rows]


_NOT_ADVANCED_EXAMPLE = [
    ("Min Loss (Example)", -15.2, 12.8, 28.0),
    ("Max Loss (Example)", -10.5, 8.3, 18.8),
    ("Most Likely Loss (Example)", -8.2, 15.7, 23.9),
    ("Event Frequency (Example)", -14.4, 11.2, 25.6),
]
_UNSUPPORTED_EXAMPLE = [("Distribution Not Supported", -10.0, 10.0, 20.0)]
_NO_BASELINE_SAMPLE = [
    ("Min Loss (Sample)", -12.5, 8.7, 21.2),
    ("Max Loss (Sample)", -18.2, 22.1, 40.3),
    ("Most Likely Loss (Sample)", -9.1, 14.3, 23.4),
    ("Event Frequency (Sample)", -16.7, 11.8, 28.5),
]
_INSUFFICIENT_EXAMPLE = [("Insufficient Data", -5.0, 5.0, 10.0)]


@dataclass
class TornadoResult:
    """Tornado chart data with provenance.

    Attributes:
        results: Bars, ranked by ``range`` descending for real data.
        is_placeholder: True when ``results`` are illustrative examples.
        reason_code: Why the data is real or a placeholder.
        supported_distributions: Loss families the analysis supports.
        risk_view: ``"inherent"``, ``"residual"`` or ``"none"``.
        baseline: Baseline EAL, when one was computed.
        loss_distribution: Loss family on the form, for unsupported results.
        frequency_distribution: Frequency family on the form, for unsupported results.
    """

    results: List[ImpactResult]
    is_placeholder: bool
    reason_code: ReasonCode
    supported_distributions: List[str] = field(
        default_factory=lambda: list(SUPPORTED_LOSS_DISTRIBUTIONS)
    )
    risk_view: str = "none"
    baseline: Optional[float] = None
    loss_distribution: Optional[str] = None
    frequency_distribution: Optional[str] = None

    def __len__(self) -> int:
        return len(self.results)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert the bars to a DataFrame.

        Returns:
            DataFrame with parameter, negative, positive and range columns.
        """
        return pd.DataFrame(
            [
                {
                    "parameter": r.parameter,
                    "negative": r.negative,
                    "positive": r.positive,
                    "range": r.range,
                }
                for r in self.results
            ],
            columns=["parameter", "negative", "positive", "range"],
        )


class SensitivityAnalyzer:
    """Tornado sensitivity analysis of a risk entry's expected annual loss.

    Attributes:
        config: Analytics configuration used for estimates and the result cap.
        estimator: Expected-loss estimator evaluating each scenario.
        loss_perturbations: Parameters varied per loss family.
        frequency_perturbations: Parameters varied per frequency family.
    """

    def __init__(
        self,
        config: Optional[AnalyticsConfig] = None,
        loss_perturbations: Optional[Dict[DistributionFamily, List[ParameterPerturbation]]] = None,
        frequency_perturbations: Optional[
            Dict[DistributionFamily, List[ParameterPerturbation]]
        ] = None,
    ):
        """Initialize the analyzer.

        Args:
            config: Analytics configuration; the process default when omitted.
            loss_perturbations: Override of :data:`LOSS_PERTURBATIONS`.
            frequency_perturbations: Override of :data:`FREQUENCY_PERTURBATIONS`.
        """
        self.config = config if config is not None else get_default_config()
        self.estimator = ExpectedLossEstimator(self.config)
        self.loss_perturbations = (
            loss_perturbations if loss_perturbations is not None else LOSS_PERTURBATIONS
        )
        self.frequency_perturbations = (
            frequency_perturbations
            if frequency_perturbations is not None
            else FREQUENCY_PERTURBATIONS
        )

    @property
    def max_results(self) -> int:
        return self.config.sensitivity.max_results

    def _calculate_impact(
        self,
        form: RiskForm,
        perturbation: ParameterPerturbation,
        base: float,
        baseline: float,
    ) -> Optional[ImpactResult]:
        """Evaluate the low and high scenarios of one parameter.

        Returns:
            The impact, or ``None`` when the parameter or a scenario is unusable.
        """
        if base == 0:
            return None
        low_value, high_value = perturbation.scenarios(base)
        try:
            low_eal = self.estimator.expected_loss_numeric(
                form.with_value(perturbation.field, low_value)
            )
            high_eal = self.estimator.expected_loss_numeric(
                form.with_value(perturbation.field, high_value)
            )
        except (ArithmeticError, ValueError) as e:
            logger.warning("Could not analyze parameter '%s': %s", perturbation.label, e)
            return None

        if not low_eal or not high_eal:
            logger.debug(
                "Skipping '%s': scenario EAL is zero (low=%g, high=%g)",
                perturbation.label,
                low_eal,
                high_eal,
            )
            return None

        low_impact = (low_eal - baseline) / baseline * 100.0
        high_impact = (high_eal - baseline) / baseline * 100.0
        negative = min(low_impact, high_impact)
        positive = max(low_impact, high_impact)
        return ImpactResult(
            parameter=perturbation.label,
            negative=negative if negative < 0 else 0.0,
            positive=positive if positive > 0 else 0.0,
            range=abs(positive - negative),
            field=perturbation.field,
        )

    def _perturbations_for(self, form: RiskForm) -> List[ParameterPerturbation]:
        perturbations: List[ParameterPerturbation] = []
        if form.loss_family is not None:
            perturbations.extend(self.loss_perturbations.get(form.loss_family, []))
        if form.frequency_family is not None:
            perturbations.extend(self.frequency_perturbations.get(form.frequency_family, []))
        return perturbations

    def analyze(self, form: Union[RiskForm, Mapping[str, Any]]) -> TornadoResult:
        """Run the tornado analysis for a form.

        Args:
            form: RiskForm or raw form snapshot.

        Returns:
            TornadoResult with the top parameters ranked by range, or a
            placeholder explaining why no analysis was possible.
        """
        if not isinstance(form, RiskForm):
            form = RiskForm.from_snapshot(form)

        if AssessmentType.parse(form.assessment_type) is not AssessmentType.ADVANCED_QUANTITATIVE:
            return TornadoResult(
                results=_bars(_NOT_ADVANCED_EXAMPLE),
                is_placeholder=True,
                reason_code=ReasonCode.NOT_ADVANCED_QUANTITATIVE,
                supported_distributions=["triangular", "pert"],
                risk_view="none",
            )

        loss_supported = (
            not form.loss_distribution or form.loss_distribution in SUPPORTED_LOSS_DISTRIBUTIONS
        )
        frequency_supported = (
            not form.frequency_distribution
            or form.frequency_distribution in SUPPORTED_FREQUENCY_DISTRIBUTIONS
        )
        if not (loss_supported and frequency_supported):
            return TornadoResult(
                results=_bars(_UNSUPPORTED_EXAMPLE),
                is_placeholder=True,
                reason_code=ReasonCode.UNSUPPORTED_DISTRIBUTION,
                risk_view="none",
                loss_distribution=form.loss_distribution,
                frequency_distribution=form.frequency_distribution,
            )

        risk_view = "residual" if form.current_risk_view == "residual" else "inherent"
        baseline = self.estimator.expected_loss_numeric(form)
        if not baseline or math.isnan(baseline):
            return TornadoResult(
                results=_bars(_NO_BASELINE_SAMPLE),
                is_placeholder=True,
                reason_code=ReasonCode.NO_BASELINE_DATA,
                risk_view=risk_view,
            )

        impacts = []
        for perturbation in self._perturbations_for(form):
            base = perturbation.base_value(form)
            if base is None:
                logger.debug("Skipping '%s': no usable value on the form", perturbation.label)
                continue
            impact = self._calculate_impact(form, perturbation, base, baseline)
            if impact is not None:
                impacts.append(impact)

        if not impacts:
            return TornadoResult(
                results=_bars(_INSUFFICIENT_EXAMPLE),
                is_placeholder=True,
                reason_code=ReasonCode.INSUFFICIENT_PARAMETERS,
                risk_view=risk_view,
                baseline=baseline,
            )

        ranked = sorted(impacts, key=lambda r: r.range, reverse=True)[: self.max_results]
        logger.debug("Tornado analysis ranked %d of %d parameters", len(ranked), len(impacts))
        return TornadoResult(
            results=ranked,
            is_placeholder=False,
            reason_code=ReasonCode.REAL_DATA,
            risk_view=risk_view,
            baseline=baseline,
        )


def analyze_sensitivity(form_snapshot: Union[RiskForm, Mapping[str, Any]]) -> TornadoResult:
    """Tornado analysis of a form snapshot with the default configuration.

    Args:
        form_snapshot: RiskForm or raw form snapshot (camelCase keys).

    Returns:
        TornadoResult, real or placeholder.
    """
    return SensitivityAnalyzer().analyze(form_snapshot)
