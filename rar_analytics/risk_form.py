"""Typed view of a risk-register form snapshot.

The register UI keeps every input as a string under a camelCase key
(``minLoss``, ``frequencyLambda``, ...). :class:`RiskForm` parses such a
snapshot leniently: blank or non-numeric inputs become ``None`` rather than
raising, because a half-filled form is the normal state while a user types.
It also knows which form fields feed which distribution parameters.

Examples:
    Parse a snapshot and build its distributions::

        form = RiskForm.from_snapshot({
            "assessmentType": "advancedQuantitative",
            "lossDistribution": "triangular",
            "minLoss": "1000", "mostLikelyLoss": "5000", "maxLoss": "20000",
            "frequencyDistribution": "poisson",
            "frequencyLambda": "2",
        })
        form.loss_distribution_spec().mean()       # 8666.67
        form.frequency_distribution_spec().mean()  # 2.0
"""

import logging
import math
import numbers
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from .config import AnalyticsConfig, get_default_config
from .distributions import (
    FREQUENCY_FAMILIES,
    LOSS_FAMILIES,
    BetaDistribution,
    BinomialDistribution,
    DiscreteUniformDistribution,
    Distribution,
    DistributionFamily,
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

logger = logging.getLogger(__name__)

_NUMERIC_FIELDS = (
    "sle",
    "aro",
    "confidence_level",
    "min_loss",
    "most_likely_loss",
    "max_loss",
    "loss_pert_gamma",
    "loss_mean",
    "loss_std_dev",
    "loss_alpha",
    "loss_beta",
    "loss_pareto_min",
    "loss_pareto_shape",
    "loss_weibull_shape",
    "loss_weibull_scale",
    "loss_gamma_shape",
    "loss_gamma_scale",
    "min_frequency",
    "most_likely_frequency",
    "max_frequency",
    "frequency_pert_gamma",
    "frequency_mean",
    "frequency_std_dev",
    "frequency_lambda",
    "frequency_lambda_exp",
    "frequency_discrete_uniform_min",
    "frequency_discrete_uniform_max",
    "frequency_neg_binomial_r",
    "frequency_neg_binomial_p",
    "frequency_binomial_n",
    "frequency_binomial_p",
    "frequency_geometric_p",
)


def parse_number(value: Any) -> Optional[float]:
    """Leniently convert a form input to a float.

    Args:
        value: Raw input, typically a string.

    Returns:
        The finite float value, or ``None`` for blank, non-numeric or
        non-finite input.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def _truncate(value: Optional[float]) -> Optional[float]:
    """Integer part of a count input, as the form's integer fields read it."""
    return float(math.trunc(value)) if value is not None else None


class RiskForm(BaseModel):
    """Risk-register form fields used by the analytics engine.

    Field names are snake_case; snapshots use the camelCase aliases. Unknown
    keys (descriptions, owners, heat-map settings, ...) are ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    assessment_type: Optional[str] = None
    current_risk_view: Optional[str] = None
    sle_currency: Optional[str] = None

    # Simple quantitative assessment
    sle: Optional[float] = None
    aro: Optional[float] = None

    # Advanced quantitative assessment
    confidence_level: Optional[float] = None
    loss_distribution: Optional[str] = None
    frequency_distribution: Optional[str] = None

    min_loss: Optional[float] = None
    most_likely_loss: Optional[float] = None
    max_loss: Optional[float] = None
    loss_pert_gamma: Optional[float] = None
    loss_mean: Optional[float] = None
    loss_std_dev: Optional[float] = None
    loss_alpha: Optional[float] = None
    loss_beta: Optional[float] = None
    loss_pareto_min: Optional[float] = None
    loss_pareto_shape: Optional[float] = None
    loss_weibull_shape: Optional[float] = None
    loss_weibull_scale: Optional[float] = None
    loss_gamma_shape: Optional[float] = None
    loss_gamma_scale: Optional[float] = None

    min_frequency: Optional[float] = None
    most_likely_frequency: Optional[float] = None
    max_frequency: Optional[float] = None
    frequency_pert_gamma: Optional[float] = None
    frequency_mean: Optional[float] = None
    frequency_std_dev: Optional[float] = None
    frequency_lambda: Optional[float] = None
    frequency_lambda_exp: Optional[float] = None
    frequency_discrete_uniform_min: Optional[float] = None
    frequency_discrete_uniform_max: Optional[float] = None
    frequency_neg_binomial_r: Optional[float] = None
    frequency_neg_binomial_p: Optional[float] = None
    frequency_binomial_n: Optional[float] = None
    frequency_binomial_p: Optional[float] = None
    frequency_geometric_p: Optional[float] = None

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> Optional[float]:
        """Turn raw form inputs into floats, blank or invalid input into ``None``."""
        return parse_number(v)

    @field_validator(
        "assessment_type",
        "current_risk_view",
        "sle_currency",
        "loss_distribution",
        "frequency_distribution",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        """Normalise selector values; blank selections become ``None``."""
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    # ------------------------------------------------------------------ #
    #  Construction
    # ------------------------------------------------------------------ #

    @classmethod
    def from_snapshot(cls, snapshot: Mapping[str, Any]) -> "RiskForm":
        """Parse a form snapshot keyed by camelCase (or snake_case) names.

        Args:
            snapshot: Mapping of form keys to raw values.

        Returns:
            The parsed form.
        """
        return cls.model_validate(dict(snapshot))

    def to_snapshot(self) -> Dict[str, Any]:
        """Dump the populated fields back to camelCase keys."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def field_for(cls, key: str) -> str:
        """Resolve a camelCase form key or snake_case name to the field name.

        Raises:
            KeyError: If ``key`` is not a form field.
        """
        if key in cls.model_fields:
            return key
        for name, info in cls.model_fields.items():
            if info.alias == key:
                return name
        raise KeyError(f"Unknown form field: {key}")

    def with_value(self, key: str, value: Any) -> "RiskForm":
        """Copy of the form with one field replaced.

        Args:
            key: Form key (camelCase) or field name.
            value: New raw value, parsed like form input.

        Returns:
            New form; ``self`` is unchanged.
        """
        name = self.field_for(key)
        if name in _NUMERIC_FIELDS:
            value = parse_number(value)
        return self.model_copy(update={name: value})

    # ------------------------------------------------------------------ #
    #  Distributions
    # ------------------------------------------------------------------ #

    @property
    def loss_family(self) -> Optional[DistributionFamily]:
        return DistributionFamily.parse(self.loss_distribution)

    @property
    def frequency_family(self) -> Optional[DistributionFamily]:
        return DistributionFamily.parse(self.frequency_distribution)

    def loss_distribution_spec(
        self, config: Optional[AnalyticsConfig] = None
    ) -> Optional[Distribution]:
        """Build the loss severity distribution selected on the form.

        Args:
            config: Analytics configuration, the process default when omitted.

        Returns:
            The distribution, or ``None`` if no supported loss family is selected.
        """
        if config is None:
            config = get_default_config()
        family = self.loss_family
        if family not in LOSS_FAMILIES:
            if self.loss_distribution:
                logger.debug("Unsupported loss distribution %r", self.loss_distribution)
            return None

        defaults = config.distributions
        if family is DistributionFamily.TRIANGULAR:
            return TriangularDistribution(
                min=self.min_loss, mode=self.most_likely_loss, max=self.max_loss
            )
        if family is DistributionFamily.PERT:
            return PertDistribution(
                min=self.min_loss,
                mode=self.most_likely_loss,
                max=self.max_loss,
                gamma=(
                    self.loss_pert_gamma
                    if self.loss_pert_gamma is not None
                    else defaults.pert_gamma
                ),
                normalizer=defaults.pert_normalizer,
            )
        if family is DistributionFamily.NORMAL:
            return NormalDistribution(mean_value=self.loss_mean, std_dev=self.loss_std_dev)
        if family is DistributionFamily.LOGNORMAL:
            # The form's mean / std-dev inputs hold mu and sigma of ln(X)
            return LogNormalDistribution(mu=self.loss_mean, sigma=self.loss_std_dev)
        if family is DistributionFamily.UNIFORM:
            return UniformDistribution(min=self.min_loss, max=self.max_loss)
        if family is DistributionFamily.BETA:
            return BetaDistribution(
                alpha=self.loss_alpha, beta=self.loss_beta, min=self.min_loss, max=self.max_loss
            )
        if family is DistributionFamily.GAMMA:
            return GammaDistribution(shape=self.loss_gamma_shape, scale=self.loss_gamma_scale)
        if family is DistributionFamily.PARETO:
            return ParetoDistribution(x_min=self.loss_pareto_min, alpha=self.loss_pareto_shape)
        return WeibullDistribution(k=self.loss_weibull_shape, lam=self.loss_weibull_scale)

    def frequency_distribution_spec(
        self, config: Optional[AnalyticsConfig] = None
    ) -> Optional[Distribution]:
        """Build the event frequency distribution selected on the form.

        Count inputs (discrete-uniform bounds, negative-binomial ``r``,
        binomial ``n``) are truncated to integers.

        Args:
            config: Analytics configuration, the process default when omitted.

        Returns:
            The distribution, or ``None`` if no supported frequency family is selected.
        """
        if config is None:
            config = get_default_config()
        family = self.frequency_family
        if family not in FREQUENCY_FAMILIES:
            if self.frequency_distribution:
                logger.debug("Unsupported frequency distribution %r", self.frequency_distribution)
            return None

        defaults = config.distributions
        if family is DistributionFamily.TRIANGULAR:
            return TriangularDistribution(
                min=self.min_frequency, mode=self.most_likely_frequency, max=self.max_frequency
            )
        if family is DistributionFamily.PERT:
            gamma = self.frequency_pert_gamma
            return PertDistribution(
                min=self.min_frequency,
                mode=self.most_likely_frequency,
                max=self.max_frequency,
                gamma=gamma if gamma is not None else defaults.pert_gamma,
                normalizer=defaults.pert_normalizer,
            )
        if family is DistributionFamily.NORMAL:
            return NormalDistribution(
                mean_value=self.frequency_mean, std_dev=self.frequency_std_dev
            )
        if family is DistributionFamily.UNIFORM:
            return UniformDistribution(min=self.min_frequency, max=self.max_frequency)
        if family is DistributionFamily.POISSON:
            return PoissonDistribution(lam=self.frequency_lambda)
        if family is DistributionFamily.EXPONENTIAL:
            return ExponentialDistribution(lam=self.frequency_lambda_exp)
        if family is DistributionFamily.NEGATIVE_BINOMIAL:
            return NegativeBinomialDistribution(
                r=_truncate(self.frequency_neg_binomial_r), p=self.frequency_neg_binomial_p
            )
        if family is DistributionFamily.BINOMIAL:
            return BinomialDistribution(
                n=_truncate(self.frequency_binomial_n), p=self.frequency_binomial_p
            )
        if family is DistributionFamily.GEOMETRIC:
            return GeometricDistribution(p=self.frequency_geometric_p)
        return DiscreteUniformDistribution(
            min=_truncate(self.frequency_discrete_uniform_min),
            max=_truncate(self.frequency_discrete_uniform_max),
        )
