"""Numerical settings for curve sampling, estimation and sensitivity analysis.

Each model groups the tunables of one engine module. The defaults reproduce
the behaviour of the risk register's charts and summaries exactly; changing
them is mainly useful for finer charts or alternative confidence levels.
"""

from typing import List, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import (
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_CURRENCY,
    DEFAULT_CURVE_POINTS,
    DEFAULT_DEDUP_DECIMALS,
    DEFAULT_MAX_SENSITIVITY_RESULTS,
    DEFAULT_PERT_GAMMA,
    SUPPORTED_CONFIDENCE_LEVELS,
)


class CurveConfig(BaseModel):
    """Sampling of density and cumulative curves for charting.

    Attributes:
        n_points: Intervals across a continuous domain; ``n_points + 1``
            samples are produced.
        dedup_decimals: Rounding used to drop duplicate x values.
        lognormal_z: Standard-normal quantile bounding the log-normal domain.
    """

    n_points: int = Field(default=DEFAULT_CURVE_POINTS, ge=2, le=10_000)
    dedup_decimals: int = Field(default=DEFAULT_DEDUP_DECIMALS, ge=0, le=12)
    lognormal_z: float = Field(default=2.326, gt=0, le=10)


class DistributionDefaults(BaseModel):
    """Defaults applied when building distributions from a form.

    Attributes:
        pert_gamma: PERT mode weight used when the form leaves it blank.
        pert_normalizer: How the PERT beta normaliser is computed.
    """

    pert_gamma: float = Field(default=DEFAULT_PERT_GAMMA, ge=1)
    pert_normalizer: Literal["exact", "stirling"] = "exact"


class EstimatorConfig(BaseModel):
    """Expected-loss and value-at-risk settings.

    Attributes:
        confidence_levels: Offered VaR confidence levels, in percent.
        default_confidence_level: Level used when none is supplied.
        currency: Currency key used when formatting results.
    """

    confidence_levels: List[float] = Field(
        default_factory=lambda: list(SUPPORTED_CONFIDENCE_LEVELS)
    )
    default_confidence_level: float = DEFAULT_CONFIDENCE_LEVEL
    currency: str = DEFAULT_CURRENCY

    @field_validator("confidence_levels")
    @classmethod
    def validate_levels(cls, v: List[float]) -> List[float]:
        """Ensure every confidence level is a percentage strictly inside (0, 100).

        Args:
            v: Confidence levels to validate.

        Returns:
            List[float]: The levels, sorted ascending.

        Raises:
            ValueError: If the list is empty or a level is out of range.
        """
        if not v:
            raise ValueError("At least one confidence level is required")
        for level in v:
            if not 0 < level < 100:
                raise ValueError(f"Confidence level {level} must lie strictly between 0 and 100")
        return sorted(v)

    @model_validator(mode="after")
    def validate_default_level(self):
        """Ensure the default confidence level is one of the offered levels.

        Returns:
            EstimatorConfig: The validated config object.

        Raises:
            ValueError: If the default is not in ``confidence_levels``.
        """
        if self.default_confidence_level not in self.confidence_levels:
            raise ValueError(
                f"Default confidence level {self.default_confidence_level} "
                f"is not one of {self.confidence_levels}"
            )
        return self


class SensitivityConfig(BaseModel):
    """Tornado analysis settings."""

    max_results: int = Field(default=DEFAULT_MAX_SENSITIVITY_RESULTS, ge=1, le=50)
