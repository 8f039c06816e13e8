"""Sampling of density and cumulative curves for distribution charts.

Continuous families are evaluated at evenly spaced points across their
plotting domain (101 points by default); discrete families at every integer
of their plotting support. Cumulative curves are expressed in percent.

Example:
    Sample a normal loss curve and read off its 90th percentile::

        from rar_analytics.curve_sampler import percentile_from_curve, sample_curve
        from rar_analytics.distributions import NormalDistribution

        spec = NormalDistribution(mean_value=100, std_dev=20)
        curve = sample_curve(spec, kind="cumulative")
        percentile_from_curve(curve, 90).x
"""

from dataclasses import dataclass, field
import logging
import math
from typing import Iterator, List, Literal, Optional, Tuple

import numpy as np
import pandas as pd

from .config import AnalyticsConfig, get_default_config
from .distributions import (
    DiscreteDistribution,
    Distribution,
    LogNormalDistribution,
    positive_plot_floor,
)
from .special_functions import safe_exp

logger = logging.getLogger(__name__)

CurveKind = Literal["density", "cumulative"]


@dataclass(frozen=True)
class SamplePoint:
    """One point of a sampled curve.

    Attributes:
        x: Loss amount or event count.
        value: Density (or probability mass), or cumulative percent.
    """

    x: float
    value: float


@dataclass
class CurveSample:
    """Ordered points of a density or cumulative curve.

    ``points`` are strictly increasing in ``x``. An undefined distribution
    yields an empty sample, which a chart renders as its placeholder.
    """

    family: Optional[str]
    kind: CurveKind
    points: List[SamplePoint] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[SamplePoint]:
        return iter(self.points)

    def __getitem__(self, index: int) -> SamplePoint:
        return self.points[index]

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def xs(self) -> np.ndarray:
        """Sample locations as an array."""
        return np.array([p.x for p in self.points], dtype=float)

    @property
    def values(self) -> np.ndarray:
        """Sampled values as an array."""
        return np.array([p.value for p in self.points], dtype=float)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert the curve to a DataFrame with ``x`` and ``kind`` columns.

        Returns:
            DataFrame with one row per sample point.
        """
        return pd.DataFrame({"x": self.xs, self.kind: self.values})


def _continuous_domain(spec: Distribution, config: AnalyticsConfig) -> Tuple[float, float]:
    if isinstance(spec, LogNormalDistribution):
        mu, sigma = float(spec.mu), float(spec.sigma)  # type: ignore[arg-type]
        z = config.curve.lognormal_z
        high = safe_exp(mu + z * sigma)
        return positive_plot_floor(safe_exp(mu - z * sigma), high), high
    return spec.plot_domain()


def _evaluate(spec: Distribution, x: float, kind: CurveKind) -> float:
    if kind == "cumulative":
        return min(100.0, max(0.0, spec.cdf(x) * 100.0))
    return spec.pdf(x)


def sample_curve(
    spec: Optional[Distribution],
    kind: CurveKind = "density",
    config: Optional[AnalyticsConfig] = None,
) -> CurveSample:
    """Sample the density or cumulative curve of a distribution.

    Args:
        spec: Distribution to sample; ``None`` or undefined gives an empty curve.
        kind: ``"density"`` for pdf/pmf values, ``"cumulative"`` for CDF percent.
        config: Analytics configuration, the process default when omitted.

    Returns:
        CurveSample with strictly increasing ``x``. Continuous curves drop
        points whose x collides after rounding and points with a non-finite
        density; discrete curves keep integer x untouched.

    Raises:
        ValueError: If ``kind`` is not recognised.
    """
    if kind not in ("density", "cumulative"):
        raise ValueError(f"kind must be 'density' or 'cumulative', got {kind!r}")
    if config is None:
        config = get_default_config()
    if spec is None:
        return CurveSample(family=None, kind=kind)
    if not spec.is_valid:
        logger.debug("Undefined %s distribution %r; returning empty curve", spec.name, spec)
        return CurveSample(family=spec.name, kind=kind)

    if isinstance(spec, DiscreteDistribution):
        points = [
            SamplePoint(float(k), _evaluate(spec, k, kind)) for k in spec.plot_support()
        ]
        return CurveSample(family=spec.name, kind=kind, points=points)

    low, high = _continuous_domain(spec, config)
    if not (math.isfinite(low) and math.isfinite(high)) or high <= low:
        logger.debug("Degenerate plotting domain [%g, %g] for %s", low, high, spec.name)
        return CurveSample(family=spec.name, kind=kind)

    decimals = config.curve.dedup_decimals
    seen = set()
    points = []
    for x in np.linspace(low, high, config.curve.n_points + 1):
        rounded = round(float(x), decimals)
        if rounded in seen:
            continue
        value = _evaluate(spec, float(x), kind)
        if not math.isfinite(value):
            continue
        seen.add(rounded)
        points.append(SamplePoint(rounded, value))
    return CurveSample(family=spec.name, kind=kind, points=points)


def percentile_from_curve(curve: CurveSample, percentile: float) -> Optional[SamplePoint]:
    """Find the sampled point whose cumulative percent is closest to ``percentile``.

    This is the percentile read-out shown next to a cumulative chart.

    Args:
        curve: A cumulative curve from :func:`sample_curve`.
        percentile: Target percentile in ``[0, 100]``.

    Returns:
        The closest point, or ``None`` for an empty curve.

    Raises:
        ValueError: If ``curve`` is not a cumulative curve.
    """
    if curve.kind != "cumulative":
        raise ValueError("percentile_from_curve requires a cumulative curve")
    if curve.is_empty:
        return None
    index = int(np.argmin(np.abs(curve.values - percentile)))
    return curve.points[index]
