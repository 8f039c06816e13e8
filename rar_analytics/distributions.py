"""Loss and frequency distributions for risk-register quantification.

This module provides closed-form density, cumulative and quantile functions
for the nine loss severity families and six event frequency families a risk
register records. Every family is a small frozen dataclass deriving from
:class:`Distribution`; :data:`DISTRIBUTION_REGISTRY` maps each
:class:`DistributionFamily` to its class so callers can dispatch on the
family tag rather than on strings.

Parameters are stored exactly as entered and may be missing (``None``) or
out of range. Such a distribution is *undefined*: its evaluators return
``nan`` instead of raising, which lets a chart show its "enter parameters"
placeholder.

Example:
    Evaluate a triangular loss distribution::

        from rar_analytics.distributions import DistributionFamily, build_distribution

        loss = build_distribution(DistributionFamily.TRIANGULAR, min=0, mode=5, max=10)
        loss.pdf(5)   # 0.2
        loss.cdf(5)   # 0.5
        loss.mean()   # 5.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
import logging
import math
import numbers
from typing import ClassVar, Dict, Iterator, Optional, Tuple, Type, Union

from scipy import optimize

from .special_functions import (
    combination,
    gamma_function,
    log_beta,
    log_factorial,
    log_gamma,
    regularized_incomplete_beta,
    regularized_lower_gamma,
    safe_exp,
    standard_normal_cdf,
    stirling_beta,
)

logger = logging.getLogger(__name__)

LOGNORMAL_PLOT_Z = 2.326
"""Standard normal quantile of the 99th percentile, used for log-normal plot bounds."""

PLOT_TAIL_PROBABILITY = 0.01
"""Tail mass left out of the Pareto and Weibull plotting domains."""

PLOT_FLOOR = 0.01
"""Smallest x charted for families whose density may blow up at zero."""

DISCRETE_PLOT_MAX_POINTS = 500
"""Most integers charted for any count distribution."""

DISCRETE_CDF_MAX_TERMS = 100_000
_CDF_SATURATION = 1.0 - 1e-15


class DistributionFamily(Enum):
    """Distribution families known to the engine.

    Values match the identifiers the risk-register form stores.
    """

    TRIANGULAR = "triangular"
    PERT = "pert"
    NORMAL = "normal"
    LOGNORMAL = "lognormal"
    UNIFORM = "uniform"
    BETA = "beta"
    GAMMA = "gamma"
    PARETO = "pareto"
    WEIBULL = "weibull"
    POISSON = "poisson"
    EXPONENTIAL = "exponential"
    NEGATIVE_BINOMIAL = "negative-binomial"
    BINOMIAL = "binomial"
    GEOMETRIC = "geometric"
    DISCRETE_UNIFORM = "discrete-uniform"

    @classmethod
    def parse(cls, value: Union[str, "DistributionFamily", None]) -> Optional["DistributionFamily"]:
        """Return the family for ``value``, or ``None`` when it is unknown or blank."""
        if isinstance(value, cls):
            return value
        if not value:
            return None
        try:
            return cls(str(value).strip())
        except ValueError:
            return None


def _is_real(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_number(value: Optional[float]) -> bool:
    return _is_real(value) and math.isfinite(value)


def _positive(value: Optional[float]) -> bool:
    return _is_number(value) and value > 0


def _integer_like(value: Optional[float]) -> bool:
    return _is_number(value) and abs(value - round(value)) < 1e-9


def _or_zero(value: Optional[float]) -> float:
    """Missing inputs count as zero when computing means."""
    return float(value) if _is_number(value) else 0.0


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return math.nan
    return numerator / denominator


def _plot_range(start: int, end: int) -> range:
    """Integers ``start..end`` for charting, truncated to DISCRETE_PLOT_MAX_POINTS."""
    return range(start, min(end, start + DISCRETE_PLOT_MAX_POINTS - 1) + 1)


def positive_plot_floor(lower: float, upper: float) -> float:
    """Lower plotting bound for a family supported on ``(0, inf)``.

    Charts start at :data:`PLOT_FLOOR` rather than zero. When the whole
    domain lies below it, the floor shrinks to a thousandth of ``upper``
    so the range stays non-empty.

    Args:
        lower: Natural lower bound, e.g. a low quantile; 0 when there is none.
        upper: Upper plotting bound.

    Returns:
        A bound below ``upper`` whenever ``lower`` is below it.
    """
    floor = PLOT_FLOOR if upper > PLOT_FLOOR else upper * 1e-3
    return max(floor, lower)


class Distribution(ABC):
    """Abstract base class for loss and frequency distributions.

    Subclasses implement the private ``_pdf``/``_cdf`` hooks for valid
    parameters only; the public evaluators handle the undefined case and
    coerce their argument to ``float``.
    """

    family: ClassVar[DistributionFamily]
    discrete: ClassVar[bool] = False

    @property
    @abstractmethod
    def is_valid(self) -> bool:
        """Whether every parameter is present and inside its domain."""

    @abstractmethod
    def _pdf(self, x: float) -> float:
        """Density (or mass) at ``x`` for valid parameters."""

    @abstractmethod
    def _cdf(self, x: float) -> float:
        """Cumulative probability at ``x`` for valid parameters."""

    @abstractmethod
    def mean(self) -> float:
        """Analytical mean.

        Computed arithmetically from whichever parameters are present, with
        missing values taken as zero, so an estimate is available while a
        form is still being filled in. Returns ``nan`` where the formula
        divides by zero and ``inf`` where the mean does not exist.
        """

    @abstractmethod
    def plot_domain(self) -> Tuple[float, float]:
        """Natural or percentile-derived plotting range ``(low, high)``."""

    def pdf(self, x: float) -> float:
        """Probability density at ``x`` (probability mass for discrete families).

        Args:
            x: Evaluation point.

        Returns:
            Non-negative density, or ``nan`` if the distribution is undefined.
        """
        if not self.is_valid or not _is_number(x):
            return math.nan
        return self._pdf(float(x))

    def cdf(self, x: float) -> float:
        """Cumulative probability ``P(X <= x)``.

        Args:
            x: Evaluation point.

        Returns:
            Probability in ``[0, 1]``, or ``nan`` if the distribution is undefined.
        """
        if not self.is_valid or not _is_real(x) or math.isnan(x):
            return math.nan
        if math.isinf(x):
            return 1.0 if x > 0 else 0.0
        return min(1.0, max(0.0, self._cdf(float(x))))

    def ppf(self, q: float) -> float:
        """Quantile (inverse CDF) at probability ``q``.

        Args:
            q: Probability strictly between 0 and 1.

        Returns:
            Smallest ``x`` with ``cdf(x) >= q``, or ``nan`` when undefined.
        """
        if not self.is_valid or not _is_number(q) or not 0 < q < 1:
            return math.nan
        return self._ppf(float(q))

    def _ppf(self, q: float) -> float:
        low, high = self._ppf_bracket(q)
        return _invert_cdf(self._cdf, q, low, high)

    def _ppf_bracket(self, q: float) -> Tuple[float, float]:
        return self.plot_domain()

    @property
    def name(self) -> str:
        """Family identifier, e.g. ``"triangular"``."""
        return self.family.value


def _invert_cdf(cdf, q: float, low: float, high: float) -> float:
    """Solve ``cdf(x) = q`` on ``[low, high]`` with Brent's method."""
    f_low = cdf(low) - q
    f_high = cdf(high) - q
    if f_low >= 0:
        return low
    if f_high < 0:
        logger.debug("Quantile %g lies beyond bracket [%g, %g]", q, low, high)
        return math.nan
    root, result = optimize.brentq(
        lambda x: cdf(x) - q, low, high, xtol=1e-12, rtol=1e-10, full_output=True, disp=False
    )
    if not result.converged:
        logger.debug("Quantile search for q=%g did not converge; using best estimate", q)
    return float(root)


def _standard_normal_ppf(q: float) -> float:
    return _invert_cdf(standard_normal_cdf, q, -10.0, 10.0)


class DiscreteDistribution(Distribution):
    """Base class for count distributions supported on the integers.

    ``pdf`` is the probability mass; the CDF is the running sum of the mass
    function over the support.
    """

    discrete: ClassVar[bool] = True

    @abstractmethod
    def _pmf(self, k: int) -> float:
        """Probability mass at integer ``k`` inside the support."""

    @abstractmethod
    def support_start(self) -> int:
        """Smallest value in the support."""

    @abstractmethod
    def plot_support(self) -> range:
        """Integers shown when the distribution is charted."""

    def support_end(self) -> Optional[int]:
        """Largest value in the support, ``None`` when unbounded."""
        return None

    def pmf(self, k: float) -> float:
        """Probability mass ``P(X = k)``.

        Args:
            k: Count value; non-integers have zero mass.

        Returns:
            Probability, or ``nan`` if the distribution is undefined.
        """
        if not self.is_valid or not _is_number(k):
            return math.nan
        if not _integer_like(k):
            return 0.0
        k_int = int(round(k))
        end = self.support_end()
        if k_int < self.support_start() or (end is not None and k_int > end):
            return 0.0
        return self._pmf(k_int)

    def _pdf(self, x: float) -> float:
        return self.pmf(x)

    def _cdf(self, x: float) -> float:
        start = self.support_start()
        upper = math.floor(x)
        if upper < start:
            return 0.0
        end = self.support_end()
        if end is not None and upper >= end:
            return 1.0
        total = 0.0
        for k in range(start, min(upper, start + DISCRETE_CDF_MAX_TERMS) + 1):
            total += self._pmf(k)
            if total >= _CDF_SATURATION:
                return 1.0
        return total

    def _ppf(self, q: float) -> float:
        total = 0.0
        for k in self._iter_support():
            total += self._pmf(k)
            if total >= q - 1e-12:
                return float(k)
        return math.nan

    def _iter_support(self) -> Iterator[int]:
        end = self.support_end()
        start = self.support_start()
        stop = start + DISCRETE_CDF_MAX_TERMS
        if end is not None:
            stop = min(stop, end)
        return iter(range(start, stop + 1))

    def plot_domain(self) -> Tuple[float, float]:
        support = self.plot_support()
        if len(support) == 0:
            return (math.nan, math.nan)
        return (float(support[0]), float(support[-1]))


# ---------------------------------------------------------------------
# Loss severity families
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class TriangularDistribution(Distribution):
    """Triangular distribution on ``[min, max]`` peaking at ``mode``."""

    family: ClassVar[DistributionFamily] = DistributionFamily.TRIANGULAR

    min: Optional[float] = None
    mode: Optional[float] = None
    max: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        if not (_is_number(self.min) and _is_number(self.mode) and _is_number(self.max)):
            return False
        return self.min < self.max and self.min <= self.mode <= self.max

    def _pdf(self, x: float) -> float:
        a, c, b = float(self.min), float(self.mode), float(self.max)
        if x < a or x > b:
            return 0.0
        if x < c:
            return 2.0 * (x - a) / ((b - a) * (c - a))
        if x == c:
            return 2.0 / (b - a)
        return 2.0 * (b - x) / ((b - a) * (b - c))

    def _cdf(self, x: float) -> float:
        a, c, b = float(self.min), float(self.mode), float(self.max)
        if x <= a:
            return 0.0
        if x >= b:
            return 1.0
        if x <= c:
            return (x - a) ** 2 / ((b - a) * (c - a))
        return 1.0 - (b - x) ** 2 / ((b - a) * (b - c))

    def _ppf(self, q: float) -> float:
        a, c, b = float(self.min), float(self.mode), float(self.max)
        split = (c - a) / (b - a)
        if q < split:
            return a + math.sqrt(q * (b - a) * (c - a))
        return b - math.sqrt((1.0 - q) * (b - a) * (b - c))

    def mean(self) -> float:
        return (_or_zero(self.min) + _or_zero(self.mode) + _or_zero(self.max)) / 3.0

    def plot_domain(self) -> Tuple[float, float]:
        return (float(self.min), float(self.max))


@dataclass(frozen=True)
class PertDistribution(Distribution):
    """Modified PERT distribution.

    A Beta(alpha, beta) rescaled to ``[min, max]`` with
    ``alpha = 1 + gamma * t`` and ``beta = 1 + gamma * (1 - t)``, where
    ``t = (mode - min) / (max - min)``. ``gamma = 4`` is the classic PERT.

    ``normalizer`` selects how ``B(alpha, beta)`` is computed: ``"exact"``
    through the log-gamma function or ``"stirling"`` for the coarser
    closed-form approximation.
    """

    family: ClassVar[DistributionFamily] = DistributionFamily.PERT

    min: Optional[float] = None
    mode: Optional[float] = None
    max: Optional[float] = None
    gamma: Optional[float] = 4.0
    normalizer: str = "exact"

    @property
    def shape_gamma(self) -> float:
        return float(self.gamma) if _is_number(self.gamma) else 4.0

    @property
    def is_valid(self) -> bool:
        if not (_is_number(self.min) and _is_number(self.mode) and _is_number(self.max)):
            return False
        if not self.min < self.max or not self.min <= self.mode <= self.max:
            return False
        return self.shape_gamma >= 1

    @property
    def shape_parameters(self) -> Tuple[float, float]:
        """Beta shape parameters ``(alpha, beta)``."""
        a, c, b = float(self.min), float(self.mode), float(self.max)
        t = (c - a) / (b - a)
        return 1.0 + self.shape_gamma * t, 1.0 + self.shape_gamma * (1.0 - t)

    def _log_normalizer(self, alpha: float, beta: float) -> float:
        if self.normalizer == "stirling":
            return math.log(stirling_beta(alpha, beta))
        return log_beta(alpha, beta)

    def _pdf(self, x: float) -> float:
        a, b = float(self.min), float(self.max)
        t = (x - a) / (b - a)
        if t <= 0 or t >= 1:
            return 0.0
        alpha, beta = self.shape_parameters
        log_density = (
            (alpha - 1.0) * math.log(t)
            + (beta - 1.0) * math.log(1.0 - t)
            - self._log_normalizer(alpha, beta)
        )
        return safe_exp(log_density) / (b - a)

    def _cdf(self, x: float) -> float:
        a, b = float(self.min), float(self.max)
        alpha, beta = self.shape_parameters
        return regularized_incomplete_beta((x - a) / (b - a), alpha, beta)

    def mean(self) -> float:
        g = self.shape_gamma
        return (_or_zero(self.min) + g * _or_zero(self.mode) + _or_zero(self.max)) / (g + 2.0)

    def plot_domain(self) -> Tuple[float, float]:
        return (float(self.min), float(self.max))


@dataclass(frozen=True)
class NormalDistribution(Distribution):
    """Normal distribution; plotted over ``mean +/- 4 std_dev``."""

    family: ClassVar[DistributionFamily] = DistributionFamily.NORMAL

    mean_value: Optional[float] = None
    std_dev: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        return _is_number(self.mean_value) and _positive(self.std_dev)

    def _pdf(self, x: float) -> float:
        mu, sigma = float(self.mean_value), float(self.std_dev)
        z = (x - mu) / sigma
        return math.exp(-0.5 * z * z) / (sigma * math.sqrt(2.0 * math.pi))

    def _cdf(self, x: float) -> float:
        return standard_normal_cdf((x - float(self.mean_value)) / float(self.std_dev))

    def _ppf(self, q: float) -> float:
        return float(self.mean_value) + float(self.std_dev) * _standard_normal_ppf(q)

    def mean(self) -> float:
        return _or_zero(self.mean_value)

    def plot_domain(self) -> Tuple[float, float]:
        mu, sigma = float(self.mean_value), float(self.std_dev)
        return (mu - 4.0 * sigma, mu + 4.0 * sigma)


@dataclass(frozen=True)
class LogNormalDistribution(Distribution):
    """Log-normal distribution.

    ``mu`` and ``sigma`` are the parameters of the underlying normal
    distribution of ``ln(X)``, not the mean and standard deviation of ``X``.
    """

    family: ClassVar[DistributionFamily] = DistributionFamily.LOGNORMAL

    mu: Optional[float] = None
    sigma: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        return _is_number(self.mu) and _positive(self.sigma)

    def _pdf(self, x: float) -> float:
        if x <= 0:
            return 0.0
        mu, sigma = float(self.mu), float(self.sigma)
        z = (math.log(x) - mu) / sigma
        return math.exp(-0.5 * z * z) / (x * sigma * math.sqrt(2.0 * math.pi))

    def _cdf(self, x: float) -> float:
        if x <= 0:
            return 0.0
        return standard_normal_cdf((math.log(x) - float(self.mu)) / float(self.sigma))

    def _ppf(self, q: float) -> float:
        return safe_exp(float(self.mu) + float(self.sigma) * _standard_normal_ppf(q))

    def mean(self) -> float:
        sigma = _or_zero(self.sigma)
        return safe_exp(_or_zero(self.mu) + sigma * sigma / 2.0)

    def plot_domain(self) -> Tuple[float, float]:
        mu, sigma = float(self.mu), float(self.sigma)
        high = safe_exp(mu + LOGNORMAL_PLOT_Z * sigma)
        return (positive_plot_floor(safe_exp(mu - LOGNORMAL_PLOT_Z * sigma), high), high)


@dataclass(frozen=True)
class UniformDistribution(Distribution):
    """Continuous uniform distribution on ``[min, max]``."""

    family: ClassVar[DistributionFamily] = DistributionFamily.UNIFORM

    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        return _is_number(self.min) and _is_number(self.max) and self.min < self.max

    def _pdf(self, x: float) -> float:
        a, b = float(self.min), float(self.max)
        return 1.0 / (b - a) if a <= x <= b else 0.0

    def _cdf(self, x: float) -> float:
        a, b = float(self.min), float(self.max)
        return (x - a) / (b - a)

    def _ppf(self, q: float) -> float:
        a, b = float(self.min), float(self.max)
        return a + q * (b - a)

    def mean(self) -> float:
        return (_or_zero(self.min) + _or_zero(self.max)) / 2.0

    def plot_domain(self) -> Tuple[float, float]:
        return (float(self.min), float(self.max))


@dataclass(frozen=True)
class BetaDistribution(Distribution):
    """Beta(alpha, beta) distribution rescaled to ``[min, max]``."""

    family: ClassVar[DistributionFamily] = DistributionFamily.BETA

    alpha: Optional[float] = None
    beta: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        if not (_positive(self.alpha) and _positive(self.beta)):
            return False
        return _is_number(self.min) and _is_number(self.max) and self.min < self.max

    def _pdf(self, x: float) -> float:
        lo, hi = float(self.min), float(self.max)
        alpha, beta = float(self.alpha), float(self.beta)
        t = (x - lo) / (hi - lo)
        if t < 0 or t > 1:
            return 0.0
        if t == 0 or t == 1:
            edge_shape = alpha if t == 0 else beta
            if edge_shape < 1:
                return math.inf
            if edge_shape > 1:
                return 0.0
            return safe_exp(-log_beta(alpha, beta)) / (hi - lo)
        log_density = (
            (alpha - 1.0) * math.log(t) + (beta - 1.0) * math.log(1.0 - t) - log_beta(alpha, beta)
        )
        return safe_exp(log_density) / (hi - lo)

    def _cdf(self, x: float) -> float:
        lo, hi = float(self.min), float(self.max)
        return regularized_incomplete_beta(
            (x - lo) / (hi - lo), float(self.alpha), float(self.beta)
        )

    def mean(self) -> float:
        lo, hi = _or_zero(self.min), _or_zero(self.max)
        share = _ratio(_or_zero(self.alpha), _or_zero(self.alpha) + _or_zero(self.beta))
        return lo + (hi - lo) * share

    def plot_domain(self) -> Tuple[float, float]:
        return (float(self.min), float(self.max))


@dataclass(frozen=True)
class GammaDistribution(Distribution):
    """Gamma distribution with ``shape`` (k) and ``scale`` (theta)."""

    family: ClassVar[DistributionFamily] = DistributionFamily.GAMMA

    shape: Optional[float] = None
    scale: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        return _positive(self.shape) and _positive(self.scale)

    def _pdf(self, x: float) -> float:
        k, theta = float(self.shape), float(self.scale)
        if x < 0:
            return 0.0
        if x == 0:
            if k < 1:
                return math.inf
            return 1.0 / theta if k == 1 else 0.0
        # Log space keeps large shapes and scales from overflowing
        log_density = (k - 1.0) * math.log(x) - x / theta - k * math.log(theta) - log_gamma(k)
        return safe_exp(log_density)

    def _cdf(self, x: float) -> float:
        if x <= 0:
            return 0.0
        return regularized_lower_gamma(float(self.shape), x / float(self.scale))

    def _ppf_bracket(self, q: float) -> Tuple[float, float]:
        high = float(self.scale) * max(1.0, float(self.shape))
        for _ in range(200):
            if self._cdf(high) >= q:
                break
            high *= 2.0
        return (0.0, high)

    def mean(self) -> float:
        return _or_zero(self.shape) * _or_zero(self.scale)

    def plot_domain(self) -> Tuple[float, float]:
        k, theta = float(self.shape), float(self.scale)
        high = theta * (k + 4.0 * math.sqrt(k))
        return (positive_plot_floor(0.0, high), high)


@dataclass(frozen=True)
class ParetoDistribution(Distribution):
    """Pareto (type I) distribution with minimum ``x_min`` and tail index ``alpha``."""

    family: ClassVar[DistributionFamily] = DistributionFamily.PARETO

    x_min: Optional[float] = None
    alpha: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        return _positive(self.x_min) and _positive(self.alpha)

    def _pdf(self, x: float) -> float:
        xm, a = float(self.x_min), float(self.alpha)
        if x < xm:
            return 0.0
        # alpha * xm^alpha / x^(alpha+1), arranged to avoid overflow
        return a / x * (xm / x) ** a

    def _cdf(self, x: float) -> float:
        xm, a = float(self.x_min), float(self.alpha)
        if x < xm:
            return 0.0
        return 1.0 - (xm / x) ** a

    def _ppf(self, q: float) -> float:
        xm, a = float(self.x_min), float(self.alpha)
        return xm * safe_exp(-math.log(1.0 - q) / a)

    def mean(self) -> float:
        a = _or_zero(self.alpha)
        if a <= 1:
            return math.inf if _or_zero(self.x_min) > 0 else math.nan
        return a * _or_zero(self.x_min) / (a - 1.0)

    def plot_domain(self) -> Tuple[float, float]:
        xm, a = float(self.x_min), float(self.alpha)
        return (xm, xm * safe_exp(math.log(1.0 / PLOT_TAIL_PROBABILITY) / a))


@dataclass(frozen=True)
class WeibullDistribution(Distribution):
    """Weibull distribution with shape ``k`` and scale ``lam``."""

    family: ClassVar[DistributionFamily] = DistributionFamily.WEIBULL

    k: Optional[float] = None
    lam: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        return _positive(self.k) and _positive(self.lam)

    def _pdf(self, x: float) -> float:
        k, lam = float(self.k), float(self.lam)
        if x < 0:
            return 0.0
        if x == 0:
            return k / lam if k == 1 else 0.0
        ratio = x / lam
        return (k / lam) * ratio ** (k - 1.0) * safe_exp(-(ratio**k))

    def _cdf(self, x: float) -> float:
        if x <= 0:
            return 0.0
        return 1.0 - math.exp(-((x / float(self.lam)) ** float(self.k)))

    def _ppf(self, q: float) -> float:
        k, lam = float(self.k), float(self.lam)
        return lam * (-math.log(1.0 - q)) ** (1.0 / k)

    def mean(self) -> float:
        k = _or_zero(self.k)
        if k <= 0:
            return math.nan
        return _or_zero(self.lam) * gamma_function(1.0 + 1.0 / k)

    def plot_domain(self) -> Tuple[float, float]:
        k, lam = float(self.k), float(self.lam)
        return (0.0, lam * (-math.log(PLOT_TAIL_PROBABILITY)) ** (1.0 / k))


# ---------------------------------------------------------------------
# Event frequency families
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class PoissonDistribution(DiscreteDistribution):
    """Poisson count distribution with rate ``lam`` events per year."""

    family: ClassVar[DistributionFamily] = DistributionFamily.POISSON

    lam: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        return _positive(self.lam)

    def _pmf(self, k: int) -> float:
        lam = float(self.lam)
        return safe_exp(k * math.log(lam) - lam - log_factorial(k))

    def support_start(self) -> int:
        return 0

    def plot_support(self) -> range:
        lam = float(self.lam)
        upper = min(30.0, max(10.0, lam + 4.0 * math.sqrt(lam)))
        return range(0, int(math.floor(upper)) + 1)

    def mean(self) -> float:
        return _or_zero(self.lam)


@dataclass(frozen=True)
class ExponentialDistribution(Distribution):
    """Exponential distribution with rate ``lam``.

    Used as an annual frequency; its mean is ``1 / lam``.
    """

    family: ClassVar[DistributionFamily] = DistributionFamily.EXPONENTIAL

    lam: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        return _positive(self.lam)

    def _pdf(self, x: float) -> float:
        lam = float(self.lam)
        return lam * math.exp(-lam * x) if x >= 0 else 0.0

    def _cdf(self, x: float) -> float:
        return 1.0 - math.exp(-float(self.lam) * x) if x > 0 else 0.0

    def _ppf(self, q: float) -> float:
        return -math.log(1.0 - q) / float(self.lam)

    def mean(self) -> float:
        return _ratio(1.0, _or_zero(self.lam))

    def plot_domain(self) -> Tuple[float, float]:
        return (0.0, 5.0 / float(self.lam))


@dataclass(frozen=True)
class NegativeBinomialDistribution(DiscreteDistribution):
    """Number of trials needed to reach ``r`` successes with success probability ``p``."""

    family: ClassVar[DistributionFamily] = DistributionFamily.NEGATIVE_BINOMIAL

    r: Optional[float] = None
    p: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        return _positive(self.r) and _integer_like(self.r) and _is_number(self.p) and 0 < self.p < 1

    @property
    def successes(self) -> int:
        return int(round(float(self.r)))

    def _pmf(self, k: int) -> float:
        r, p = self.successes, float(self.p)
        return combination(k - 1, r - 1) * p**r * (1.0 - p) ** (k - r)

    def support_start(self) -> int:
        return self.successes

    def plot_support(self) -> range:
        r, p = self.successes, float(self.p)
        upper = max(30, math.ceil(r / p + 4.0 * math.sqrt(r * (1.0 - p)) / p))
        return _plot_range(r, upper)

    def mean(self) -> float:
        return _ratio(_or_zero(self.r), _or_zero(self.p))


@dataclass(frozen=True)
class BinomialDistribution(DiscreteDistribution):
    """Number of successes in ``n`` independent trials with probability ``p``."""

    family: ClassVar[DistributionFamily] = DistributionFamily.BINOMIAL

    n: Optional[float] = None
    p: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        if not (_positive(self.n) and _integer_like(self.n)):
            return False
        return _is_number(self.p) and 0 <= self.p <= 1

    @property
    def trials(self) -> int:
        return int(round(float(self.n)))

    def _pmf(self, k: int) -> float:
        n, p = self.trials, float(self.p)
        return combination(n, k) * p**k * (1.0 - p) ** (n - k)

    def support_start(self) -> int:
        return 0

    def support_end(self) -> Optional[int]:
        return self.trials

    def plot_support(self) -> range:
        return _plot_range(0, self.trials)

    def mean(self) -> float:
        return _or_zero(self.n) * _or_zero(self.p)


@dataclass(frozen=True)
class GeometricDistribution(DiscreteDistribution):
    """Number of trials up to and including the first success."""

    family: ClassVar[DistributionFamily] = DistributionFamily.GEOMETRIC

    p: Optional[float] = None

    max_plot_trials: ClassVar[int] = 50
    plot_coverage: ClassVar[float] = 0.999

    @property
    def is_valid(self) -> bool:
        return _is_number(self.p) and 0 < self.p < 1

    def _pmf(self, k: int) -> float:
        p = float(self.p)
        return (1.0 - p) ** (k - 1) * p

    def _cdf(self, x: float) -> float:
        k = math.floor(x)
        if k < 1:
            return 0.0
        return 1.0 - (1.0 - float(self.p)) ** k

    def support_start(self) -> int:
        return 1

    def plot_support(self) -> range:
        p = float(self.p)
        # First k with cumulative probability above the coverage level
        needed = math.floor(math.log(1.0 - self.plot_coverage) / math.log(1.0 - p)) + 1
        return range(1, max(1, min(self.max_plot_trials, needed)) + 1)

    def mean(self) -> float:
        return _ratio(1.0, _or_zero(self.p))


@dataclass(frozen=True)
class DiscreteUniformDistribution(DiscreteDistribution):
    """Equally likely integers ``min, min+1, ..., max``."""

    family: ClassVar[DistributionFamily] = DistributionFamily.DISCRETE_UNIFORM

    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        if not (_integer_like(self.min) and _integer_like(self.max)):
            return False
        return self.min < self.max

    @property
    def bounds(self) -> Tuple[int, int]:
        return int(round(float(self.min))), int(round(float(self.max)))

    def _pmf(self, k: int) -> float:
        low, high = self.bounds
        return 1.0 / (high - low + 1)

    def _cdf(self, x: float) -> float:
        low, high = self.bounds
        k = math.floor(x)
        if k < low:
            return 0.0
        if k >= high:
            return 1.0
        return (k - low + 1) / (high - low + 1)

    def support_start(self) -> int:
        return self.bounds[0]

    def support_end(self) -> Optional[int]:
        return self.bounds[1]

    def plot_support(self) -> range:
        low, high = self.bounds
        return _plot_range(low, high)

    def mean(self) -> float:
        return (_or_zero(self.min) + _or_zero(self.max)) / 2.0


DISTRIBUTION_REGISTRY: Dict[DistributionFamily, Type[Distribution]] = {
    DistributionFamily.TRIANGULAR: TriangularDistribution,
    DistributionFamily.PERT: PertDistribution,
    DistributionFamily.NORMAL: NormalDistribution,
    DistributionFamily.LOGNORMAL: LogNormalDistribution,
    DistributionFamily.UNIFORM: UniformDistribution,
    DistributionFamily.BETA: BetaDistribution,
    DistributionFamily.GAMMA: GammaDistribution,
    DistributionFamily.PARETO: ParetoDistribution,
    DistributionFamily.WEIBULL: WeibullDistribution,
    DistributionFamily.POISSON: PoissonDistribution,
    DistributionFamily.EXPONENTIAL: ExponentialDistribution,
    DistributionFamily.NEGATIVE_BINOMIAL: NegativeBinomialDistribution,
    DistributionFamily.BINOMIAL: BinomialDistribution,
    DistributionFamily.GEOMETRIC: GeometricDistribution,
    DistributionFamily.DISCRETE_UNIFORM: DiscreteUniformDistribution,
}

LOSS_FAMILIES = (
    DistributionFamily.TRIANGULAR,
    DistributionFamily.PERT,
    DistributionFamily.NORMAL,
    DistributionFamily.LOGNORMAL,
    DistributionFamily.UNIFORM,
    DistributionFamily.BETA,
    DistributionFamily.GAMMA,
    DistributionFamily.PARETO,
    DistributionFamily.WEIBULL,
)

FREQUENCY_FAMILIES = (
    DistributionFamily.TRIANGULAR,
    DistributionFamily.PERT,
    DistributionFamily.NORMAL,
    DistributionFamily.UNIFORM,
    DistributionFamily.POISSON,
    DistributionFamily.EXPONENTIAL,
    DistributionFamily.NEGATIVE_BINOMIAL,
    DistributionFamily.BINOMIAL,
    DistributionFamily.GEOMETRIC,
    DistributionFamily.DISCRETE_UNIFORM,
)


def build_distribution(family: Union[DistributionFamily, str], **params) -> Distribution:
    """Construct a distribution from its family tag and parameters.

    Args:
        family: Family enum member or its string identifier.
        **params: Keyword parameters of the family's dataclass.

    Returns:
        The distribution instance (possibly undefined if parameters are bad).

    Raises:
        ValueError: If ``family`` is not a known family.
    """
    parsed = DistributionFamily.parse(family)
    if parsed is None:
        raise ValueError(
            f"Unknown distribution family: {family!r}. "
            f"Must be one of {[f.value for f in DistributionFamily]}"
        )
    return DISTRIBUTION_REGISTRY[parsed](**params)


def evaluate_density(spec: Optional[Distribution], x: float) -> float:
    """Density (or mass) of ``spec`` at ``x``; ``nan`` for a missing or undefined spec."""
    if spec is None:
        return math.nan
    return spec.pdf(x)


def evaluate_cumulative(spec: Optional[Distribution], x: float) -> float:
    """Cumulative probability of ``spec`` at ``x``; ``nan`` for a missing or undefined spec."""
    if spec is None:
        return math.nan
    return spec.cdf(x)
