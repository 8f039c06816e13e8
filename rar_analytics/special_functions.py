"""Special-function approximations used by the distribution engine.

All functions here are scalar, pure and deterministic. They never raise for
out-of-domain input; callers are expected to guard their parameters and the
functions return ``nan``/``inf`` sentinels where the mathematics does.

The approximations are the classic ones:

- Lanczos (g=7, 9 coefficients) for the gamma and log-gamma functions
- Power series for the lower incomplete gamma function
- Modified Lentz continued fraction for the regularized incomplete beta
- Abramowitz & Stegun 7.1.26 for the error function

Example:
    Regularized incomplete beta against a known value::

        from rar_analytics.special_functions import regularized_incomplete_beta

        regularized_incomplete_beta(0.5, 2.0, 2.0)  # 0.5 by symmetry
"""

import logging
import math

logger = logging.getLogger(__name__)

LANCZOS_G = 7
LANCZOS_COEFFICIENTS = (
    0.99999999999980993,
    676.5203681218851,
    -1259.1392167224028,
    771.32342877765313,
    -176.61502916214059,
    12.507343278686905,
    -0.13857109526572012,
    9.9843695780195716e-6,
    1.5056327351493116e-7,
)

SERIES_TOLERANCE = 1e-10
SERIES_MAX_TERMS = 200
CONTINUED_FRACTION_TOLERANCE = 1e-10
CONTINUED_FRACTION_MAX_ITERATIONS = 100
_FPMIN = 1e-300

# Largest argument for which math.exp does not overflow
_MAX_EXP_ARG = 709.78

_ERF_COEFFICIENTS = (0.254829592, -0.284496736, 1.421413741, -1.453152027, 1.061405429)
_ERF_P = 0.3275911


def safe_exp(value: float) -> float:
    """Exponentiate without raising ``OverflowError``.

    Args:
        value: Exponent.

    Returns:
        ``exp(value)``, ``inf`` when the result would overflow.
    """
    if math.isnan(value):
        return math.nan
    if value > _MAX_EXP_ARG:
        return math.inf
    return math.exp(value)


def _lanczos_sum(z: float) -> float:
    x = LANCZOS_COEFFICIENTS[0]
    for i in range(1, LANCZOS_G + 2):
        x += LANCZOS_COEFFICIENTS[i] / (z + i)
    return x


def log_gamma(z: float) -> float:
    """Natural logarithm of ``|Gamma(z)|``.

    Uses the reflection formula for ``z < 0.5`` and the Lanczos
    approximation otherwise (relative error around 1e-10 for ``z > 0.5``).

    Args:
        z: Argument.

    Returns:
        ``ln|Gamma(z)|``; ``inf`` at the poles (zero and negative integers).
    """
    if math.isnan(z):
        return math.nan
    if z < 0.5:
        sin_term = abs(math.sin(math.pi * z))
        if sin_term == 0.0 or z == math.floor(z):
            return math.inf
        return math.log(math.pi) - math.log(sin_term) - log_gamma(1.0 - z)

    z -= 1.0
    x = _lanczos_sum(z)
    t = z + LANCZOS_G + 0.5
    return 0.5 * math.log(2.0 * math.pi) + (z + 0.5) * math.log(t) - t + math.log(x)


def gamma_function(z: float) -> float:
    """Gamma function evaluated directly from the Lanczos series.

    Kept separate from :func:`log_gamma` for callers needing the signed,
    non-log value.

    Args:
        z: Argument.

    Returns:
        ``Gamma(z)``; ``nan`` at the poles and ``inf`` on overflow.
    """
    if math.isnan(z):
        return math.nan
    if z < 0.5:
        sin_term = math.sin(math.pi * z)
        if sin_term == 0.0 or z == math.floor(z):
            return math.nan
        reflected = gamma_function(1.0 - z)
        if math.isinf(reflected):
            return 0.0
        return math.pi / (sin_term * reflected)

    if z > 171.6:
        return math.inf
    z -= 1.0
    x = _lanczos_sum(z)
    t = z + LANCZOS_G + 0.5
    return math.sqrt(2.0 * math.pi) * safe_exp((z + 0.5) * math.log(t) - t) * x


def log_beta(a: float, b: float) -> float:
    """Logarithm of the complete beta function ``B(a, b)``."""
    return log_gamma(a) + log_gamma(b) - log_gamma(a + b)


def stirling_beta(a: float, b: float) -> float:
    """Stirling-style approximation of ``B(a, b)``.

    ``B(a,b) ~ sqrt(2*pi) * a^(a-0.5) * b^(b-0.5) / (a+b)^(a+b-0.5)``, with
    the exact values substituted when either shape equals one. Coarser than
    :func:`log_beta` (a few percent for shapes near one) and only used when
    the PERT normaliser is configured as ``"stirling"``.

    Args:
        a: First shape parameter (> 0).
        b: Second shape parameter (> 0).

    Returns:
        Approximate ``B(a, b)``.
    """
    if a <= 1 and b <= 1:
        return 1.0
    if a == 1:
        return 1.0 / b
    if b == 1:
        return 1.0 / a
    log_value = (
        0.5 * math.log(2.0 * math.pi)
        + (a - 0.5) * math.log(a)
        + (b - 0.5) * math.log(b)
        - (a + b - 0.5) * math.log(a + b)
    )
    return safe_exp(log_value)


def _lower_gamma_series(a: float, x: float) -> float:
    """Return the series sum ``sum_n x^n / (a (a+1) ... (a+n))``."""
    total = 1.0 / a
    term = total
    for n in range(1, SERIES_MAX_TERMS):
        term *= x / (a + n)
        total += term
        if abs(term) < SERIES_TOLERANCE:
            return total
    logger.debug("Incomplete gamma series hit %d terms (a=%g, x=%g)", SERIES_MAX_TERMS, a, x)
    return total


def lower_incomplete_gamma(a: float, x: float) -> float:
    """Unnormalised lower incomplete gamma function ``gamma(a, x)``.

    Power-series accumulation, stopped once a term falls below 1e-10 or
    after 200 terms.

    Args:
        a: Shape (> 0).
        x: Upper integration limit.

    Returns:
        ``gamma(a, x)``; ``0`` for ``x <= 0`` or ``a <= 0``.
    """
    if x <= 0 or a <= 0:
        return 0.0
    total = _lower_gamma_series(a, x)
    return safe_exp(-x + a * math.log(x) + math.log(total))


def _upper_gamma_continued_fraction(a: float, x: float) -> float:
    """Regularized upper incomplete gamma ``Q(a, x)`` by Lentz's method."""
    b = x + 1.0 - a
    c = 1.0 / _FPMIN
    d = 1.0 / b if b != 0 else 1.0 / _FPMIN
    h = d
    for i in range(1, SERIES_MAX_TERMS + 1):
        an = -i * (i - a)
        b += 2.0
        d = an * d + b
        if abs(d) < _FPMIN:
            d = _FPMIN
        c = b + an / c
        if abs(c) < _FPMIN:
            c = _FPMIN
        d = 1.0 / d
        delta = d * c
        h *= delta
        if abs(delta - 1.0) < SERIES_TOLERANCE:
            break
    return safe_exp(-x + a * math.log(x) - log_gamma(a)) * h


def regularized_lower_gamma(a: float, x: float) -> float:
    """Regularized lower incomplete gamma ``P(a, x) = gamma(a, x) / Gamma(a)``.

    Evaluated in log space so large shapes do not overflow. Below ``x = a+1``
    the series of :func:`lower_incomplete_gamma` is used; above it the
    series needs more than 200 terms, so the complement is taken from the
    upper-gamma continued fraction instead.

    Args:
        a: Shape (> 0).
        x: Upper integration limit.

    Returns:
        ``P(a, x)`` in ``[0, 1]``; ``0`` for ``x <= 0`` or ``a <= 0``.
    """
    if x <= 0 or a <= 0:
        return 0.0
    if math.isinf(x):
        return 1.0
    if x < a + 1.0:
        total = _lower_gamma_series(a, x)
        value = safe_exp(-x + a * math.log(x) - log_gamma(a) + math.log(total))
    else:
        value = 1.0 - _upper_gamma_continued_fraction(a, x)
    return min(1.0, max(0.0, value))


def _beta_continued_fraction(a: float, b: float, x: float) -> float:
    """Continued fraction for the incomplete beta (modified Lentz)."""
    qab = a + b
    qap = a + 1.0
    qam = a - 1.0
    c = 1.0
    d = 1.0 - qab * x / qap
    if abs(d) < _FPMIN:
        d = _FPMIN
    d = 1.0 / d
    h = d

    for m in range(1, CONTINUED_FRACTION_MAX_ITERATIONS + 1):
        m2 = 2 * m
        aa = m * (b - m) * x / ((qam + m2) * (a + m2))
        d = 1.0 + aa * d
        if abs(d) < _FPMIN:
            d = _FPMIN
        c = 1.0 + aa / c
        if abs(c) < _FPMIN:
            c = _FPMIN
        d = 1.0 / d
        h *= d * c

        aa = -(a + m) * (qab + m) * x / ((a + m2) * (qap + m2))
        d = 1.0 + aa * d
        if abs(d) < _FPMIN:
            d = _FPMIN
        c = 1.0 + aa / c
        if abs(c) < _FPMIN:
            c = _FPMIN
        d = 1.0 / d
        delta = d * c
        h *= delta
        if abs(delta - 1.0) < CONTINUED_FRACTION_TOLERANCE:
            return h

    logger.debug(
        "Incomplete beta continued fraction hit %d iterations (a=%g, b=%g, x=%g)",
        CONTINUED_FRACTION_MAX_ITERATIONS,
        a,
        b,
        x,
    )
    return h


def regularized_incomplete_beta(x: float, a: float, b: float) -> float:
    """Regularized incomplete beta function ``I_x(a, b)``.

    The continued fraction converges quickly for ``x < (a+1)/(a+b+2)``;
    above that point the symmetry ``I_x(a,b) = 1 - I_{1-x}(b,a)`` is used.

    Args:
        x: Evaluation point.
        a: First shape parameter (> 0).
        b: Second shape parameter (> 0).

    Returns:
        ``I_x(a, b)`` clamped to ``[0, 1]``; ``nan`` for non-positive shapes.
    """
    if math.isnan(x) or a <= 0 or b <= 0:
        return math.nan
    if x <= 0:
        return 0.0
    if x >= 1:
        return 1.0

    front = safe_exp(a * math.log(x) + b * math.log(1.0 - x) - log_beta(a, b))
    if x < (a + 1.0) / (a + b + 2.0):
        value = front * _beta_continued_fraction(a, b, x) / a
    else:
        value = 1.0 - front * _beta_continued_fraction(b, a, 1.0 - x) / b
    return min(1.0, max(0.0, value))


def erf(x: float) -> float:
    """Error function, Abramowitz & Stegun 7.1.26 (absolute error < 1.5e-7)."""
    if math.isnan(x):
        return math.nan
    sign = 1.0 if x >= 0 else -1.0
    x = abs(x)
    a1, a2, a3, a4, a5 = _ERF_COEFFICIENTS
    t = 1.0 / (1.0 + _ERF_P * x)
    y = 1.0 - ((((a5 * t + a4) * t + a3) * t + a2) * t + a1) * t * math.exp(-x * x)
    return sign * y


def standard_normal_cdf(z: float) -> float:
    """Standard normal CDF via :func:`erf`."""
    return 0.5 * (1.0 + erf(z / math.sqrt(2.0)))


def combination(n: float, k: int) -> float:
    """Binomial coefficient ``C(n, k)`` without factorial overflow.

    Accumulates ``prod_{i<k} (n - i) / (i + 1)``.

    Args:
        n: Population size.
        k: Number chosen.

    Returns:
        ``C(n, k)``; ``0`` when ``k < 0`` or ``k > n``.
    """
    if k < 0 or k > n:
        return 0.0
    if k == 0 or k == n:
        return 1.0
    result = 1.0
    for i in range(int(k)):
        result = result * (n - i) / (i + 1)
    return result


def log_factorial(n: float) -> float:
    """``ln(n!)`` through :func:`log_gamma`."""
    if n < 0:
        return math.nan
    if n < 2:
        return 0.0
    return log_gamma(n + 1.0)
