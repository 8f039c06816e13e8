"""Module-level constants for the rar_analytics engine.

Centralizes the numeric defaults shared between the configuration models
and the modules that fall back to them when no configuration is passed.
"""

DEFAULT_CURVE_POINTS: int = 100
"""Number of intervals across a continuous plotting domain (101 samples)."""

DEFAULT_DEDUP_DECIMALS: int = 3
"""Decimal places used to detect duplicate x values in continuous curves."""

DEFAULT_PERT_GAMMA: float = 4.0
"""Classic PERT shape weight of the mode."""

SUPPORTED_CONFIDENCE_LEVELS: tuple = (90.0, 95.0, 99.0, 99.5)
"""Confidence levels, in percent, offered for value-at-risk estimates."""

DEFAULT_CONFIDENCE_LEVEL: float = 95.0
"""Confidence level used when a form does not specify one."""

DEFAULT_CURRENCY: str = "dollar"

DEFAULT_MAX_SENSITIVITY_RESULTS: int = 6
"""Number of parameters kept in a tornado chart."""
