"""Configuration management using Pydantic v2 models.

This package provides the configuration classes for the rar_analytics
engine. It uses Pydantic models for validation, type safety, and
serialization to and from YAML.

Sub-modules:
    constants: Module-level numeric defaults (curve resolution, PERT gamma, ...).
    core: Master AnalyticsConfig class that composes all sub-configs.
    analysis: Curve, distribution, estimator and sensitivity settings.
    reporting: Logging configuration.
    exceptions: ConfigurationError raised by AnalyticsConfig.validate_settings.

Examples:
    Quick start with defaults::

        from rar_analytics.config import AnalyticsConfig

        config = AnalyticsConfig()

    Loading from file::

        config = AnalyticsConfig.from_yaml(Path("analytics.yaml"))
        config.setup_logging()

Note:
    Confidence levels are expressed in percent (95 = 95%).
"""

from .analysis import CurveConfig, DistributionDefaults, EstimatorConfig, SensitivityConfig
from .constants import (
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_CURRENCY,
    DEFAULT_CURVE_POINTS,
    DEFAULT_PERT_GAMMA,
    SUPPORTED_CONFIDENCE_LEVELS,
)
from .core import AnalyticsConfig, get_default_config
from .exceptions import ConfigurationError
from .reporting import LoggingConfig

__all__ = [
    "AnalyticsConfig",
    "ConfigurationError",
    "CurveConfig",
    "DEFAULT_CONFIDENCE_LEVEL",
    "DEFAULT_CURRENCY",
    "DEFAULT_CURVE_POINTS",
    "DEFAULT_PERT_GAMMA",
    "DistributionDefaults",
    "EstimatorConfig",
    "LoggingConfig",
    "SUPPORTED_CONFIDENCE_LEVELS",
    "SensitivityConfig",
    "get_default_config",
]
