"""Master configuration class composing all sub-configurations.

Contains :class:`AnalyticsConfig`, which aggregates the curve, distribution,
estimator, sensitivity and logging settings into one object with YAML
loading and saving, validation and logging setup.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import warnings

from pydantic import BaseModel, Field
import yaml

from .._warnings import ConfigurationWarning
from .analysis import CurveConfig, DistributionDefaults, EstimatorConfig, SensitivityConfig
from .exceptions import ConfigurationError
from .reporting import LoggingConfig

_MIN_SMOOTH_CURVE_POINTS = 20


class AnalyticsConfig(BaseModel):
    """Complete configuration for the risk-analytics engine.

    All sub-configs have defaults matching the risk register's behaviour,
    so ``AnalyticsConfig()`` with no arguments is a valid configuration.

    Examples:
        Minimal usage::

            config = AnalyticsConfig()

        Finer curves and a different currency::

            config = AnalyticsConfig(
                curve=CurveConfig(n_points=400),
                estimator=EstimatorConfig(currency="euro"),
            )

        Loading from file::

            config = AnalyticsConfig.from_yaml(Path("analytics.yaml"))
    """

    curve: CurveConfig = Field(default_factory=CurveConfig)
    distributions: DistributionDefaults = Field(default_factory=DistributionDefaults)
    estimator: EstimatorConfig = Field(default_factory=EstimatorConfig)
    sensitivity: SensitivityConfig = Field(default_factory=SensitivityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # ------------------------------------------------------------------ #
    #  Loading
    # ------------------------------------------------------------------ #

    @classmethod
    def from_yaml(cls, path: Path) -> "AnalyticsConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            AnalyticsConfig object with validated parameters.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValidationError: If configuration is invalid.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Remove private anchors if present
        data = {k: v for k, v in data.items() if not k.startswith("_")}

        return cls(**data)

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], base_config: Optional["AnalyticsConfig"] = None
    ) -> "AnalyticsConfig":
        """Create config from dictionary, optionally overriding a base config.

        Args:
            data: Dictionary with configuration parameters, nested by section.
            base_config: Optional base configuration to override.

        Returns:
            AnalyticsConfig object with validated parameters.
        """
        if base_config is None:
            return cls(**data)

        config_dict = base_config.model_dump()
        for section, values in data.items():
            if isinstance(values, dict) and isinstance(config_dict.get(section), dict):
                config_dict[section].update(values)
            else:
                config_dict[section] = values
        return cls(**config_dict)

    # ------------------------------------------------------------------ #
    #  Validation
    # ------------------------------------------------------------------ #

    def validate_settings(self) -> List[str]:
        """Check the configuration for unusable or unusual settings.

        Unusual but legal settings issue a :class:`ConfigurationWarning`.

        Returns:
            List of warning messages that were issued.

        Raises:
            ConfigurationError: If a setting would make results meaningless.
        """
        from ..formatting import CURRENCY_SYMBOLS

        issues = []
        if self.estimator.currency not in CURRENCY_SYMBOLS:
            issues.append(
                f"Unknown currency '{self.estimator.currency}'; "
                f"expected one of {sorted(CURRENCY_SYMBOLS)}"
            )
        if issues:
            raise ConfigurationError(issues)

        notes = []
        if self.curve.n_points < _MIN_SMOOTH_CURVE_POINTS:
            notes.append(
                f"curve.n_points={self.curve.n_points} gives visibly jagged density charts"
            )
        if self.distributions.pert_normalizer == "stirling":
            notes.append(
                "Stirling PERT normaliser is a few percent off; densities will not integrate to 1"
            )
        for note in notes:
            warnings.warn(note, ConfigurationWarning, stacklevel=2)
        return notes

    # ------------------------------------------------------------------ #
    #  Serialization
    # ------------------------------------------------------------------ #

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file.

        Args:
            path: Path where to save the configuration.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)

    # ------------------------------------------------------------------ #
    #  Logging
    # ------------------------------------------------------------------ #

    def setup_logging(self) -> None:
        """Configure logging based on settings.

        Sets up logging handlers for console and/or file output based
        on the logging configuration.
        """
        if not self.logging.enabled:
            return

        import logging
        import sys

        # Create logger
        logger = logging.getLogger("rar_analytics")
        logger.setLevel(getattr(logging, self.logging.level))
        logger.handlers.clear()

        # Create formatter
        formatter = logging.Formatter(self.logging.format)

        # Console handler
        if self.logging.console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        # File handler
        if self.logging.log_file:
            log_path = Path(self.logging.log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)


_default_config: Optional[AnalyticsConfig] = None


def get_default_config() -> AnalyticsConfig:
    """Return the process-wide default configuration, creating it on first use."""
    global _default_config  # pylint: disable=global-statement
    if _default_config is None:
        _default_config = AnalyticsConfig()
    return _default_config
