"""Tests for the Pydantic configuration models."""

import logging
from pathlib import Path
import warnings

from pydantic import ValidationError
import pytest
import yaml

from rar_analytics._warnings import ConfigurationWarning
from rar_analytics.config import (
    AnalyticsConfig,
    ConfigurationError,
    CurveConfig,
    DistributionDefaults,
    EstimatorConfig,
    LoggingConfig,
    SensitivityConfig,
    get_default_config,
)


class TestDefaults:
    """Test default values."""

    def test_default_config(self, default_config):
        """Defaults reproduce the register's charts and summaries."""
        assert default_config.curve.n_points == 100
        assert default_config.curve.dedup_decimals == 3
        assert default_config.curve.lognormal_z == pytest.approx(2.326)
        assert default_config.distributions.pert_gamma == 4.0
        assert default_config.distributions.pert_normalizer == "exact"
        assert default_config.estimator.confidence_levels == [90, 95, 99, 99.5]
        assert default_config.estimator.default_confidence_level == 95.0
        assert default_config.estimator.currency == "dollar"
        assert default_config.sensitivity.max_results == 6
        assert default_config.logging.level == "INFO"

    def test_default_config_is_shared(self):
        """get_default_config returns one cached instance."""
        assert get_default_config() is get_default_config()


class TestValidation:
    """Test field and model validators."""

    @pytest.mark.parametrize("n_points", [0, 1, 10_001])
    def test_curve_points_bounds(self, n_points):
        """Curve resolution must be at least two intervals."""
        with pytest.raises(ValidationError):
            CurveConfig(n_points=n_points)

    def test_pert_gamma_minimum(self):
        """PERT gamma below 1 would give shapes below 1."""
        with pytest.raises(ValidationError):
            DistributionDefaults(pert_gamma=0.5)

    def test_pert_normalizer_choices(self):
        """Only the exact and Stirling normalisers exist."""
        with pytest.raises(ValidationError):
            DistributionDefaults(pert_normalizer="fast")

    def test_confidence_levels_sorted(self):
        """Levels are stored in ascending order."""
        config = EstimatorConfig(confidence_levels=[99, 90, 95], default_confidence_level=95)
        assert config.confidence_levels == [90, 95, 99]

    @pytest.mark.parametrize("levels", [[], [0, 95], [95, 100], [95, 150]])
    def test_invalid_confidence_levels(self, levels):
        """Levels must be percentages strictly inside (0, 100)."""
        with pytest.raises(ValidationError):
            EstimatorConfig(confidence_levels=levels)

    def test_default_level_must_be_offered(self):
        """The default level has to be one of the offered levels."""
        with pytest.raises(ValidationError, match="not one of"):
            EstimatorConfig(default_confidence_level=97.5)

    def test_max_results_bounds(self):
        """The tornado keeps between 1 and 50 bars."""
        with pytest.raises(ValidationError):
            SensitivityConfig(max_results=0)
        with pytest.raises(ValidationError):
            SensitivityConfig(max_results=51)

    def test_log_level_choices(self):
        """Only the standard level names are accepted."""
        with pytest.raises(ValidationError):
            LoggingConfig(level="VERBOSE")


class TestValidateSettings:
    """Test the cross-field settings check."""

    def test_clean_config(self, default_config):
        """Defaults produce no notes and no warnings."""
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert default_config.validate_settings() == []

    def test_unknown_currency(self):
        """An unknown currency key is a critical issue."""
        config = AnalyticsConfig(estimator=EstimatorConfig(currency="doubloon"))
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_settings()
        assert len(exc_info.value.issues) == 1
        assert "doubloon" in str(exc_info.value)

    def test_stirling_warns(self):
        """The Stirling normaliser is legal but flagged."""
        config = AnalyticsConfig(distributions=DistributionDefaults(pert_normalizer="stirling"))
        with pytest.warns(ConfigurationWarning, match="Stirling"):
            notes = config.validate_settings()
        assert len(notes) == 1

    def test_coarse_curve_warns(self):
        """Very coarse curves are flagged."""
        config = AnalyticsConfig(curve=CurveConfig(n_points=10))
        with pytest.warns(ConfigurationWarning, match="n_points=10"):
            config.validate_settings()


class TestSerialization:
    """Test YAML and dictionary round trips."""

    def test_yaml_round_trip(self, tmp_path):
        """Saved configuration loads back unchanged."""
        config = AnalyticsConfig(
            curve=CurveConfig(n_points=400),
            estimator=EstimatorConfig(currency="euro"),
        )
        path = tmp_path / "nested" / "analytics.yaml"
        config.to_yaml(path)
        assert path.exists()
        assert AnalyticsConfig.from_yaml(path) == config

    def test_from_yaml_strips_private_keys(self, tmp_path):
        """Top-level keys starting with an underscore are anchors, not settings."""
        path = tmp_path / "analytics.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "_shared": {"note": "anchor"},
                    "sensitivity": {"max_results": 3},
                }
            ),
            encoding="utf-8",
        )
        config = AnalyticsConfig.from_yaml(path)
        assert config.sensitivity.max_results == 3
        assert config.curve.n_points == 100

    def test_from_yaml_empty_file(self, tmp_path):
        """An empty file gives the defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert AnalyticsConfig.from_yaml(path) == AnalyticsConfig()

    def test_from_yaml_missing(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            AnalyticsConfig.from_yaml(tmp_path / "missing.yaml")

    def test_from_yaml_invalid(self, tmp_path):
        """Invalid values are rejected on load."""
        path = tmp_path / "bad.yaml"
        path.write_text("curve:\n  n_points: 1\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            AnalyticsConfig.from_yaml(path)

    def test_from_dict(self):
        """A dictionary builds a config directly."""
        config = AnalyticsConfig.from_dict({"estimator": {"currency": "pound"}})
        assert config.estimator.currency == "pound"

    def test_from_dict_overrides_base(self):
        """Section values override a base config and keep the rest."""
        base = AnalyticsConfig(curve=CurveConfig(n_points=200, dedup_decimals=4))
        config = AnalyticsConfig.from_dict({"curve": {"n_points": 50}}, base_config=base)
        assert config.curve.n_points == 50
        assert config.curve.dedup_decimals == 4
        assert base.curve.n_points == 200


class TestSetupLogging:
    """Test logging configuration."""

    @pytest.fixture(autouse=True)
    def restore_logger(self):
        """Leave the package logger as it was found."""
        logger = logging.getLogger("rar_analytics")
        handlers, level = list(logger.handlers), logger.level
        yield
        for handler in logger.handlers:
            handler.close()
        logger.handlers[:] = handlers
        logger.setLevel(level)

    def test_console_handler(self):
        """Console output installs one stream handler."""
        AnalyticsConfig(logging=LoggingConfig(level="DEBUG")).setup_logging()
        logger = logging.getLogger("rar_analytics")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_file_handler(self, tmp_path):
        """A log file adds a file handler and creates its directory."""
        log_file = tmp_path / "logs" / "rar.log"
        config = AnalyticsConfig(
            logging=LoggingConfig(console_output=False, log_file=str(log_file))
        )
        config.setup_logging()
        logger = logging.getLogger("rar_analytics")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.FileHandler)
        assert Path(log_file).parent.is_dir()

    def test_repeated_setup_does_not_duplicate(self):
        """Calling setup twice keeps a single handler."""
        config = AnalyticsConfig()
        config.setup_logging()
        config.setup_logging()
        assert len(logging.getLogger("rar_analytics").handlers) == 1

    def test_disabled(self):
        """Disabled logging leaves handlers untouched."""
        logger = logging.getLogger("rar_analytics")
        before = list(logger.handlers)
        AnalyticsConfig(logging=LoggingConfig(enabled=False)).setup_logging()
        assert logger.handlers == before
