"""Risk Assessment Register analytics"""

from ._version import __version__

# Use lazy imports to avoid import issues during test discovery
# Direct imports are defined but modules are imported only when accessed

__all__ = [
    "__version__",
    "AnalyticsConfig",
    "CurveSample",
    "Distribution",
    "DistributionFamily",
    "EstimateResult",
    "ExpectedLossEstimator",
    "RiskForm",
    "SensitivityAnalyzer",
    "TornadoResult",
    "analyze_sensitivity",
    "build_distribution",
    "estimate_expected_loss",
    "estimate_value_at_risk",
    "evaluate_cumulative",
    "evaluate_density",
    "format_currency",
    "sample_curve",
    "summarize_assessment",
]


def __getattr__(name):
    """Lazy import modules to avoid circular dependencies during test discovery."""
    if name == "AnalyticsConfig":
        from .config import AnalyticsConfig

        return AnalyticsConfig
    elif name in [
        "Distribution",
        "DistributionFamily",
        "build_distribution",
        "evaluate_cumulative",
        "evaluate_density",
    ]:
        from . import distributions

        return getattr(distributions, name)
    elif name == "CurveSample" or name == "sample_curve":
        from .curve_sampler import CurveSample, sample_curve

        return locals()[name]
    elif name in [
        "EstimateResult",
        "ExpectedLossEstimator",
        "estimate_expected_loss",
        "estimate_value_at_risk",
        "summarize_assessment",
    ]:
        from . import expected_loss

        return getattr(expected_loss, name)
    elif name == "RiskForm":
        from .risk_form import RiskForm

        return RiskForm
    elif name in ["SensitivityAnalyzer", "TornadoResult", "analyze_sensitivity"]:
        from . import sensitivity

        return getattr(sensitivity, name)
    elif name == "format_currency":
        from .formatting import format_currency

        return format_currency
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
