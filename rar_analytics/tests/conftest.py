"""Pytest configuration and shared fixtures."""

import pytest

from rar_analytics.config import AnalyticsConfig


@pytest.fixture
def default_config():
    """Return a fresh default analytics configuration."""
    return AnalyticsConfig()


@pytest.fixture
def triangular_poisson_snapshot():
    """Advanced quantitative form with a triangular loss and Poisson frequency."""
    return {
        "riskId": "R-001",
        "riskTitle": "Ransomware on file servers",
        "assessmentType": "advancedQuantitative",
        "currentRiskView": "inherent",
        "sleCurrency": "dollar",
        "confidenceLevel": "95",
        "lossDistribution": "triangular",
        "minLoss": "1000",
        "mostLikelyLoss": "5000",
        "maxLoss": "20000",
        "frequencyDistribution": "poisson",
        "frequencyLambda": "2",
    }


@pytest.fixture
def quantitative_snapshot():
    """Simple quantitative form using SLE and ARO."""
    return {
        "assessmentType": "quantitative",
        "sle": "10000",
        "aro": "0.5",
    }
