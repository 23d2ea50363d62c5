"""
Shared test fixtures.
"""

import pytest

from app.config import get_settings
from app.schemas.esg import ESGMetrics
from app.schemas.sbti import TargetInput

# Representative mining company, one reporting period.
_SAMPLE_METRICS = {
    "environmental": {
        "ghgEmissions": 2.2,  # tCO2e/M$
        "energyIntensity": 45,  # GJ/M$
        "waterUsage": 1200,  # m3/M$
        "wasteGeneration": 15,  # tonnes/M$
        "renewableEnergy": 28,  # %
        "biodiversityImpact": 0.3,
    },
    "social": {
        "workplaceSafety": 2.1,  # LTIFR
        "employeeDiversity": 35,
        "communityEngagement": 75,
        "humanRights": 85,
        "laborPractices": 80,
        "productSafety": 95,
    },
    "governance": {
        "boardDiversity": 42,  # %
        "executiveCompensation": 8.5,
        "businessEthics": 88,
        "riskManagement": 78,
        "transparency": 82,
        "cybersecurity": 85,
    },
}


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Keep tests independent of any local .env / OpenAI key."""
    monkeypatch.setenv("OPENAI_API_KEY", "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_metrics() -> ESGMetrics:
    return ESGMetrics(**_SAMPLE_METRICS)


@pytest.fixture
def sample_metrics_payload() -> dict:
    return {key: dict(values) for key, values in _SAMPLE_METRICS.items()}


@pytest.fixture
def target_params() -> TargetInput:
    return TargetInput(
        target_type="absolute",
        scope="scope1+2",
        pathway="1.5C",
        baseline_year=2020,
        baseline_emissions=100000,
        target_year=2030,
    )
