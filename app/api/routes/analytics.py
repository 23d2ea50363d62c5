from typing import Dict

from fastapi import APIRouter

from app.schemas.analytics import (
    BenchmarkingInput,
    MetricBenchmark,
    RiskInput,
    RiskScore,
    ScenarioInput,
    ScenarioResult,
)
from app.services.analytics_engine import (
    benchmark_metrics,
    calculate_risk_score,
    perform_scenario_analysis,
)

router = APIRouter()


@router.post("/scenarios", response_model=Dict[str, ScenarioResult])
def scenario_analysis(payload: ScenarioInput):
    """
    TCFD-style scenario analysis of current emissions.
    """
    return perform_scenario_analysis(payload.emissions, payload.scenarios)


@router.post("/benchmarking", response_model=Dict[str, MetricBenchmark])
def peer_benchmarking(payload: BenchmarkingInput):
    """
    Company metrics against sector median and top-quartile values.
    """
    return benchmark_metrics(payload.metrics, industry=payload.industry, benchmark=payload.benchmark)


@router.post("/risk-score", response_model=RiskScore)
def risk_score(payload: RiskInput):
    return calculate_risk_score(payload)
