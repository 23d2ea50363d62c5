"""
Tests for app/services/esg_calculator.py.

Covers:
  - Benchmark tiering for each direction, inclusive boundaries
  - Neutral score for unbenchmarked metrics
  - Category / overall aggregation, rating and performance tiers
  - Recommendations, risks and weight conservation
"""

import itertools
from datetime import datetime, timezone

import pytest

from app.schemas.esg import BenchmarkEntry, ESGMetrics
from app.services.esg_calculator import (
    CATEGORY_WEIGHTS,
    INDUSTRY_BENCHMARKS,
    SCORING_MODELS,
    calculate_category_score,
    calculate_esg_score,
    find_weakest_metric,
    generate_industry_comparison,
    get_category_performance,
    get_industry_benchmark,
    normalize_metric_score,
)
from app.services.trend_predictor import get_esg_rating

FIXED_TIME = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)

BENCH = BenchmarkEntry(median=10.0, top25=5.0, unit="t")
HIGH_BENCH = BenchmarkEntry(median=30.0, top25=45.0, unit="%")


class TestNormalizeMetricScore:

    def test_lower_better_top25_is_inclusive(self):
        assert normalize_metric_score(5.0, BENCH, "lower_better") == 90

    def test_lower_better_tiers(self):
        assert normalize_metric_score(8.0, BENCH, "lower_better") == 70
        assert normalize_metric_score(10.0, BENCH, "lower_better") == 70
        assert normalize_metric_score(15.0, BENCH, "lower_better") == 50
        assert normalize_metric_score(15.01, BENCH, "lower_better") == 30

    def test_higher_better_tiers(self):
        assert normalize_metric_score(45.0, HIGH_BENCH, "higher_better") == 90
        assert normalize_metric_score(30.0, HIGH_BENCH, "higher_better") == 70
        assert normalize_metric_score(21.5, HIGH_BENCH, "higher_better") == 50
        assert normalize_metric_score(20.9, HIGH_BENCH, "higher_better") == 30

    def test_balanced_tiers(self):
        assert normalize_metric_score(10.5, BENCH, "balanced") == 90
        assert normalize_metric_score(8.5, BENCH, "balanced") == 70
        assert normalize_metric_score(12.5, BENCH, "balanced") == 50
        assert normalize_metric_score(14.0, BENCH, "balanced") == 30

    def test_balanced_zero_median(self):
        zero = BenchmarkEntry(median=0.0, top25=0.0)
        assert normalize_metric_score(0.0, zero, "balanced") == 90
        assert normalize_metric_score(1.0, zero, "balanced") == 30

    def test_scores_only_take_tier_values(self):
        values = [-5, 0, 1, 4.99, 5, 7, 10, 12, 14.9, 15, 20, 100, 1e9]
        benches = [BENCH, HIGH_BENCH, BenchmarkEntry(median=1.0, top25=0.5)]
        directions = ["lower_better", "higher_better", "balanced"]
        for value, bench, direction in itertools.product(values, benches, directions):
            assert normalize_metric_score(value, bench, direction) in {30, 50, 70, 90}


class TestWeights:

    def test_category_weights_sum_to_one(self):
        assert sum(CATEGORY_WEIGHTS.values()) == pytest.approx(1.0, abs=1e-6)

    @pytest.mark.parametrize("category", ["environmental", "social", "governance"])
    def test_metric_weights_sum_to_one(self, category):
        total = sum(config.weight for config in SCORING_MODELS[category].values())
        assert total == pytest.approx(1.0, abs=1e-6)


class TestCategoryScore:

    def test_unbenchmarked_metrics_score_neutral(self):
        result = calculate_category_score("social", {}, {})
        assert result.score == 50
        assert all(m.normalized_score == 50 for m in result.metrics.values())
        assert result.performance == "Average"

    def test_missing_metric_reads_as_zero(self):
        result = calculate_category_score("environmental", {}, INDUSTRY_BENCHMARKS["mining"])
        # ghgEmissions 0 <= top25 under lower_better
        assert result.metrics["ghgEmissions"].value == 0
        assert result.metrics["ghgEmissions"].normalized_score == 90

    def test_contribution_is_score_times_weight(self, sample_metrics):
        result = calculate_category_score(
            "environmental", sample_metrics.environmental, INDUSTRY_BENCHMARKS["mining"]
        )
        ghg = result.metrics["ghgEmissions"]
        assert ghg.normalized_score == 70
        assert ghg.contribution == pytest.approx(70 * 0.25)
        assert result.score == 55

    def test_performance_tiers(self):
        assert get_category_performance(75) == "Leading"
        assert get_category_performance(60) == "Above Average"
        assert get_category_performance(40) == "Average"
        assert get_category_performance(39.9) == "Below Average"


class TestRatingAndComparison:

    @pytest.mark.parametrize(
        "score,rating",
        [(80, "AAA"), (79, "AA"), (70, "AA"), (60, "A"), (50, "BBB"), (40, "BB"), (30, "B"), (29, "CCC")],
    )
    def test_rating_thresholds(self, score, rating):
        assert get_esg_rating(score) == rating

    def test_industry_comparison_is_bounded(self):
        assert generate_industry_comparison(100, "mining").percentile == 95
        assert generate_industry_comparison(0, "mining").percentile == 5
        assert generate_industry_comparison(57, "mining").position == "Above Median"
        assert generate_industry_comparison(20, "mining").position == "Bottom Quartile"

    def test_unknown_industry_falls_back_to_default(self):
        assert get_industry_benchmark("aerospace") is INDUSTRY_BENCHMARKS["mining"]
        assert get_industry_benchmark("manufacturing") is INDUSTRY_BENCHMARKS["manufacturing"]


class TestCalculateESGScore:

    def test_sample_company(self, sample_metrics):
        result = calculate_esg_score(sample_metrics, industry="mining", calculated_at=FIXED_TIME)
        scores = result.category_scores

        assert scores.environmental.score == 55
        assert scores.social.score == 55
        assert scores.governance.score == 60
        assert scores.governance.metrics["boardDiversity"].normalized_score == 90
        assert result.overall_score == 57
        assert result.rating == "BBB"
        assert result.risk_assessment == []

        categories = [rec.category for rec in result.recommendations]
        assert categories == ["Environmental", "Social"]
        # First metric seen with the lowest normalized score
        assert "energyIntensity" in result.recommendations[0].action

    def test_overall_is_weighted_category_sum(self, sample_metrics):
        result = calculate_esg_score(sample_metrics, calculated_at=FIXED_TIME)
        scores = result.category_scores
        expected = (
            scores.environmental.score * 0.4
            + scores.social.score * 0.3
            + scores.governance.score * 0.3
        )
        assert abs(result.overall_score - expected) <= 0.5

    def test_deterministic(self, sample_metrics):
        first = calculate_esg_score(sample_metrics, calculated_at=FIXED_TIME)
        second = calculate_esg_score(sample_metrics, calculated_at=FIXED_TIME)
        assert first.model_dump() == second.model_dump()

    def test_weak_company_gets_risks(self):
        metrics = ESGMetrics(
            environmental={
                "ghgEmissions": 50,
                "energyIntensity": 50,
                "waterUsage": 50,
                "wasteGeneration": 50,
                "renewableEnergy": 0,
                "biodiversityImpact": 50,
            },
            social={"workplaceSafety": 50},
            governance={"boardDiversity": 1},
        )
        benchmark = {
            name: BenchmarkEntry(median=1.0, top25=0.5)
            for name in ["ghgEmissions", "energyIntensity", "waterUsage", "wasteGeneration", "biodiversityImpact"]
        }
        benchmark["renewableEnergy"] = BenchmarkEntry(median=50, top25=80)
        benchmark["workplaceSafety"] = BenchmarkEntry(median=1.0, top25=0.5)
        benchmark["boardDiversity"] = BenchmarkEntry(median=30, top25=45)

        result = calculate_esg_score(metrics, benchmark=benchmark, calculated_at=FIXED_TIME)

        assert result.category_scores.environmental.score == 30
        risk_types = [risk.type for risk in result.risk_assessment]
        assert "Environmental" in risk_types
        assert all(rec.priority in {"High", "Medium"} for rec in result.recommendations)

    def test_find_weakest_metric_tie_breaks_on_first(self):
        category = calculate_category_score("social", {}, {})
        assert find_weakest_metric(category.metrics) == "workplaceSafety"

    def test_wire_format(self, sample_metrics):
        dumped = calculate_esg_score(sample_metrics, calculated_at=FIXED_TIME).model_dump(by_alias=True)
        assert "overallScore" in dumped
        assert "riskAssessment" in dumped
        env = dumped["categoryScores"]["environmental"]
        assert env["metrics"]["ghgEmissions"]["normalizedScore"] == 70
