"""
Integration tests for the HTTP layer.

Uses FastAPI's TestClient against app.main; payloads and responses use
camelCase keys.
"""

import pytest
from fastapi.testclient import TestClient

from app.main import app

TARGET_PAYLOAD = {
    "targetType": "absolute",
    "scope": "scope1+2",
    "pathway": "1.5C",
    "baselineYear": 2020,
    "baselineEmissions": 100000,
    "targetYear": 2030,
}


@pytest.fixture
def client():
    return TestClient(app)


class TestRoot:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["version"] == "1.0.0"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}


class TestESGEndpoints:

    def test_calculate(self, client, sample_metrics_payload):
        response = client.post(
            "/api/esg/calculate",
            json={"companyId": "acme-mining", "industry": "mining", "metrics": sample_metrics_payload},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["overallScore"] == 57
        assert body["rating"] == "BBB"
        assert body["categoryScores"]["governance"]["score"] == 60
        assert body["industryComparison"]["position"] == "Above Median"
        assert "calculatedAt" in body

    def test_calculate_with_custom_benchmark(self, client, sample_metrics_payload):
        response = client.post(
            "/api/esg/calculate",
            json={
                "metrics": sample_metrics_payload,
                "benchmark": {"energyIntensity": {"median": 60, "top25": 40}},
            },
        )

        env = response.json()["categoryScores"]["environmental"]
        assert env["metrics"]["energyIntensity"]["normalizedScore"] == 70
        assert env["metrics"]["ghgEmissions"]["normalizedScore"] == 50

    def test_calculate_rejects_missing_metrics(self, client):
        assert client.post("/api/esg/calculate", json={"industry": "mining"}).status_code == 422

    def test_trends(self, client):
        history = [
            {"overallScore": 60, "calculatedAt": "2023-01-01T00:00:00Z"},
            {"overallScore": 65, "calculatedAt": "2024-01-01T00:00:00Z"},
            {"overallScore": 70, "calculatedAt": "2025-01-01T00:00:00Z"},
        ]
        response = client.post("/api/esg/trends", json={"history": history, "years": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["trend"] == "improving"
        assert [p["predictedScore"] for p in body["predictions"]] == [75, 80]

    def test_trends_with_mixed_timezones(self, client):
        history = [
            {"overallScore": 50, "calculatedAt": "2023-01-01T00:00:00"},
            {"overallScore": 60, "calculatedAt": "2024-01-01T00:00:00Z"},
        ]
        response = client.post("/api/esg/trends", json={"history": history, "years": 1})

        assert response.status_code == 200
        assert response.json()["predictions"][0]["predictedScore"] == 70

    def test_trends_need_two_records(self, client):
        history = [{"overallScore": 60, "calculatedAt": "2025-01-01T00:00:00Z"}]
        assert client.post("/api/esg/trends", json={"history": history}).status_code == 422


class TestCarbonEndpoints:

    def test_factors(self, client):
        body = client.get("/api/carbon/factors", params={"scope": 1}).json()
        assert list(body) == ["1"]
        assert any(f["key"] == "diesel" and f["factor"] == 2.68 for f in body["1"])

    def test_factors_unknown_scope(self, client):
        assert client.get("/api/carbon/factors", params={"scope": 7}).status_code == 404

    def test_scope(self, client):
        response = client.post("/api/carbon/scope/1", json={"consumption": {"naturalGas": 1000}})

        assert response.status_code == 200
        body = response.json()
        assert body["scope"] == 1
        assert body["totalEmissions"] == pytest.approx(5.3)
        assert body["breakdown"]["naturalGas"]["emissionFactor"] == 0.0053

    def test_scope_out_of_range(self, client):
        assert client.post("/api/carbon/scope/4", json={"consumption": {}}).status_code == 422

    def test_footprint(self, client):
        response = client.post(
            "/api/carbon/footprint",
            json={
                "companyId": "acme-mining",
                "period": "2025",
                "fuelConsumption": {"diesel": 100},
                "electricityConsumption": {"grid_average": 1_000_000},
                "history": [500],
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["carbonFootprint"]["total"] == pytest.approx(668.0)
        assert body["carbonFootprint"]["ghgProtocolCompliant"] is True
        assert body["trends"]["changePercent"] == pytest.approx(33.6)


class TestSBTiEndpoints:

    def test_create_target(self, client):
        response = client.post("/api/sbti/targets", json=TARGET_PAYLOAD)

        assert response.status_code == 200
        body = response.json()
        assert body["targetEmissions"] == 63101
        assert body["reductionPercent"] == pytest.approx(36.9)
        assert body["status"] == "draft"
        assert body["sbtiApproved"] is False

    def test_invalid_target_lists_errors(self, client):
        payload = dict(TARGET_PAYLOAD, scope="scope9", pathway="1.5C", targetYear=2022)
        response = client.post("/api/sbti/targets", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert "Invalid scope specification" in body["errors"]
        assert any("5 years" in error for error in body["errors"])
        assert body["detail"].startswith("SBTi validation failed")

    def test_unknown_pathway(self, client):
        payload = dict(TARGET_PAYLOAD, pathway="4C")
        response = client.post("/api/sbti/targets", json=payload)
        assert response.status_code == 400

    def test_progress(self, client):
        target = client.post("/api/sbti/targets", json=TARGET_PAYLOAD).json()
        response = client.post(
            "/api/sbti/progress",
            json={"target": target, "targetId": 7, "currentEmissions": 80000, "reportingYear": 2025},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["targetId"] == 7
        assert body["progressExpected"] == pytest.approx(50.0)
        assert body["progressActual"] == pytest.approx(54.2)
        assert body["onTrack"] is True
        assert body["yearsRemaining"] == 5

    def test_net_zero(self, client):
        response = client.post(
            "/api/sbti/net-zero",
            json={"currentEmissions": {"scope1": 100000, "scope2": 50000, "scope3": 50000}},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["targetYear"] == 2050
        reductions = [m["reductionPercent"] for m in body["milestones"]]
        assert reductions == sorted(reductions)
        assert all(m["year"] <= 2050 for m in body["milestones"])
        assert body["recommendations"][0]["category"] == "Energy Transition"
        assert "50000 tCO2e" in body["recommendations"][0]["impact"]


class TestForecastEndpoints:

    def test_forecast(self, client):
        response = client.post(
            "/api/forecast",
            json={"historicalSeries": [10, 12, 11, 13, 14, 13, 15], "periods": 3, "method": "exponential"},
        )

        assert response.status_code == 200
        body = response.json()
        assert len(body["forecasts"]) == 3
        assert body["forecasts"][0]["confidence"] == 0.95
        # Optional fields not produced by this method are omitted.
        assert "aic" not in body
        assert "trend" not in body["forecasts"][0]

    def test_forecast_drops_nulls(self, client):
        response = client.post(
            "/api/forecast",
            json={"historicalSeries": [10, None, 12, 14], "periods": 1, "method": "arima"},
        )
        assert response.status_code == 200
        assert response.json()["method"] == "ARIMA(1,1,1)"

    def test_forecast_insufficient_data(self, client):
        response = client.post("/api/forecast", json={"historicalSeries": [1, 2], "periods": 3})
        assert response.status_code == 422
        assert "minimum 3 data points" in response.json()["detail"]

    def test_batch(self, client):
        response = client.post(
            "/api/forecast/batch",
            json={"series": {"energy": [5, 6, 7, 8], "water": [1]}, "periods": 2, "method": "moving-average"},
        )

        assert response.status_code == 200
        body = response.json()
        assert len(body["energy"]["forecasts"]) == 2
        assert "error" in body["water"]


class TestAnalyticsEndpoints:

    def test_scenarios(self, client):
        response = client.post(
            "/api/analytics/scenarios",
            json={"emissions": {"scope1": 1000, "scope2": 500, "scope3": 0}, "scenarios": ["1.5C"]},
        )

        assert response.status_code == 200
        result = response.json()["1.5C"]
        assert result["physicalRisk"] == pytest.approx(1200)
        assert result["financialImpact"] == pytest.approx(150000)
        assert result["timeHorizon"] == "short"

    def test_benchmarking(self, client):
        response = client.post(
            "/api/analytics/benchmarking",
            json={"metrics": {"ghgEmissions": 2.2, "boardDiversity": 42, "waterUsage": 1200}, "industry": "mining"},
        )

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"ghgEmissions", "boardDiversity"}
        assert body["ghgEmissions"]["sectorMedian"] == 2.5
        assert body["ghgEmissions"]["performance"] == "average"
        assert body["boardDiversity"]["performance"] == "leading"

    def test_benchmarking_with_peer_distribution(self, client):
        response = client.post(
            "/api/analytics/benchmarking",
            json={
                "metrics": {"scope1Emissions": 4000},
                "benchmark": {
                    "scope1Emissions": {"median": 5000, "top25": 2000, "distribution": [1000, 2000, 5000, 8000, 12000]}
                },
            },
        )
        assert response.json()["scope1Emissions"]["percentile"] == 40

    def test_risk_score(self, client):
        response = client.post(
            "/api/analytics/risk-score",
            json={"lostTimeInjuryRate": 6, "dataBreachIncidents": 2, "scope1Emissions": 15000},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["breakdown"] == {"environmental": 30, "social": 40, "governance": 40}
        assert body["overall"] == 36
        assert body["level"] == "low"


class TestInsightAndReportEndpoints:

    @pytest.fixture
    def score(self, client, sample_metrics_payload):
        return client.post(
            "/api/esg/calculate", json={"companyId": "acme-mining", "metrics": sample_metrics_payload}
        ).json()

    def test_insights_fallback(self, client, score):
        response = client.post("/api/ai/esg/insights", json=score)

        assert response.status_code == 200
        body = response.json()
        assert "acme-mining" in body["overall"]
        assert body["environmental"]

    def test_pdf(self, client, score):
        response = client.post("/api/reports/esg/pdf", json=score)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    def test_pdf_with_non_latin1_company(self, client, score):
        response = client.post("/api/reports/esg/pdf", json=dict(score, companyId="Ōkubo Mining 株式会社"))

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")
