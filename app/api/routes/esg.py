from fastapi import APIRouter, HTTPException

from app.schemas.esg import ESGInput, ESGScoreResult, ScoreTrendResult, TrendInput
from app.services.esg_calculator import calculate_esg_score
from app.services.trend_predictor import predict_esg_trends

router = APIRouter()


@router.post("/calculate", response_model=ESGScoreResult)
def calculate_esg(payload: ESGInput):
    """
    Calculate ESG scores for a single company & period.
    """
    return calculate_esg_score(
        payload.metrics,
        benchmark=payload.benchmark,
        industry=payload.industry,
        company_id=payload.company_id,
    )


@router.post("/trends", response_model=ScoreTrendResult)
def esg_trends(payload: TrendInput):
    """
    Project the overall ESG score forward from stored score snapshots.
    """
    result = predict_esg_trends(payload.history, years=payload.years)
    if result is None:
        raise HTTPException(
            status_code=422,
            detail="At least 2 historical scores are required for a trend projection.",
        )
    return result
