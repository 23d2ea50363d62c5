from fastapi import APIRouter

from app.schemas.esg import ESGInsights, ESGScoreResult
from app.services.esg_insights import generate_esg_insights

router = APIRouter()


@router.post("/esg/insights", response_model=ESGInsights)
def esg_ai_insights(result: ESGScoreResult):
    """
    Generate AI-based narrative ESG insights for the given scores.
    """
    return generate_esg_insights(result)
