from fastapi import APIRouter

from app.schemas.sbti import (
    NetZeroInput,
    NetZeroPathway,
    ProgressInput,
    SBTiProgressEntry,
    SBTiTarget,
    TargetInput,
)
from app.services.sbti_targets import create_target, generate_net_zero_pathway, track_progress

router = APIRouter()


@router.post("/targets", response_model=SBTiTarget)
def create_sbti_target(payload: TargetInput):
    """
    Validate and derive a science-based reduction target (status: draft).
    """
    return create_target(payload)


@router.post("/progress", response_model=SBTiProgressEntry)
def sbti_progress(payload: ProgressInput):
    """
    Compare reported emissions with the expected trajectory of a target.
    """
    return track_progress(
        payload.target,
        payload.current_emissions,
        payload.reporting_year,
        target_id=payload.target_id,
    )


@router.post("/net-zero", response_model=NetZeroPathway)
def net_zero_pathway(payload: NetZeroInput):
    return generate_net_zero_pathway(
        payload.current_emissions,
        target_year=payload.target_year,
        sector=payload.sector,
    )
