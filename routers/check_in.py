"""
Check-in API Router

Daily readiness check-in. One POST, done: the session mode comes back with
the response and is stored alongside the check-in.
"""

from fastapi import APIRouter, Depends, status
from typing import Optional
from uuid import UUID

from core.dependencies import get_training_service
from schemas import CheckInCreate, CheckInResponse, QualityRatingUpdate, SessionAdjustmentsResponse, SessionModeResponse
from services.training_engine.session_mode import get_session_mode_display
from services.training_service import TrainingService

router = APIRouter(prefix="/v1/children/{child_id}/check-ins", tags=["Check-in"])


def _mode_response(result) -> Optional[SessionModeResponse]:
    if result is None:
        return None
    display = get_session_mode_display(result.mode)
    return SessionModeResponse(
        mode=result.mode,
        explanation=result.explanation,
        adjustments=SessionAdjustmentsResponse.model_validate(result.adjustments),
        readiness_score=result.readiness_score,
        label=display["label"],
        icon=display["icon"],
    )


def _check_in_response(check_in, result) -> CheckInResponse:
    response = CheckInResponse.model_validate(check_in)
    response.session_mode = _mode_response(result)
    return response


@router.post("", response_model=CheckInResponse, status_code=status.HTTP_201_CREATED)
async def create_check_in(
    child_id: UUID,
    payload: CheckInCreate,
    service: TrainingService = Depends(get_training_service),
):
    """
    Record today's check-in and classify it.

    Several check-ins per day are allowed; the latest one drives the plan.
    """
    check_in, result = service.record_check_in(child_id, **payload.model_dump())
    return _check_in_response(check_in, result)


@router.get("/today", response_model=Optional[CheckInResponse])
async def get_today_check_in(
    child_id: UUID,
    service: TrainingService = Depends(get_training_service),
):
    """
    Get today's latest check-in if it exists.
    """
    found = service.get_today_check_in(child_id)
    if found is None:
        return None
    return _check_in_response(*found)


@router.patch("/{check_in_id}/quality", response_model=CheckInResponse)
async def rate_check_in(
    child_id: UUID,
    check_in_id: UUID,
    payload: QualityRatingUpdate,
    service: TrainingService = Depends(get_training_service),
):
    """
    Rate how the session went (1-5). Marks the check-in completed.
    """
    check_in = service.rate_check_in(child_id, check_in_id, payload.quality_rating)
    return _check_in_response(check_in, None)
