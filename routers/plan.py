"""
Daily Plan API Router

"What do I do today": built on request from today's check-in, the current
arc and recent sessions. Never stored.
"""

from fastapi import APIRouter, Depends
from uuid import UUID

from core.dependencies import get_training_service
from schemas import DailyPlanResponse
from services.training_service import TrainingService

router = APIRouter(prefix="/v1/children/{child_id}/plan", tags=["Daily Plan"])


@router.get("/today", response_model=DailyPlanResponse)
async def get_today_plan(
    child_id: UUID,
    service: TrainingService = Depends(get_training_service),
):
    """
    Today's plan. 409 until the child has checked in today.
    """
    return DailyPlanResponse.model_validate(service.build_plan(child_id))
