"""
Training Arcs API Router

Arc catalog plus a child's arc lifecycle: start, pause, resume, progress,
and what to try next. Only one arc runs at a time.
"""

from fastapi import APIRouter, Depends, status
from typing import List, Optional
from uuid import UUID

from core.dependencies import get_training_service
from schemas import (
    ArcPauseRequest,
    ArcProgressResponse,
    ArcStartRequest,
    ArcSummaryResponse,
    EnrollmentResponse,
    NextArcResponse,
)
from services.training_engine.catalog import get_all_arcs, get_arc
from services.training_service import TrainingService

router = APIRouter(tags=["Training Arcs"])


@router.get("/v1/arcs", response_model=List[ArcSummaryResponse])
async def list_arcs():
    """
    All arcs in suggested order.
    """
    return [ArcSummaryResponse.model_validate(arc) for arc in get_all_arcs()]


@router.get("/v1/arcs/{arc_id}", response_model=ArcSummaryResponse)
async def get_arc_detail(arc_id: str):
    return ArcSummaryResponse.model_validate(get_arc(arc_id))


@router.post(
    "/v1/children/{child_id}/arcs/start",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_arc(
    child_id: UUID,
    payload: ArcStartRequest,
    service: TrainingService = Depends(get_training_service),
):
    """
    Start an arc. 409 if one is already active or paused, 404 for an unknown arc.
    """
    return EnrollmentResponse.model_validate(service.start_arc(child_id, payload.arc_id))


@router.post("/v1/children/{child_id}/arcs/pause", response_model=EnrollmentResponse)
async def pause_arc(
    child_id: UUID,
    payload: Optional[ArcPauseRequest] = None,
    service: TrainingService = Depends(get_training_service),
):
    """
    Pause the running arc. Paused days don't count toward the arc.
    """
    return EnrollmentResponse.model_validate(service.pause_arc(child_id, payload.reason if payload else None))


@router.post("/v1/children/{child_id}/arcs/resume", response_model=EnrollmentResponse)
async def resume_arc(
    child_id: UUID,
    service: TrainingService = Depends(get_training_service),
):
    return EnrollmentResponse.model_validate(service.resume_arc(child_id))


@router.get("/v1/children/{child_id}/arcs/current", response_model=Optional[EnrollmentResponse])
async def get_current_arc(
    child_id: UUID,
    service: TrainingService = Depends(get_training_service),
):
    """
    The active or paused arc, or null.
    """
    enrollment = service.get_current_arc(child_id)
    return EnrollmentResponse.model_validate(enrollment) if enrollment else None


@router.get("/v1/children/{child_id}/arcs/progress", response_model=Optional[ArcProgressResponse])
async def get_arc_progress(
    child_id: UUID,
    service: TrainingService = Depends(get_training_service),
):
    """
    Day, percent and message for the current arc (or the last finished one).
    """
    progress = service.get_arc_progress(child_id)
    return ArcProgressResponse.model_validate(progress) if progress else None


@router.get("/v1/children/{child_id}/arcs/next", response_model=NextArcResponse)
async def get_next_arc(
    child_id: UUID,
    service: TrainingService = Depends(get_training_service),
):
    """
    Next arc in the default order, plus whether to nudge the child toward it.
    """
    suggestion = service.suggest_next_arc(child_id)
    recommendation = service.recommend_arc(child_id)
    return NextArcResponse(
        arc_id=suggestion.arc_id,
        all_complete=suggestion.all_complete,
        recommend=recommendation.recommend,
        reason=recommendation.reason,
    )
