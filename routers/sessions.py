"""
Training Sessions API Router

Log completed sessions and read consistency (streak + weekly counts).
"""

from fastapi import APIRouter, Depends, Query, status
from typing import List
from uuid import UUID

from core.dependencies import get_training_service
from schemas import ConsistencyResponse, SessionCreate, SessionResponse
from services.training_service import TrainingService

router = APIRouter(prefix="/v1/children/{child_id}", tags=["Sessions"])


@router.post("/sessions", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def log_session(
    child_id: UUID,
    payload: SessionCreate,
    service: TrainingService = Depends(get_training_service),
):
    """
    Log a completed session.

    Wins and focus areas are scrubbed of contact info and links before storage.
    Logging arc content can complete the current arc.
    """
    return service.log_session(child_id, **payload.model_dump())


@router.get("/sessions", response_model=List[SessionResponse])
async def list_sessions(
    child_id: UUID,
    limit: int = Query(default=20, ge=1, le=100),
    service: TrainingService = Depends(get_training_service),
):
    """
    Recent sessions, newest first.
    """
    return service.list_sessions(child_id, limit)


@router.get("/consistency", response_model=ConsistencyResponse)
async def get_consistency(
    child_id: UUID,
    service: TrainingService = Depends(get_training_service),
):
    """
    Daily streak and weekly session counts.
    """
    return service.get_consistency(child_id)
