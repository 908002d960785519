"""
Children API Router
"""

from fastapi import APIRouter, Depends, status

from core.dependencies import get_training_service
from schemas import ChildCreate, ChildResponse
from services.training_service import TrainingService

router = APIRouter(prefix="/v1/children", tags=["Children"])


@router.post("", response_model=ChildResponse, status_code=status.HTTP_201_CREATED)
async def create_child(
    payload: ChildCreate,
    service: TrainingService = Depends(get_training_service),
):
    return ChildResponse(id=service.create_child(payload.display_name, payload.birth_year))
