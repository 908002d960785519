"""
Shared FastAPI dependencies.

Routers get a TrainingService per request, bound to the request's DB
session. Tests override `get_clock` to pin "now".
"""
from datetime import datetime
from typing import Callable

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from services.sql_training_store import SqlTrainingStore
from services.training_service import TrainingService


def get_clock() -> Callable[[], datetime]:
    return datetime.now


def get_training_service(
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> TrainingService:
    return TrainingService(SqlTrainingStore(db), clock=clock)
