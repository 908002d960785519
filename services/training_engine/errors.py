"""
Training engine error taxonomy.

- InvalidInputError: out-of-range input rejected at the function boundary.
  Never clamped.
- NoCheckInError: a plan was requested without a check-in for the day.
  Reported to the caller; not fatal.
- InvariantViolation: an impossible state handed to the core (two current
  enrollments, an unknown arc on an enrollment). Signals a bug in the
  collaborator layer and must not be swallowed.
"""

from typing import Optional


class TrainingEngineError(Exception):
    """Base class for all training engine errors."""


class InvalidInputError(TrainingEngineError, ValueError):
    """An input field is outside its allowed range."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NoCheckInError(TrainingEngineError):
    """No check-in exists for the day a plan was requested for."""

    def __init__(self, child_id: str, message: Optional[str] = None):
        super().__init__(message or f"No check-in for today for child {child_id}")
        self.child_id = child_id


class InvariantViolation(TrainingEngineError):
    """The core was given state that cannot exist."""


class ArcNotFoundError(TrainingEngineError, LookupError):
    """Requested arc id is not in the catalog."""

    def __init__(self, arc_id: str):
        super().__init__(f"Arc not found: {arc_id}")
        self.arc_id = arc_id


class ArcTransitionError(TrainingEngineError):
    """An enrollment status change that the lifecycle does not allow."""


class CatalogError(TrainingEngineError):
    """Static catalog data failed load-time validation."""
