from sqlalchemy import Column, Integer, Boolean, CheckConstraint, Float, DateTime, ForeignKey, Text, String, Index, JSON, Uuid, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base
import uuid


class Child(Base):
    __tablename__ = "child"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    display_name = Column(Text, nullable=False)
    birth_year = Column(Integer, nullable=True)  # drives Game IQ age filtering

    check_ins = relationship("CheckIn", back_populates="child", cascade="all, delete-orphan")
    enrollments = relationship("ArcEnrollment", back_populates="child", cascade="all, delete-orphan")
    sessions = relationship("TrainingSession", back_populates="child", cascade="all, delete-orphan")


class CheckIn(Base):
    """
    Daily readiness check-in plus the session mode it was classified into.

    The classification is stored with the row and never recomputed.
    Several check-ins per day are allowed; the latest one wins.
    """
    __tablename__ = "check_in"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    child_id = Column(Uuid(as_uuid=True), ForeignKey("child.id"), nullable=False)  # Index in __table_args__
    created_at = Column(DateTime, nullable=False)

    energy = Column(Integer, nullable=False)  # 1-5
    soreness = Column(String(10), nullable=False)  # NONE | LIGHT | MEDIUM | HIGH
    focus = Column(Integer, nullable=False)  # 1-5
    mood = Column(String(10), nullable=False)  # EXCITED | FOCUSED | OKAY | TIRED | STRESSED
    time_available_minutes = Column(Integer, nullable=False)
    pain_flag = Column(Boolean, default=False, nullable=False)

    # --- CLASSIFICATION (persisted, never patched) ---
    mode = Column(String(20), nullable=False)
    mode_explanation = Column(Text, nullable=False)
    rep_multiplier = Column(Float, nullable=False)
    include_decision_work = Column(Boolean, nullable=False)
    game_iq_emphasis = Column(Boolean, nullable=False)
    intense_drills_allowed = Column(Boolean, nullable=False)
    suggested_duration_minutes = Column(Integer, nullable=False)
    readiness_score = Column(Float, nullable=False, default=0.0)

    # Post-session amendments
    quality_rating = Column(Integer, nullable=True)  # 1-5
    completed = Column(Boolean, default=False, nullable=False)

    child = relationship("Child", back_populates="check_ins")

    __table_args__ = (
        Index("ix_check_in_child_created", "child_id", "created_at"),
        CheckConstraint("energy BETWEEN 1 AND 5", name="ck_check_in_energy"),
        CheckConstraint("focus BETWEEN 1 AND 5", name="ck_check_in_focus"),
        CheckConstraint("time_available_minutes > 0", name="ck_check_in_time"),
        CheckConstraint(
            "quality_rating IS NULL OR quality_rating BETWEEN 1 AND 5",
            name="ck_check_in_quality_rating",
        ),
    )


class ArcEnrollment(Base):
    """
    A child's run through one training arc.

    Re-enrolling in an arc creates a new row. `pauses` holds every pause
    interval as [{"paused_at": iso, "resumed_at": iso | null}, ...].
    At most one row per child is active or paused (partial unique index).
    """
    __tablename__ = "arc_enrollment"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    child_id = Column(Uuid(as_uuid=True), ForeignKey("child.id"), nullable=False)  # Index in __table_args__
    arc_id = Column(String(40), nullable=False)
    status = Column(String(20), nullable=False, default="active")  # inactive | active | paused | completed
    started_at = Column(DateTime, nullable=True)
    pause_reason = Column(String(20), nullable=True)
    completed_at = Column(DateTime, nullable=True)
    pauses = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    child = relationship("Child", back_populates="enrollments")

    __table_args__ = (
        Index("ix_arc_enrollment_child_status", "child_id", "status"),
        Index(
            "uq_arc_enrollment_current",
            "child_id",
            unique=True,
            sqlite_where=text("status IN ('active', 'paused')"),
            postgresql_where=text("status IN ('active', 'paused')"),
        ),
    )


class TrainingSession(Base):
    """Logged activity. Append-only."""
    __tablename__ = "training_session"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    child_id = Column(Uuid(as_uuid=True), ForeignKey("child.id"), nullable=False)  # Index in __table_args__
    created_at = Column(DateTime, nullable=False)
    drill_id = Column(String(60), nullable=True)
    arc_id = Column(String(40), nullable=True)
    activity_type = Column(String(40), nullable=False, default="Training")
    effort_level = Column(Integer, nullable=False)  # 1-10
    mood = Column(String(10), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    wins = Column(JSON, nullable=False, default=list)  # up to 3 short tags
    focus_areas = Column(JSON, nullable=False, default=list)  # up to 3 short tags

    child = relationship("Child", back_populates="sessions")

    __table_args__ = (
        Index("ix_training_session_child_created", "child_id", "created_at"),
        CheckConstraint("effort_level BETWEEN 1 AND 10", name="ck_training_session_effort"),
        CheckConstraint("duration_minutes > 0", name="ck_training_session_duration"),
    )
