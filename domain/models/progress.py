"""
Daily and per-meal protein progress models.
"""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Float,
    Integer,
    Boolean,
    Uuid,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import uuid

from domain.models.database import Base, enum_column
from domain.enums import MealType
from core.utils.helpers import utcnow


class DailyProgress(Base):
    """Protein/calorie totals for one user and calendar day"""

    __tablename__ = "daily_progress"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("user_profile.id", ondelete="CASCADE"),
        nullable=False,
    )
    date = Column(Date, nullable=False)
    total_protein = Column(Float, nullable=False, default=0.0)
    total_calories = Column(Float, nullable=False, default=0.0)
    daily_target = Column(Float, nullable=False)
    goal_met = Column(Boolean, nullable=False, default=False)
    streak_count = Column(Integer, nullable=False, default=0)
    achievement_percentage = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("UserProfile", back_populates="daily_progress")
    meal_progress = relationship(
        "MealProgress",
        back_populates="daily_progress",
        cascade="all, delete-orphan",
        order_by="MealProgress.meal_type",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_progress_user_date"),
    )


class MealProgress(Base):
    """Protein intake for one meal slot of a day"""

    __tablename__ = "meal_progress"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    daily_progress_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("daily_progress.id", ondelete="CASCADE"),
        nullable=False,
    )
    meal_type = Column(enum_column(MealType), nullable=False)
    target_protein = Column(Float, nullable=False, default=0.0)
    actual_protein = Column(Float, nullable=False, default=0.0)
    items_count = Column(Integer, nullable=False, default=0)

    daily_progress = relationship("DailyProgress", back_populates="meal_progress")

    __table_args__ = (
        UniqueConstraint(
            "daily_progress_id", "meal_type", name="uq_meal_progress_day_meal"
        ),
    )
