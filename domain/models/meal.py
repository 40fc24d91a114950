"""
Meal logging models.
"""

from sqlalchemy import (
    Column,
    Text,
    String,
    DateTime,
    ForeignKey,
    Float,
    JSON,
    Uuid,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
import uuid

from domain.models.database import Base, enum_column
from domain.enums import MealType
from core.utils.helpers import utcnow


class Meal(Base):
    """A logged eating event composed of one or more foods"""

    __tablename__ = "meal"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("user_profile.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    meal_type = Column(enum_column(MealType), nullable=False)
    timestamp = Column(DateTime, nullable=False, default=utcnow, index=True)
    photo_url = Column(Text)
    notes = Column(Text)
    total_nutrition = Column(JSON)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("UserProfile", back_populates="meals")
    meal_foods = relationship(
        "MealFood",
        back_populates="meal",
        cascade="all, delete-orphan",
        order_by="MealFood.created_at",
    )


class MealFood(Base):
    """A portion of a food eaten as part of a meal"""

    __tablename__ = "meal_food"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    meal_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("meal.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Null for quick-add portions logged without a catalogue food
    food_id = Column(Uuid(as_uuid=True), ForeignKey("food.id", ondelete="SET NULL"))
    quantity = Column(Float, nullable=False)
    unit = Column(String(32), nullable=False, default="grams")
    nutrition_data = Column(JSON)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    meal = relationship("Meal", back_populates="meal_foods")
    food = relationship("Food", lazy="joined")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_meal_food_quantity_positive"),
    )
