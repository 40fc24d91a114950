"""
Food catalogue and image detection models.
"""

from sqlalchemy import (
    Column,
    Text,
    String,
    DateTime,
    ForeignKey,
    Boolean,
    JSON,
    Uuid,
)
from sqlalchemy.orm import relationship
import uuid

from domain.models.database import Base, enum_column
from domain.enums import DetectionStatus
from core.utils.helpers import utcnow


class Food(Base):
    """Food with nutrition per 100 g; user-created foods are unverified"""

    __tablename__ = "food"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False, index=True)
    category = Column(String(64))
    brand = Column(Text)
    barcode = Column(String(64), index=True)
    nutrition_per_100g = Column(JSON, nullable=False, default=dict)
    common_portions = Column(JSON)  # [{name, grams}]
    verified = Column(Boolean, nullable=False, default=False)
    user_id = Column(
        Uuid(as_uuid=True), ForeignKey("user_profile.id", ondelete="SET NULL")
    )
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class FoodDetection(Base):
    """Result of running image recognition on an uploaded photo"""

    __tablename__ = "food_detection"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("user_profile.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    image_url = Column(Text, nullable=False)
    detected_foods = Column(JSON, nullable=False, default=list)
    confidence_scores = Column(JSON)
    status = Column(
        enum_column(DetectionStatus),
        nullable=False,
        default=DetectionStatus.PENDING,
    )
    processed_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("UserProfile", back_populates="detections")
