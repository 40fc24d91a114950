"""
User-related database models.
"""

from sqlalchemy import (
    Column,
    Text,
    String,
    DateTime,
    ForeignKey,
    Integer,
    Float,
    Boolean,
    JSON,
    Uuid,
)
from sqlalchemy.orm import relationship
import uuid

from domain.models.database import Base, enum_column
from domain.enums import (
    Goal,
    ActivityLevel,
    Units,
    PrivacyLevel,
    PlanType,
    BillingPeriod,
    SubscriptionStatus,
)
from core.utils.helpers import utcnow


DEFAULT_MEAL_REMINDER_TIMES = {
    "breakfast": "08:00",
    "lunch": "12:30",
    "snack": "15:30",
    "dinner": "19:00",
}


class UserProfile(Base):
    """User account and nutrition profile"""

    __tablename__ = "user_profile"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(320), unique=True, nullable=False, index=True)
    password_hash = Column(Text)
    display_name = Column(Text)
    age = Column(Integer)
    weight = Column(Float)  # kg
    height = Column(Float)  # cm
    training_multiplier = Column(Float)
    goal = Column(enum_column(Goal), nullable=False, default=Goal.MAINTAIN)
    daily_protein_goal = Column(Float)
    activity_level = Column(enum_column(ActivityLevel))
    dietary_restrictions = Column(JSON)
    units = Column(enum_column(Units), nullable=False, default=Units.METRIC)
    privacy_level = Column(
        enum_column(PrivacyLevel), nullable=False, default=PrivacyLevel.PRIVATE
    )
    profile_image_url = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    settings = relationship(
        "UserSettings",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    subscription = relationship(
        "Subscription",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    meals = relationship("Meal", back_populates="user", cascade="all, delete-orphan")
    daily_progress = relationship(
        "DailyProgress", back_populates="user", cascade="all, delete-orphan"
    )
    detections = relationship(
        "FoodDetection", back_populates="user", cascade="all, delete-orphan"
    )


class UserSettings(Base):
    """Notification and reminder preferences"""

    __tablename__ = "user_settings"

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("user_profile.id", ondelete="CASCADE"),
        primary_key=True,
    )
    notifications_enabled = Column(Boolean, nullable=False, default=True)
    meal_reminder_times = Column(
        JSON, nullable=False, default=lambda: dict(DEFAULT_MEAL_REMINDER_TIMES)
    )
    do_not_disturb_start = Column(String(5), nullable=False, default="22:00")
    do_not_disturb_end = Column(String(5), nullable=False, default="07:00")
    nightly_summary_enabled = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("UserProfile", back_populates="settings")


class Subscription(Base):
    """Billing plan for premium features"""

    __tablename__ = "subscription"

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("user_profile.id", ondelete="CASCADE"),
        primary_key=True,
    )
    plan_type = Column(enum_column(PlanType), nullable=False, default=PlanType.FREE)
    billing_period = Column(enum_column(BillingPeriod))
    status = Column(
        enum_column(SubscriptionStatus),
        nullable=False,
        default=SubscriptionStatus.ACTIVE,
    )
    current_period_start = Column(DateTime)
    current_period_end = Column(DateTime)
    trial_end = Column(DateTime)

    user = relationship("UserProfile", back_populates="subscription")

    def is_premium(self, now=None) -> bool:
        """Active pro plan whose period has not ended"""
        now = now or utcnow()
        return (
            self.plan_type == PlanType.PRO
            and self.status == SubscriptionStatus.ACTIVE
            and (self.current_period_end is None or self.current_period_end > now)
        )
