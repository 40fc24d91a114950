from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime
from uuid import UUID
import re

from domain.enums import ActivityLevel, Units, PrivacyLevel
from domain.schemas.common import CamelModel

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalize_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please provide a valid email address")
    return value


class RegisterRequest(BaseModel):
    """Schema for creating a new account"""

    email: str = Field(..., max_length=320)
    password: str = Field(..., description="At least 8 characters")
    name: Optional[str] = Field(None, description="Display name (2-100 characters)")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters long")
        if not (
            re.search(r"[a-z]", v) and re.search(r"[A-Z]", v) and re.search(r"\d", v)
        ):
            raise ValueError(
                "Password must contain at least one lowercase letter, "
                "one uppercase letter, and one number"
            )
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not 2 <= len(v) <= 100:
            raise ValueError("Name must be between 2 and 100 characters")
        return v


class LoginRequest(BaseModel):
    """Schema for email/password login"""

    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class VerifyTokenRequest(BaseModel):
    token: str = Field(..., min_length=1)


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; unknown keys (id, timestamps) are ignored"""

    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    age: Optional[int] = Field(None, ge=1, le=130)
    weight: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)
    activity_level: Optional[ActivityLevel] = None
    dietary_restrictions: Optional[List[str]] = None
    units: Optional[Units] = None
    privacy_level: Optional[PrivacyLevel] = None
    daily_protein_goal: Optional[float] = Field(None, gt=0, le=1000)

    model_config = ConfigDict(extra="ignore")


class UserProfileResponse(BaseModel):
    """Full profile of the authenticated user"""

    id: UUID
    email: str
    display_name: Optional[str] = None
    age: Optional[int] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    daily_protein_goal: Optional[float] = None
    activity_level: Optional[ActivityLevel] = None
    dietary_restrictions: Optional[List[str]] = None
    units: Units = Units.METRIC
    notifications_enabled: bool = True
    privacy_level: PrivacyLevel = PrivacyLevel.PRIVATE
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthTokens(CamelModel):
    access_token: str
    refresh_token: str


class AuthResponse(CamelModel):
    """User plus a fresh token pair"""

    user: UserProfileResponse
    access_token: str
    refresh_token: str
