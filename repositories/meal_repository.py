"""
Meal Repository - Data access layer for meals and their food portions
"""

from typing import List, Optional
from uuid import UUID
from datetime import datetime
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func

from repositories.base import BaseRepository
from domain.models import Meal, MealFood
from domain.enums import MealType


class MealRepository(BaseRepository[Meal]):
    """Repository for meal data access"""

    def __init__(self, db: Session):
        super().__init__(db, Meal)

    def _user_query(
        self,
        user_id: UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        meal_type: Optional[MealType] = None,
    ):
        query = self.db.query(Meal).filter(Meal.user_id == user_id)
        if start is not None:
            query = query.filter(Meal.timestamp >= start)
        if end is not None:
            query = query.filter(Meal.timestamp < end)
        if meal_type is not None:
            query = query.filter(Meal.meal_type == meal_type)
        return query

    def get_for_user(self, meal_id: UUID, user_id: UUID) -> Optional[Meal]:
        """Get a meal only if it belongs to the user"""
        return (
            self._user_query(user_id)
            .options(selectinload(Meal.meal_foods))
            .filter(Meal.id == meal_id)
            .first()
        )

    def list_for_user(
        self,
        user_id: UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        meal_type: Optional[MealType] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Meal]:
        """Meals in [start, end), newest first"""
        query = (
            self._user_query(user_id, start, end, meal_type)
            .options(selectinload(Meal.meal_foods))
            .order_by(Meal.timestamp.desc())
        )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def list_in_range(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> List[Meal]:
        """Meals in [start, end), oldest first"""
        return (
            self._user_query(user_id, start, end)
            .options(selectinload(Meal.meal_foods))
            .order_by(Meal.timestamp.asc())
            .all()
        )

    def count_for_user(self, user_id: UUID) -> int:
        return (
            self.db.query(func.count(Meal.id)).filter(Meal.user_id == user_id).scalar()
        )


class MealFoodRepository(BaseRepository[MealFood]):
    """Repository for individual food portions"""

    def __init__(self, db: Session):
        super().__init__(db, MealFood)

    def count_for_user(self, user_id: UUID) -> int:
        """Number of food portions the user has ever logged"""
        return (
            self.db.query(func.count(MealFood.id))
            .join(Meal, MealFood.meal_id == Meal.id)
            .filter(Meal.user_id == user_id)
            .scalar()
        )
