"""
Food Repository - Data access layer for the food catalogue and detections
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Food, FoodDetection


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class FoodRepository(BaseRepository[Food]):
    """Repository for food data access"""

    def __init__(self, db: Session):
        super().__init__(db, Food)

    def search(self, query: str, limit: int = 10) -> List[Food]:
        """Case-insensitive substring search, verified foods first then by name"""
        return (
            self.db.query(Food)
            .filter(Food.name.ilike(_like_pattern(query.strip()), escape="\\"))
            .order_by(Food.verified.desc(), Food.name.asc())
            .limit(limit)
            .all()
        )

    def find_best_match(self, name: str) -> Optional[Food]:
        """Best catalogue match for a free-text food name"""
        results = self.search(name, limit=1)
        return results[0] if results else None

    def get_many(self, food_ids: List[UUID]) -> List[Food]:
        if not food_ids:
            return []
        return self.db.query(Food).filter(Food.id.in_(food_ids)).all()


class DetectionRepository(BaseRepository[FoodDetection]):
    """Repository for image detection results"""

    def __init__(self, db: Session):
        super().__init__(db, FoodDetection)

    def get_for_user(
        self, detection_id: UUID, user_id: UUID
    ) -> Optional[FoodDetection]:
        return (
            self.db.query(FoodDetection)
            .filter(
                FoodDetection.id == detection_id, FoodDetection.user_id == user_id
            )
            .first()
        )
