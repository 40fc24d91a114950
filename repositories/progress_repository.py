"""
Progress Repository - Data access layer for daily and per-meal progress
"""

from typing import List, Optional
from uuid import UUID
from datetime import date
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func

from repositories.base import BaseRepository
from domain.models import DailyProgress


class ProgressRepository(BaseRepository[DailyProgress]):
    """Repository for daily progress rows"""

    def __init__(self, db: Session):
        super().__init__(db, DailyProgress)

    def _filtered(
        self,
        user_id: UUID,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ):
        query = self.db.query(DailyProgress).filter(DailyProgress.user_id == user_id)
        if start is not None:
            query = query.filter(DailyProgress.date >= start)
        if end is not None:
            query = query.filter(DailyProgress.date <= end)
        return query

    def get_by_date(self, user_id: UUID, day: date) -> Optional[DailyProgress]:
        return (
            self._filtered(user_id)
            .options(selectinload(DailyProgress.meal_progress))
            .filter(DailyProgress.date == day)
            .first()
        )

    def list_after(self, user_id: UUID, day: date) -> List[DailyProgress]:
        """Stored days strictly after ``day``, oldest first"""
        return (
            self._filtered(user_id)
            .filter(DailyProgress.date > day)
            .order_by(DailyProgress.date.asc())
            .all()
        )

    def list_history(
        self,
        user_id: UUID,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = 30,
        offset: int = 0,
    ) -> List[DailyProgress]:
        """Stored days, newest first"""
        return (
            self._filtered(user_id, start, end)
            .options(selectinload(DailyProgress.meal_progress))
            .order_by(DailyProgress.date.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def count_history(
        self, user_id: UUID, start: Optional[date] = None, end: Optional[date] = None
    ) -> int:
        return self._filtered(user_id, start, end).count()

    def list_range(self, user_id: UUID, start: date, end: date) -> List[DailyProgress]:
        """Stored days in [start, end], oldest first"""
        return (
            self._filtered(user_id, start, end)
            .order_by(DailyProgress.date.asc())
            .all()
        )

    def get_latest(self, user_id: UUID) -> Optional[DailyProgress]:
        return (
            self._filtered(user_id).order_by(DailyProgress.date.desc()).first()
        )

    def get_longest_streak(self, user_id: UUID) -> int:
        value = (
            self.db.query(func.max(DailyProgress.streak_count))
            .filter(DailyProgress.user_id == user_id)
            .scalar()
        )
        return int(value or 0)

    def count_goal_met_since(self, user_id: UUID, since: date) -> int:
        return (
            self._filtered(user_id, start=since)
            .filter(DailyProgress.goal_met.is_(True))
            .count()
        )
