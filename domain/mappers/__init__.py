"""
Domain mappers package - ORM to DTO transformations.
"""

from domain.mappers.user_mapper import UserMapper
from domain.mappers.meal_mapper import MealMapper
from domain.mappers.progress_mapper import ProgressMapper

__all__ = ["UserMapper", "MealMapper", "ProgressMapper"]
