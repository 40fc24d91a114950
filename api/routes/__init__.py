"""API routes package"""

from . import auth, food, meals, progress, user, analytics, health

__all__ = ["auth", "food", "meals", "progress", "user", "analytics", "health"]
