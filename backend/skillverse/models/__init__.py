"""
Database models for Skillverse.

This module contains all SQLAlchemy models for the application:
- User model holding the points balance
- Course catalog models (courses and lessons)
- Enrollment and lesson progress models
- Point transaction log
"""

from skillverse.core.database import Base

# Import all models to ensure they're registered with SQLAlchemy
from .user import User, UserRole
from .course import Course, Lesson, DifficultyLevel
from .enrollment import Enrollment, LessonProgress
from .ledger import PointTransaction, TransactionKind

# Export all models
__all__ = [
    "Base",
    "User",
    "UserRole",
    "Course",
    "Lesson",
    "DifficultyLevel",
    "Enrollment",
    "LessonProgress",
    "PointTransaction",
    "TransactionKind"
]
