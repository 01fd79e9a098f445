"""
Enrollment and lesson progress models for Skillverse.

An Enrollment is one user's registration in one course; LessonProgress
holds per-lesson completion state for that enrollment.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import (
    Boolean, Integer, DateTime,
    ForeignKey, UniqueConstraint, Index, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from skillverse.core.database import Base, utcnow


class Enrollment(Base):
    """
    A user's registration in a course.

    ``progress_percentage`` is a cache of the completed share of this
    enrollment's lesson_progress rows.
    """
    __tablename__ = "enrollments"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # User and course relationship
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    course_id: Mapped[int] = mapped_column(Integer, ForeignKey("courses.id"), nullable=False)

    # Progress tracking
    progress_percentage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Timestamps
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="enrollments")
    course = relationship("Course", back_populates="enrollments")
    lesson_progress = relationship(
        "LessonProgress",
        back_populates="enrollment",
        cascade="all, delete-orphan"
    )

    # Table constraints
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollment_user_course"),
        CheckConstraint(
            "progress_percentage >= 0 AND progress_percentage <= 100",
            name="check_progress_percentage"
        ),
        Index("idx_enrollment_user_enrolled", "user_id", "enrolled_at"),
    )

    def __repr__(self) -> str:
        return f"<Enrollment(user_id={self.user_id}, course_id={self.course_id}, progress={self.progress_percentage}%)>"

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None


class LessonProgress(Base):
    """
    Completion state of one lesson within one enrollment.
    """
    __tablename__ = "lesson_progress"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Relationships
    enrollment_id: Mapped[int] = mapped_column(Integer, ForeignKey("enrollments.id"), nullable=False)
    lesson_id: Mapped[int] = mapped_column(Integer, ForeignKey("lessons.id"), nullable=False)

    # Completion
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Time tracking (only ever incremented)
    time_spent_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_accessed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    enrollment = relationship("Enrollment", back_populates="lesson_progress")
    lesson = relationship("Lesson", back_populates="progress_records")

    # Table constraints
    __table_args__ = (
        UniqueConstraint("enrollment_id", "lesson_id", name="uq_lesson_progress_enrollment_lesson"),
        CheckConstraint("time_spent_minutes >= 0", name="check_time_spent_non_negative"),
        Index("idx_lesson_progress_completed", "enrollment_id", "is_completed"),
    )

    def __repr__(self) -> str:
        return (
            f"<LessonProgress(enrollment_id={self.enrollment_id}, lesson_id={self.lesson_id}, "
            f"completed={self.is_completed})>"
        )
