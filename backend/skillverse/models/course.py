"""
Course catalog models for Skillverse.

Courses and lessons are owned by the catalog; the ledger only reads
``is_published``, ``points_cost``, ``points_reward``, ``title`` and the
ordered lesson set.
"""

from datetime import datetime
from typing import Optional
from enum import Enum
from sqlalchemy import (
    Boolean, Integer, String, DateTime, Text,
    ForeignKey, Index, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from skillverse.core.database import Base


class DifficultyLevel(str, Enum):
    """Course difficulty levels."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Course(Base):
    """
    Course model representing a purchasable unit of lessons.
    """
    __tablename__ = "courses"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Basic information
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    instructor_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    difficulty_level: Mapped[str] = mapped_column(
        String(20),
        default=DifficultyLevel.BEGINNER.value,
        nullable=False
    )
    thumbnail: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)  # Opaque upload path

    # Visibility
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Points economy
    points_cost: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # 0 = free
    points_reward: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    # Relationships
    instructor = relationship("User", foreign_keys=[instructor_id])
    lessons = relationship(
        "Lesson",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Lesson.lesson_order"
    )
    enrollments = relationship("Enrollment", back_populates="course")

    # Table constraints
    __table_args__ = (
        CheckConstraint("points_cost >= 0", name="check_points_cost_non_negative"),
        CheckConstraint("points_reward >= 0", name="check_points_reward_non_negative"),
        Index("idx_course_published", "is_published"),
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title='{self.title}', cost={self.points_cost})>"


class Lesson(Base):
    """
    Lesson model representing one ordered step within a course.
    """
    __tablename__ = "lessons"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Course relationship
    course_id: Mapped[int] = mapped_column(Integer, ForeignKey("courses.id"), nullable=False)

    # Basic information
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    video_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)  # Opaque upload path

    # Lesson metadata
    lesson_order: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_free: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)  # Preview without enrolling

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    # Relationships
    course = relationship("Course", back_populates="lessons")
    progress_records = relationship("LessonProgress", back_populates="lesson", cascade="all, delete-orphan")

    # Table constraints
    __table_args__ = (
        CheckConstraint("lesson_order > 0", name="check_lesson_order_positive"),
        Index("idx_lesson_course_order", "course_id", "lesson_order"),
    )

    def __repr__(self) -> str:
        return f"<Lesson(id={self.id}, title='{self.title}', course_id={self.course_id})>"
