"""
Read views over the ledger and progress tables.

Everything here is a plain SELECT: no writes, safe to retry.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from skillverse.core.config import settings
from skillverse.core.exceptions import NotFoundError
from skillverse.models.course import Course, Lesson
from skillverse.models.enrollment import Enrollment, LessonProgress
from skillverse.models.ledger import PointTransaction
from skillverse.models.user import User
from skillverse.services import ledger


@dataclass
class TransactionPage:
    transactions: List[PointTransaction]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit)


@dataclass
class LessonProgressView:
    progress: LessonProgress
    title: str
    lesson_order: int
    duration_minutes: int


@dataclass
class CourseProgress:
    enrollment: Enrollment
    lessons: List[LessonProgressView] = field(default_factory=list)

    @property
    def completed_lessons(self) -> int:
        return sum(1 for view in self.lessons if view.progress.is_completed)

    @property
    def total_lessons(self) -> int:
        return len(self.lessons)


@dataclass
class EnrolledCourse:
    enrollment: Enrollment
    title: str
    description: Optional[str]
    thumbnail: Optional[str]
    difficulty_level: str
    points_cost: int
    points_reward: int
    instructor_name: Optional[str]
    total_lessons: int
    completed_lessons: int

    @property
    def enrolled_at(self) -> datetime:
        return self.enrollment.enrolled_at


def get_balance(db: Session, user_id: int) -> int:
    """Current points of a user; ``NotFoundError`` if the user is absent."""
    return ledger.get_balance(db, user_id)


def get_transactions(
    db: Session,
    user_id: int,
    page: int = 1,
    limit: Optional[int] = None,
) -> TransactionPage:
    """
    One page of a user's transaction log, newest first.

    Args:
        db: Database session
        user_id: Owner of the log
        page: 1-based page number
        limit: Page size, defaults to ``settings.DEFAULT_PAGE_SIZE``

    Returns:
        TransactionPage: rows plus total count; ``pages`` is derived
    """
    if limit is None:
        limit = settings.DEFAULT_PAGE_SIZE
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be positive integers")

    total = db.scalar(
        select(func.count(PointTransaction.id)).where(PointTransaction.user_id == user_id)
    ) or 0

    transactions = list(
        db.scalars(
            select(PointTransaction)
            .where(PointTransaction.user_id == user_id)
            .order_by(PointTransaction.created_at.desc(), PointTransaction.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
    )
    return TransactionPage(transactions=transactions, page=page, limit=limit, total=total)


def get_course_progress(db: Session, user_id: int, course_id: int) -> CourseProgress:
    """
    The user's enrollment in a course with its lesson rows in lesson order.

    Raises:
        NotFoundError: the user is not enrolled in the course
    """
    enrollment = db.scalars(
        select(Enrollment).where(
            Enrollment.user_id == user_id,
            Enrollment.course_id == course_id,
        )
    ).first()
    if enrollment is None:
        raise NotFoundError("Enrollment", course_id, "Not enrolled in this course")

    rows = db.execute(
        select(LessonProgress, Lesson.title, Lesson.lesson_order, Lesson.duration_minutes)
        .join(Lesson, Lesson.id == LessonProgress.lesson_id)
        .where(LessonProgress.enrollment_id == enrollment.id)
        .order_by(Lesson.lesson_order, Lesson.id)
    ).all()

    return CourseProgress(
        enrollment=enrollment,
        lessons=[
            LessonProgressView(
                progress=progress,
                title=title,
                lesson_order=lesson_order,
                duration_minutes=duration_minutes,
            )
            for progress, title, lesson_order, duration_minutes in rows
        ],
    )


def get_enrolled_courses(db: Session, user_id: int) -> List[EnrolledCourse]:
    """All of a user's enrollments with course details and lesson counts, newest first."""
    lesson_counts = (
        select(Lesson.course_id, func.count(Lesson.id).label("total_lessons"))
        .group_by(Lesson.course_id)
        .subquery()
    )
    completed_counts = (
        select(LessonProgress.enrollment_id, func.count(LessonProgress.id).label("completed_lessons"))
        .where(LessonProgress.is_completed.is_(True))
        .group_by(LessonProgress.enrollment_id)
        .subquery()
    )

    rows = db.execute(
        select(
            Enrollment,
            Course.title,
            Course.description,
            Course.thumbnail,
            Course.difficulty_level,
            Course.points_cost,
            Course.points_reward,
            User.full_name.label("instructor_name"),
            func.coalesce(lesson_counts.c.total_lessons, 0),
            func.coalesce(completed_counts.c.completed_lessons, 0),
        )
        .join(Course, Course.id == Enrollment.course_id)
        .outerjoin(User, User.id == Course.instructor_id)
        .outerjoin(lesson_counts, lesson_counts.c.course_id == Course.id)
        .outerjoin(completed_counts, completed_counts.c.enrollment_id == Enrollment.id)
        .where(Enrollment.user_id == user_id)
        .order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc())
    ).all()

    return [
        EnrolledCourse(
            enrollment=enrollment,
            title=title,
            description=description,
            thumbnail=thumbnail,
            difficulty_level=difficulty_level,
            points_cost=points_cost,
            points_reward=points_reward,
            instructor_name=instructor_name,
            total_lessons=int(total_lessons),
            completed_lessons=int(completed_lessons),
        )
        for (
            enrollment,
            title,
            description,
            thumbnail,
            difficulty_level,
            points_cost,
            points_reward,
            instructor_name,
            total_lessons,
            completed_lessons,
        ) in rows
    ]
