"""
Progress engine for Skillverse.

Marks lessons complete, keeps the cached enrollment percentage in step
with the lesson rows and pays the course reward the first time an
enrollment reaches 100%.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from skillverse.core.config import settings
from skillverse.core.database import atomic, utcnow
from skillverse.core.exceptions import NotFoundError
from skillverse.models.course import Lesson
from skillverse.models.enrollment import Enrollment
from skillverse.models.ledger import TransactionKind
from skillverse.services import catalog, ledger, progress_store


logger = logging.getLogger(__name__)


@dataclass
class LessonCompletion:
    progress_percentage: int
    course_completed: bool
    points_earned: int = 0
    points_balance: Optional[int] = None  # Only set when the course was completed by this call


def _resolve_enrollment(db: Session, user_id: int, lesson_id: int) -> Enrollment:
    """
    Find the user's enrollment in the course that owns ``lesson_id``.

    The enrollment row is locked so completions on the same enrollment
    count lesson rows one at a time.
    """
    enrollment = db.scalars(
        select(Enrollment)
        .join(Lesson, Lesson.course_id == Enrollment.course_id)
        .where(Lesson.id == lesson_id, Enrollment.user_id == user_id)
        .with_for_update(of=Enrollment)
    ).first()
    if enrollment is None:
        raise NotFoundError("Lesson", lesson_id, "Lesson not found or not enrolled in course")
    return enrollment


def _ensure_progress_row(db: Session, enrollment_id: int, course_id: int, lesson_id: int) -> int:
    """
    Backfill rows when the lesson was added to the course after enrollment.

    Returns the number of rows inserted.
    """
    if progress_store.has_lesson_progress(db, enrollment_id, lesson_id):
        return 0
    if not settings.BACKFILL_LESSON_PROGRESS:
        logger.warning(f"Enrollment {enrollment_id} has no progress row for lesson {lesson_id}")
        return 0
    added = progress_store.backfill_lesson_progress(
        db, enrollment_id, catalog.get_lesson_ids_for_course(db, course_id)
    )
    logger.info(f"Backfilled {added} lesson progress rows for enrollment {enrollment_id}")
    return added


def complete_lesson(
    db: Session,
    user_id: int,
    lesson_id: int,
    time_spent_minutes: int = 0,
) -> LessonCompletion:
    """
    Mark a lesson complete for the user and settle course completion.

    Time spent is added to the lesson's running total. The course reward
    is credited only by the call that moves the enrollment's
    ``completed_at`` from NULL to a timestamp, so retries and repeat
    completions never pay twice.

    Raises:
        NotFoundError: the lesson does not exist or the user is not enrolled
    """
    if time_spent_minutes < 0:
        raise ValueError("time_spent_minutes cannot be negative")

    with atomic(db, "complete_lesson"):
        enrollment = _resolve_enrollment(db, user_id, lesson_id)
        enrollment_id, course_id = enrollment.id, enrollment.course_id
        _ensure_progress_row(db, enrollment_id, course_id, lesson_id)

        now = utcnow()
        progress_store.mark_lesson_completed(db, enrollment_id, lesson_id, time_spent_minutes, now)
        percentage = progress_store.refresh_progress_percentage(db, enrollment_id)

        course_completed = percentage == 100 and progress_store.mark_enrollment_completed(
            db, enrollment_id, now
        )

        points_earned = 0
        points_balance = None
        if course_completed:
            course = catalog.get_course(db, course_id)
            reward = course.points_reward or 0
            if reward > 0:
                ledger.credit(
                    db,
                    user_id,
                    reward,
                    TransactionKind.EARNED,
                    f"Completed: {course.title}",
                    reference_id=course_id,
                )
                points_earned = reward
            points_balance = ledger.get_balance(db, user_id)

    if course_completed:
        logger.info(f"User {user_id} completed course {course_id}, earned {points_earned} points")
    return LessonCompletion(
        progress_percentage=percentage,
        course_completed=course_completed,
        points_earned=points_earned,
        points_balance=points_balance,
    )


def update_lesson_time(db: Session, user_id: int, lesson_id: int, time_spent_minutes: int) -> None:
    """
    Record passive time on a lesson.

    Only ``time_spent_minutes`` and ``last_accessed_at`` change; completion
    and rewards are left alone. The cached percentage is refreshed only when
    missing lesson rows had to be backfilled, since that changes the
    denominator.

    Raises:
        NotFoundError: the lesson does not exist or the user is not enrolled
    """
    if time_spent_minutes < 0:
        raise ValueError("time_spent_minutes cannot be negative")

    with atomic(db, "update_lesson_time"):
        enrollment = _resolve_enrollment(db, user_id, lesson_id)
        enrollment_id = enrollment.id
        if _ensure_progress_row(db, enrollment_id, enrollment.course_id, lesson_id):
            progress_store.refresh_progress_percentage(db, enrollment_id)
        progress_store.add_time_spent(db, enrollment_id, lesson_id, time_spent_minutes)
