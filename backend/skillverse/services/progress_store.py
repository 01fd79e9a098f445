"""
Progress store for Skillverse enrollments.

Owns the ``lesson_progress`` rows and the cached
``enrollments.progress_percentage``. Nothing here commits.
"""

from datetime import datetime
from typing import Iterable, Tuple

from sqlalchemy import case, func, insert, select, update
from sqlalchemy.orm import Session

from skillverse.core.database import utcnow
from skillverse.models.enrollment import Enrollment, LessonProgress


def compute_percentage(completed: int, total: int) -> int:
    """
    Whole-number completion percentage, rounding halves up.

    >>> compute_percentage(1, 8)
    13
    >>> compute_percentage(0, 0)
    0
    """
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


def seed_lesson_progress(db: Session, enrollment_id: int, lesson_ids: Iterable[int]) -> int:
    """Bulk-insert one not-completed row per lesson. Returns the row count."""
    rows = [
        {"enrollment_id": enrollment_id, "lesson_id": lesson_id, "is_completed": False, "time_spent_minutes": 0}
        for lesson_id in lesson_ids
    ]
    if rows:
        db.execute(insert(LessonProgress), rows)
    return len(rows)


def has_lesson_progress(db: Session, enrollment_id: int, lesson_id: int) -> bool:
    return db.scalar(
        select(LessonProgress.id).where(
            LessonProgress.enrollment_id == enrollment_id,
            LessonProgress.lesson_id == lesson_id,
        )
    ) is not None


def backfill_lesson_progress(db: Session, enrollment_id: int, lesson_ids: Iterable[int]) -> int:
    """Insert rows for lessons the enrollment has no row for yet."""
    existing = set(
        db.scalars(
            select(LessonProgress.lesson_id).where(LessonProgress.enrollment_id == enrollment_id)
        )
    )
    missing = [lesson_id for lesson_id in lesson_ids if lesson_id not in existing]
    return seed_lesson_progress(db, enrollment_id, missing)


def mark_lesson_completed(
    db: Session,
    enrollment_id: int,
    lesson_id: int,
    time_spent_minutes: int = 0,
    now: datetime | None = None,
) -> bool:
    """
    Flag a lesson completed and add to its time spent.

    Repeat completions do not move ``completed_at``: a lesson keeps the
    timestamp of its first completion, while time spent and
    ``last_accessed_at`` still update. Returns False when the enrollment has
    no row for the lesson.
    """
    now = now or utcnow()
    result = db.execute(
        update(LessonProgress)
        .where(
            LessonProgress.enrollment_id == enrollment_id,
            LessonProgress.lesson_id == lesson_id,
        )
        .values(
            is_completed=True,
            completed_at=func.coalesce(LessonProgress.completed_at, now),
            time_spent_minutes=LessonProgress.time_spent_minutes + time_spent_minutes,
            last_accessed_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def add_time_spent(
    db: Session,
    enrollment_id: int,
    lesson_id: int,
    time_spent_minutes: int,
    now: datetime | None = None,
) -> bool:
    """Add minutes and stamp last access without touching completion."""
    result = db.execute(
        update(LessonProgress)
        .where(
            LessonProgress.enrollment_id == enrollment_id,
            LessonProgress.lesson_id == lesson_id,
        )
        .values(
            time_spent_minutes=LessonProgress.time_spent_minutes + time_spent_minutes,
            last_accessed_at=now or utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def count_progress(db: Session, enrollment_id: int) -> Tuple[int, int]:
    """Return ``(completed, total)`` lesson_progress rows for an enrollment."""
    total, completed = db.execute(
        select(
            func.count(LessonProgress.id),
            func.coalesce(func.sum(case((LessonProgress.is_completed.is_(True), 1), else_=0)), 0),
        ).where(LessonProgress.enrollment_id == enrollment_id)
    ).one()
    return int(completed), int(total)


def refresh_progress_percentage(db: Session, enrollment_id: int) -> int:
    """Recompute the cached percentage from the rows and store it."""
    completed, total = count_progress(db, enrollment_id)
    percentage = compute_percentage(completed, total)
    db.execute(
        update(Enrollment)
        .where(Enrollment.id == enrollment_id)
        .values(progress_percentage=percentage)
        .execution_options(synchronize_session=False)
    )
    return percentage


def mark_enrollment_completed(db: Session, enrollment_id: int, now: datetime | None = None) -> bool:
    """
    Stamp ``completed_at`` if it is still NULL.

    Returns True only for the call that performs the NULL to non-NULL
    transition; this is what gates the completion reward.
    """
    result = db.execute(
        update(Enrollment)
        .where(Enrollment.id == enrollment_id, Enrollment.completed_at.is_(None))
        .values(completed_at=now or utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
