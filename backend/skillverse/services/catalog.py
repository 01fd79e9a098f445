"""Read-only view of the course catalog used by the ledger engines."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from skillverse.models.course import Course, Lesson


def get_course(db: Session, course_id: int) -> Optional[Course]:
    return db.get(Course, course_id)


def get_lessons_for_course(db: Session, course_id: int) -> List[Lesson]:
    """Lessons of a course in display order."""
    return list(
        db.scalars(
            select(Lesson)
            .where(Lesson.course_id == course_id)
            .order_by(Lesson.lesson_order, Lesson.id)
        )
    )


def get_lesson_ids_for_course(db: Session, course_id: int) -> List[int]:
    return [lesson.id for lesson in get_lessons_for_course(db, course_id)]
