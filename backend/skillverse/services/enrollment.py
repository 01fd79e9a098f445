"""
Enrollment engine for Skillverse.

Enrolling is one transaction: validate the course, reject duplicates,
debit the course price, create the enrollment and seed one progress row
per lesson. A failure at any step leaves no trace.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from skillverse.core.database import atomic
from skillverse.core.exceptions import ConflictError, InvalidStateError, NotFoundError
from skillverse.models.enrollment import Enrollment
from skillverse.services import catalog, ledger, progress_store


logger = logging.getLogger(__name__)

ALREADY_ENROLLED = "Already enrolled in this course"


@dataclass
class EnrollmentResult:
    enrollment: Enrollment
    points_spent: int
    points_balance: int
    lessons_seeded: int


def enroll(db: Session, user_id: int, course_id: int) -> EnrollmentResult:
    """
    Enroll a user in a published course, paying its points cost.

    Checks run in this order and stop at the first failure:

    1. the course exists (``NotFoundError``) and is published
       (``InvalidStateError``);
    2. the user is not already enrolled (``ConflictError``);
    3. a priced course is covered by the balance
       (``InsufficientFundsError`` with ``required``/``available``).

    Args:
        db: Database session; committed on success, rolled back otherwise
        user_id: Authenticated user
        course_id: Course to enroll in

    Returns:
        EnrollmentResult: the new enrollment, points spent (0 for free
        courses), the resulting balance and the number of seeded rows
    """
    with atomic(db, "enroll"):
        course = catalog.get_course(db, course_id)
        if course is None:
            raise NotFoundError("Course", course_id)
        if not course.is_published:
            raise InvalidStateError("Cannot enroll in unpublished course")

        existing = db.scalar(
            select(Enrollment.id).where(
                Enrollment.user_id == user_id,
                Enrollment.course_id == course_id,
            )
        )
        if existing is not None:
            raise ConflictError(ALREADY_ENROLLED)

        cost = course.points_cost or 0
        if cost > 0:
            ledger.debit(db, user_id, cost, f"Enrolled in: {course.title}", reference_id=course.id)
        else:
            # Free course: still make sure the account exists
            ledger.get_balance(db, user_id)

        enrollment = Enrollment(user_id=user_id, course_id=course.id, progress_percentage=0)
        db.add(enrollment)
        try:
            db.flush()
        except IntegrityError as exc:
            # A concurrent request inserted the same (user, course) first
            raise ConflictError(ALREADY_ENROLLED) from exc

        lesson_ids = catalog.get_lesson_ids_for_course(db, course.id)
        seeded = progress_store.seed_lesson_progress(db, enrollment.id, lesson_ids)
        balance = ledger.get_balance(db, user_id)

    logger.info(
        f"User {user_id} enrolled in course {course_id} "
        f"(spent={cost}, balance={balance}, lessons={seeded})"
    )
    return EnrollmentResult(
        enrollment=enrollment,
        points_spent=cost,
        points_balance=balance,
        lessons_seeded=seeded,
    )
