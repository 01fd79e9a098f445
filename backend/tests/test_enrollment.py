import pytest
from sqlalchemy import func, insert, select

from skillverse.core.database import utcnow
from skillverse.core.exceptions import (
    ConflictError,
    InsufficientFundsError,
    InternalError,
    InvalidStateError,
    NotFoundError,
)
from skillverse.models import Enrollment, LessonProgress, PointTransaction, TransactionKind
from skillverse.services import ledger, progress_store
from skillverse.services.enrollment import enroll


def _count(db, model, *criteria):
    return db.scalar(select(func.count()).select_from(model).where(*criteria))


def test_enroll_free_course_keeps_balance(db, make_user, make_course):
    user = make_user(points=500)
    course = make_course(points_cost=0, lessons=3)

    result = enroll(db, user.id, course.id)

    assert result.points_spent == 0
    assert result.points_balance == 500
    assert result.lessons_seeded == 3
    assert result.enrollment.progress_percentage == 0
    assert result.enrollment.completed_at is None
    assert _count(db, PointTransaction, PointTransaction.user_id == user.id) == 0


def test_enroll_paid_course_debits_and_logs(db, make_user, make_course):
    user = make_user(points=200)
    course = make_course(points_cost=100)

    result = enroll(db, user.id, course.id)

    assert result.points_spent == 100
    assert result.points_balance == 100
    assert ledger.get_balance(db, user.id) == 100

    transactions = list(db.scalars(select(PointTransaction).where(PointTransaction.user_id == user.id)))
    assert len(transactions) == 1
    assert transactions[0].kind == TransactionKind.SPENT.value
    assert transactions[0].amount == 100
    assert transactions[0].reference_id == course.id
    assert transactions[0].description == f"Enrolled in: {course.title}"


def test_enroll_one_point_short(db, make_user, make_course):
    user = make_user(points=49)
    course = make_course(points_cost=50)

    with pytest.raises(InsufficientFundsError) as exc_info:
        enroll(db, user.id, course.id)

    assert exc_info.value.required == 50
    assert exc_info.value.available == 49
    assert ledger.get_balance(db, user.id) == 49
    assert _count(db, Enrollment, Enrollment.user_id == user.id) == 0
    assert _count(db, PointTransaction, PointTransaction.user_id == user.id) == 0


def test_enroll_twice_is_a_conflict(db, make_user, make_course):
    user = make_user(points=300)
    course = make_course(points_cost=100)

    enroll(db, user.id, course.id)
    with pytest.raises(ConflictError):
        enroll(db, user.id, course.id)

    assert _count(db, Enrollment, Enrollment.user_id == user.id) == 1
    assert _count(db, PointTransaction, PointTransaction.user_id == user.id) == 1
    assert ledger.get_balance(db, user.id) == 200


def test_concurrent_duplicate_is_caught_by_unique_constraint(db, make_user, make_course, monkeypatch):
    user = make_user(points=100)
    course = make_course(points_cost=0)
    user_id, course_id = user.id, course.id
    real_get_balance = ledger.get_balance

    def racing_get_balance(session, uid):
        # Another request wins the race between the duplicate check and the insert
        session.execute(
            insert(Enrollment).values(
                user_id=uid, course_id=course_id, progress_percentage=0, enrolled_at=utcnow()
            )
        )
        monkeypatch.setattr(ledger, "get_balance", real_get_balance)
        return real_get_balance(session, uid)

    monkeypatch.setattr(ledger, "get_balance", racing_get_balance)

    with pytest.raises(ConflictError):
        enroll(db, user_id, course_id)

    assert _count(db, Enrollment, Enrollment.user_id == user_id) == 0


def test_enroll_unpublished_course(db, make_user, make_course):
    user = make_user(points=100)
    course = make_course(is_published=False)

    with pytest.raises(InvalidStateError):
        enroll(db, user.id, course.id)


def test_enroll_missing_course(db, make_user):
    user = make_user(points=100)

    with pytest.raises(NotFoundError) as exc_info:
        enroll(db, user.id, 4242)

    assert exc_info.value.resource == "Course"


def test_enroll_free_course_unknown_user(db, make_course):
    course = make_course(points_cost=0)

    with pytest.raises(NotFoundError):
        enroll(db, 777, course.id)

    assert _count(db, Enrollment) == 0


def test_failure_after_debit_rolls_everything_back(db, make_user, make_course, monkeypatch):
    user = make_user(points=200)
    course = make_course(points_cost=100, lessons=2)

    def broken_seed(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(progress_store, "seed_lesson_progress", broken_seed)

    with pytest.raises(InternalError) as exc_info:
        enroll(db, user.id, course.id)

    assert "disk full" not in exc_info.value.message
    assert ledger.get_balance(db, user.id) == 200
    assert _count(db, Enrollment) == 0
    assert _count(db, LessonProgress) == 0
    assert _count(db, PointTransaction) == 0


def test_enroll_seeds_lessons_existing_at_that_moment(db, make_user, make_course, add_lesson):
    user = make_user()
    course = make_course(lessons=2)

    result = enroll(db, user.id, course.id)
    add_lesson(course)

    assert _count(db, LessonProgress, LessonProgress.enrollment_id == result.enrollment.id) == 2
