import pytest
from sqlalchemy import func, select

from skillverse.core.config import settings
from skillverse.core.exceptions import NotFoundError
from skillverse.models import Enrollment, LessonProgress, PointTransaction, TransactionKind
from skillverse.services import ledger, queries
from skillverse.services.enrollment import enroll
from skillverse.services.progress import complete_lesson, update_lesson_time


def _earned(db, user_id):
    return list(
        db.scalars(
            select(PointTransaction).where(
                PointTransaction.user_id == user_id,
                PointTransaction.kind == TransactionKind.EARNED.value,
            )
        )
    )


@pytest.fixture
def enrolled(db, make_user, make_course):
    """A learner enrolled in a one-lesson course that pays 75 points."""
    user = make_user(points=100)
    course = make_course(points_cost=0, points_reward=75, lessons=1)
    enrollment = enroll(db, user.id, course.id).enrollment
    return user, course, enrollment


def test_completing_only_lesson_completes_course(db, enrolled):
    user, course, enrollment = enrolled

    result = complete_lesson(db, user.id, course.lessons[0].id)

    assert result.course_completed is True
    assert result.progress_percentage == 100
    assert result.points_earned == 75
    assert result.points_balance == 175
    assert ledger.get_balance(db, user.id) == 175

    earned = _earned(db, user.id)
    assert len(earned) == 1
    assert earned[0].amount == 75
    assert earned[0].reference_id == course.id
    assert earned[0].description == f"Completed: {course.title}"
    assert db.get(Enrollment, enrollment.id).completed_at is not None


def test_repeat_completion_pays_nothing(db, enrolled):
    user, course, enrollment = enrolled
    lesson_id = course.lessons[0].id

    complete_lesson(db, user.id, lesson_id)
    completed_at = db.get(Enrollment, enrollment.id).completed_at

    again = complete_lesson(db, user.id, lesson_id)

    assert again.course_completed is False
    assert again.points_earned == 0
    assert again.points_balance is None
    assert again.progress_percentage == 100
    assert len(_earned(db, user.id)) == 1
    assert ledger.get_balance(db, user.id) == 175
    assert db.get(Enrollment, enrollment.id).completed_at == completed_at


def test_percentage_tracks_each_completion(db, make_user, make_course):
    user = make_user()
    course = make_course(points_reward=10, lessons=3)
    enroll(db, user.id, course.id)
    lesson_ids = [lesson.id for lesson in course.lessons]

    results = [complete_lesson(db, user.id, lesson_id) for lesson_id in lesson_ids]

    assert [r.progress_percentage for r in results] == [33, 67, 100]
    assert [r.course_completed for r in results] == [False, False, True]
    assert ledger.get_balance(db, user.id) == 10


def test_course_without_reward_still_completes(db, make_user, make_course):
    user = make_user(points=5)
    course = make_course(points_reward=0, lessons=1)
    enroll(db, user.id, course.id)

    result = complete_lesson(db, user.id, course.lessons[0].id)

    assert result.course_completed is True
    assert result.points_earned == 0
    assert result.points_balance == 5
    assert _earned(db, user.id) == []


def test_complete_lesson_adds_time(db, make_user, make_course):
    user = make_user()
    course = make_course(lessons=2)
    enrollment = enroll(db, user.id, course.id).enrollment
    lesson_id = course.lessons[0].id

    complete_lesson(db, user.id, lesson_id, time_spent_minutes=10)
    complete_lesson(db, user.id, lesson_id, time_spent_minutes=5)

    row = db.scalars(
        select(LessonProgress).where(
            LessonProgress.enrollment_id == enrollment.id,
            LessonProgress.lesson_id == lesson_id,
        )
    ).one()
    assert row.time_spent_minutes == 15


def test_complete_lesson_not_enrolled(db, make_user, make_course):
    user = make_user()
    course = make_course(lessons=1)

    with pytest.raises(NotFoundError) as exc_info:
        complete_lesson(db, user.id, course.lessons[0].id)

    assert exc_info.value.message == "Lesson not found or not enrolled in course"


def test_complete_unknown_lesson(db, enrolled):
    user, _, _ = enrolled

    with pytest.raises(NotFoundError):
        complete_lesson(db, user.id, 9999)


def test_negative_time_is_rejected(db, enrolled):
    user, course, _ = enrolled

    with pytest.raises(ValueError):
        complete_lesson(db, user.id, course.lessons[0].id, time_spent_minutes=-1)
    with pytest.raises(ValueError):
        update_lesson_time(db, user.id, course.lessons[0].id, -1)


def test_update_lesson_time_leaves_completion_alone(db, enrolled):
    user, course, enrollment = enrolled
    lesson_id = course.lessons[0].id

    update_lesson_time(db, user.id, lesson_id, 12)
    update_lesson_time(db, user.id, lesson_id, 3)

    progress = queries.get_course_progress(db, user.id, course.id)
    assert progress.lessons[0].progress.time_spent_minutes == 15
    assert progress.lessons[0].progress.is_completed is False
    assert progress.enrollment.progress_percentage == 0
    assert progress.enrollment.completed_at is None
    assert ledger.get_balance(db, user.id) == 100


def test_update_lesson_time_not_enrolled(db, make_user, make_course):
    user = make_user()
    course = make_course(lessons=1)

    with pytest.raises(NotFoundError):
        update_lesson_time(db, user.id, course.lessons[0].id, 5)


def test_lesson_added_after_enrollment_is_backfilled(db, make_user, make_course, add_lesson):
    user = make_user()
    course = make_course(points_reward=20, lessons=1)
    enrollment = enroll(db, user.id, course.id).enrollment
    late = add_lesson(course)

    result = complete_lesson(db, user.id, late.id)

    assert result.progress_percentage == 50
    assert result.course_completed is False
    rows = db.scalar(
        select(func.count()).select_from(LessonProgress).where(LessonProgress.enrollment_id == enrollment.id)
    )
    assert rows == 2


def test_time_on_late_lesson_refreshes_percentage(db, make_user, make_course, add_lesson):
    user = make_user()
    course = make_course(lessons=1)
    enrollment = enroll(db, user.id, course.id).enrollment
    complete_lesson(db, user.id, course.lessons[0].id)
    late = add_lesson(course)

    update_lesson_time(db, user.id, late.id, 4)

    assert db.get(Enrollment, enrollment.id).progress_percentage == 50


def test_lesson_added_after_course_completion_pays_no_second_reward(db, enrolled, add_lesson):
    user, course, _ = enrolled
    complete_lesson(db, user.id, course.lessons[0].id)
    late = add_lesson(course)

    result = complete_lesson(db, user.id, late.id)

    assert result.progress_percentage == 100
    assert result.course_completed is False
    assert len(_earned(db, user.id)) == 1


def test_backfill_disabled_leaves_rows_untouched(db, make_user, make_course, add_lesson, monkeypatch):
    monkeypatch.setattr(settings, "BACKFILL_LESSON_PROGRESS", False)
    user = make_user()
    course = make_course(lessons=1)
    enrollment = enroll(db, user.id, course.id).enrollment
    late = add_lesson(course)

    result = complete_lesson(db, user.id, late.id)

    assert result.progress_percentage == 0
    assert result.course_completed is False
    rows = db.scalar(
        select(func.count()).select_from(LessonProgress).where(LessonProgress.enrollment_id == enrollment.id)
    )
    assert rows == 1


def test_course_progress_matches_cached_percentage(db, make_user, make_course):
    user = make_user()
    course = make_course(lessons=4)
    enroll(db, user.id, course.id)
    for lesson in course.lessons[:3]:
        complete_lesson(db, user.id, lesson.id)

    progress = queries.get_course_progress(db, user.id, course.id)

    completed = sum(1 for view in progress.lessons if view.progress.is_completed)
    assert completed == progress.completed_lessons == 3
    assert progress.total_lessons == 4
    assert progress.enrollment.progress_percentage == round(100 * completed / 4)
