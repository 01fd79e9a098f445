"""
Enrollments router for Skillverse.

Handles enrolling in courses with points, listing a learner's courses,
per-course lesson progress, lesson completion and time tracking.
"""

from typing import Dict, Any, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from skillverse.core.database import get_db
from skillverse.models.user import User
from skillverse.routers.auth import get_current_learner
from skillverse.schemas.enrollment import (
    EnrollmentCreate,
    EnrollResponse,
    EnrolledCourseList,
    CourseProgressResponse,
    LessonCompleteRequest,
    LessonCompleteResponse,
    LessonTimeUpdate,
    MessageResponse
)
from skillverse.services import enrollment as enrollment_service
from skillverse.services import progress as progress_service
from skillverse.services import queries


router = APIRouter()


@router.post("", response_model=EnrollResponse, status_code=status.HTTP_201_CREATED)
async def enroll_in_course(
    enrollment_data: EnrollmentCreate,
    current_user: User = Depends(get_current_learner),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Enroll the current learner in a published course, spending its points cost.
    """
    result = enrollment_service.enroll(db, current_user.id, enrollment_data.course_id)

    return {
        "message": "Successfully enrolled in course",
        "enrollment": result.enrollment,
        "points_spent": result.points_spent,
        "points_balance": result.points_balance
    }


@router.get("", response_model=EnrolledCourseList)
async def get_my_enrollments(
    current_user: User = Depends(get_current_learner),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    List the current learner's enrolled courses, most recent first.
    """
    courses = queries.get_enrolled_courses(db, current_user.id)

    enrollments = []
    for course in courses:
        enrollments.append({
            "enrollment_id": course.enrollment.id,
            "course_id": course.enrollment.course_id,
            "title": course.title,
            "description": course.description,
            "thumbnail": course.thumbnail,
            "difficulty_level": course.difficulty_level,
            "points_cost": course.points_cost,
            "points_reward": course.points_reward,
            "instructor_name": course.instructor_name,
            "progress_percentage": course.enrollment.progress_percentage,
            "enrolled_at": course.enrolled_at,
            "completed_at": course.enrollment.completed_at,
            "is_completed": course.enrollment.is_completed,
            "total_lessons": course.total_lessons,
            "completed_lessons": course.completed_lessons
        })

    return {
        "count": len(enrollments),
        "enrollments": enrollments
    }


@router.get("/course/{course_id}", response_model=CourseProgressResponse)
async def get_course_progress(
    course_id: int,
    current_user: User = Depends(get_current_learner),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get the learner's enrollment in a course with per-lesson progress.
    """
    course_progress = queries.get_course_progress(db, current_user.id, course_id)

    progress = []
    for view in course_progress.lessons:
        progress.append({
            "lesson_id": view.progress.lesson_id,
            "title": view.title,
            "lesson_order": view.lesson_order,
            "duration_minutes": view.duration_minutes,
            "is_completed": view.progress.is_completed,
            "completed_at": view.progress.completed_at,
            "time_spent_minutes": view.progress.time_spent_minutes,
            "last_accessed_at": view.progress.last_accessed_at
        })

    return {
        "enrollment": course_progress.enrollment,
        "progress": progress
    }


@router.put(
    "/lesson/{lesson_id}/complete",
    response_model=LessonCompleteResponse,
    response_model_exclude_none=True
)
async def complete_lesson(
    lesson_id: int,
    completion: Optional[LessonCompleteRequest] = None,
    current_user: User = Depends(get_current_learner),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Mark a lesson as completed, paying the course reward on first completion.
    """
    time_spent = completion.time_spent_minutes if completion else 0
    result = progress_service.complete_lesson(db, current_user.id, lesson_id, time_spent)

    response = {
        "message": "Lesson marked as completed",
        "progress_percentage": result.progress_percentage,
        "course_completed": result.course_completed
    }
    if result.course_completed:
        response["message"] = "Course completed!"
        response["points_earned"] = result.points_earned
        response["points_balance"] = result.points_balance

    return response


@router.put("/lesson/{lesson_id}/progress", response_model=MessageResponse)
async def update_lesson_progress(
    lesson_id: int,
    time_update: LessonTimeUpdate,
    current_user: User = Depends(get_current_learner),
    db: Session = Depends(get_db)
) -> Dict[str, str]:
    """
    Record time spent on a lesson without completing it.
    """
    progress_service.update_lesson_time(
        db, current_user.id, lesson_id, time_update.time_spent_minutes
    )

    return {"message": "Progress updated"}
