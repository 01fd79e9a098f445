"""
Enrollment and lesson progress schemas for Skillverse.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class EnrollmentCreate(BaseModel):
    course_id: int = Field(..., ge=1)


class EnrollmentOut(BaseModel):
    id: int
    user_id: int
    course_id: int
    progress_percentage: int
    enrolled_at: datetime
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EnrollResponse(BaseModel):
    message: str
    enrollment: EnrollmentOut
    points_spent: int
    points_balance: int


class EnrolledCourseOut(BaseModel):
    """One row of the "my courses" list."""
    enrollment_id: int
    course_id: int
    title: str
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    difficulty_level: str
    points_cost: int
    points_reward: int
    instructor_name: Optional[str] = None
    progress_percentage: int
    enrolled_at: datetime
    completed_at: Optional[datetime] = None
    is_completed: bool
    total_lessons: int
    completed_lessons: int


class EnrolledCourseList(BaseModel):
    count: int
    enrollments: List[EnrolledCourseOut]


class LessonProgressOut(BaseModel):
    lesson_id: int
    title: str
    lesson_order: int
    duration_minutes: int
    is_completed: bool
    completed_at: Optional[datetime] = None
    time_spent_minutes: int
    last_accessed_at: Optional[datetime] = None


class CourseProgressResponse(BaseModel):
    enrollment: EnrollmentOut
    progress: List[LessonProgressOut]


class LessonCompleteRequest(BaseModel):
    time_spent_minutes: int = Field(0, ge=0)


class LessonTimeUpdate(BaseModel):
    time_spent_minutes: int = Field(..., ge=0)


class LessonCompleteResponse(BaseModel):
    """
    Result of completing a lesson.

    ``points_earned`` and ``points_balance`` are only present when this call
    completed the course.
    """
    message: str
    progress_percentage: int
    course_completed: bool
    points_earned: Optional[int] = None
    points_balance: Optional[int] = None


class MessageResponse(BaseModel):
    message: str
