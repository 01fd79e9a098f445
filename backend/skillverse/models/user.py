"""
User model for Skillverse.

Defines the User table with authentication fields, the role used for
route gating, and the denormalized points balance.
"""

from datetime import datetime
from typing import Optional
from enum import Enum
from sqlalchemy import (
    Boolean, Integer, String, DateTime, Text,
    Index, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from skillverse.core.database import Base


class UserRole(str, Enum):
    """Roles a user account can hold."""
    LEARNER = "learner"
    INSTRUCTOR = "instructor"
    BOTH = "both"


class User(Base):
    """
    User model for authentication and the points balance.

    ``points`` is written only through ``skillverse.services.ledger``.
    """
    __tablename__ = "users"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Authentication fields
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Profile fields
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    profile_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Access
    role: Mapped[str] = mapped_column(String(20), default=UserRole.LEARNER.value, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Points balance
    points: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)

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
    enrollments = relationship("Enrollment", back_populates="user", cascade="all, delete-orphan")
    point_transactions = relationship("PointTransaction", back_populates="user", cascade="all, delete-orphan")

    # Table constraints
    __table_args__ = (
        CheckConstraint("points >= 0", name="check_points_non_negative"),
        CheckConstraint("role IN ('learner', 'instructor', 'both')", name="check_user_role"),
        Index("idx_user_email_active", "email", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', points={self.points})>"

    @property
    def is_learner(self) -> bool:
        return self.role in (UserRole.LEARNER.value, UserRole.BOTH.value)
