"""
Point transaction log for Skillverse.

Every change to ``User.points`` appends exactly one row here. Rows are
never updated or deleted.
"""

from datetime import datetime
from typing import Optional
from enum import Enum
from sqlalchemy import (
    Integer, String, DateTime,
    ForeignKey, Index, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from skillverse.core.database import Base, utcnow


class TransactionKind(str, Enum):
    """Direction of a balance change. Amounts are always stored positive."""
    EARNED = "earned"
    SPENT = "spent"
    BONUS = "bonus"

    @property
    def is_credit(self) -> bool:
        return self is not TransactionKind.SPENT


class PointTransaction(Base):
    """
    Immutable audit-log entry for one balance mutation.
    """
    __tablename__ = "point_transactions"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Owner
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    # Movement
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    reference_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # Course the movement relates to

    # Timestamp
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False
    )

    # Relationships
    user = relationship("User", back_populates="point_transactions")

    # Table constraints
    __table_args__ = (
        CheckConstraint("amount > 0", name="check_transaction_amount_positive"),
        CheckConstraint("kind IN ('earned', 'spent', 'bonus')", name="check_transaction_kind"),
        Index("idx_point_tx_user_created", "user_id", "created_at"),
        Index("idx_point_tx_kind", "kind"),
    )

    def __repr__(self) -> str:
        return f"<PointTransaction(user_id={self.user_id}, amount={self.amount}, kind='{self.kind}')>"

    @property
    def signed_amount(self) -> int:
        """Amount with the sign of its effect on the balance."""
        return -self.amount if self.kind == TransactionKind.SPENT.value else self.amount
