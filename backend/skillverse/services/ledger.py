"""
Ledger store for Skillverse points.

The only code allowed to change ``users.points``. Every change is a single
conditional UPDATE paired with one appended ``point_transactions`` row, so
callers get the balance check and the mutation in one statement. None of
these functions commit; run them inside ``skillverse.core.database.atomic``.
"""

import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from skillverse.core.exceptions import InsufficientFundsError, NotFoundError
from skillverse.models.ledger import PointTransaction, TransactionKind
from skillverse.models.user import User


logger = logging.getLogger(__name__)


def get_balance(db: Session, user_id: int) -> int:
    """
    Read the current balance straight from the database.

    Raises:
        NotFoundError: the user does not exist
    """
    points = db.scalar(select(User.points).where(User.id == user_id))
    if points is None:
        raise NotFoundError("User", user_id)
    return points


def _append(
    db: Session,
    user_id: int,
    amount: int,
    kind: TransactionKind,
    description: str,
    reference_id: Optional[int],
) -> PointTransaction:
    entry = PointTransaction(
        user_id=user_id,
        amount=amount,
        kind=kind.value,
        description=description[:255],
        reference_id=reference_id,
    )
    db.add(entry)
    db.flush()
    return entry


def credit(
    db: Session,
    user_id: int,
    amount: int,
    kind: TransactionKind,
    description: str,
    reference_id: Optional[int] = None,
) -> PointTransaction:
    """
    Increase a balance and log it as ``earned`` or ``bonus``.

    Raises:
        ValueError: non-positive amount or a debit kind
        NotFoundError: the user does not exist
    """
    if amount <= 0:
        raise ValueError(f"Credit amount must be positive, got {amount}")
    if not kind.is_credit:
        raise ValueError(f"{kind.value} is not a credit kind")

    result = db.execute(
        update(User)
        .where(User.id == user_id)
        .values(points=User.points + amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise NotFoundError("User", user_id)

    entry = _append(db, user_id, amount, kind, description, reference_id)
    logger.info(f"Credited {amount} points ({kind.value}) to user {user_id}")
    return entry


def debit(
    db: Session,
    user_id: int,
    amount: int,
    description: str,
    reference_id: Optional[int] = None,
) -> PointTransaction:
    """
    Decrease a balance only if it covers ``amount`` and log it as ``spent``.

    The check and the decrement are one statement
    (``... WHERE id = :id AND points >= :amount``), so two concurrent debits
    can never both pass against the same points.

    Raises:
        ValueError: non-positive amount
        NotFoundError: the user does not exist
        InsufficientFundsError: the balance is below ``amount``
    """
    if amount <= 0:
        raise ValueError(f"Debit amount must be positive, got {amount}")

    result = db.execute(
        update(User)
        .where(User.id == user_id, User.points >= amount)
        .values(points=User.points - amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        available = get_balance(db, user_id)
        raise InsufficientFundsError(required=amount, available=available)

    entry = _append(db, user_id, amount, TransactionKind.SPENT, description, reference_id)
    logger.info(f"Debited {amount} points from user {user_id}")
    return entry
