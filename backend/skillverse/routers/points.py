"""
Points router for Skillverse.

Exposes the current balance and the paginated transaction history.
"""

from typing import Dict, Any
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from skillverse.core.config import settings
from skillverse.core.database import get_db
from skillverse.models.user import User
from skillverse.routers.auth import get_current_user
from skillverse.schemas.points import BalanceResponse, TransactionListResponse
from skillverse.services import queries


router = APIRouter()


@router.get("", response_model=BalanceResponse)
async def get_points(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, int]:
    """
    Get the current user's points balance.
    """
    return {"points": queries.get_balance(db, current_user.id)}


@router.get("/transactions", response_model=TransactionListResponse)
async def get_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get the current user's point transactions, newest first.
    """
    result = queries.get_transactions(db, current_user.id, page=page, limit=limit)

    return {
        "transactions": result.transactions,
        "pagination": {
            "page": result.page,
            "limit": result.limit,
            "total": result.total,
            "pages": result.pages
        }
    }
