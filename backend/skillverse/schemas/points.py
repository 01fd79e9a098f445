"""
Points balance and transaction history schemas for Skillverse.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict


class BalanceResponse(BaseModel):
    points: int


class TransactionOut(BaseModel):
    id: int
    amount: int
    kind: str
    description: str
    reference_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class TransactionListResponse(BaseModel):
    transactions: List[TransactionOut]
    pagination: Pagination
