"""
Core module for the Skillverse backend.

This module contains core functionality including:
- Configuration management
- Database connections and the transaction helper
- Domain errors and their HTTP mapping
- Security utilities (JWT, password hashing)
"""

from .config import settings
from .database import get_db, engine, SessionLocal, atomic
from .exceptions import (
    LedgerError,
    NotFoundError,
    InvalidStateError,
    ConflictError,
    InsufficientFundsError,
    InternalError
)
from .security import (
    create_access_token,
    verify_password,
    get_password_hash,
    verify_token
)

__all__ = [
    "settings",
    "get_db",
    "engine",
    "SessionLocal",
    "atomic",
    "LedgerError",
    "NotFoundError",
    "InvalidStateError",
    "ConflictError",
    "InsufficientFundsError",
    "InternalError",
    "create_access_token",
    "verify_password",
    "get_password_hash",
    "verify_token"
]
