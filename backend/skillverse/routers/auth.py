"""
Authentication router for Skillverse.

Handles user registration (with the welcome bonus), login and the
current-user endpoint, plus the dependencies other routers use to
resolve the authenticated user.
"""

from datetime import timedelta
from typing import Dict, Any
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from skillverse.core.database import get_db, atomic
from skillverse.core.exceptions import InvalidStateError
from skillverse.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    verify_token
)
from skillverse.core.config import settings
from skillverse.models.user import User
from skillverse.models.ledger import TransactionKind
from skillverse.schemas.auth import UserRegister, Token, UserResponse
from skillverse.services import ledger


logger = logging.getLogger(__name__)

router = APIRouter()

# OAuth2 scheme for token authentication
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")

WELCOME_BONUS_DESCRIPTION = "Welcome bonus - initial points"


# Dependencies
def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = verify_token(token)
    if payload is None:
        raise credentials_exception

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise credentials_exception

    user = db.get(User, int(subject))
    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    return user


def get_current_learner(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current user, requiring the learner role.
    """
    if not current_user.is_learner:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Learner access required"
        )
    return current_user


# Endpoints
@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: Session = Depends(get_db)
) -> User:
    """
    Register a new user and credit the welcome bonus.

    The account and its bonus transaction are created together; a user
    never exists without the opening ``bonus`` entry.
    """
    existing_user = db.query(User).filter(User.email == user_data.email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    with atomic(db, "register"):
        new_user = User(
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            full_name=user_data.full_name,
            role=user_data.role.value,
            is_active=True,
            points=0
        )
        db.add(new_user)
        try:
            db.flush()
        except IntegrityError as exc:
            raise InvalidStateError("Email already registered") from exc

        if settings.WELCOME_BONUS_POINTS > 0:
            ledger.credit(
                db,
                new_user.id,
                settings.WELCOME_BONUS_POINTS,
                TransactionKind.BONUS,
                WELCOME_BONUS_DESCRIPTION
            )

    db.refresh(new_user)
    logger.info(f"Registered user {new_user.id} with {new_user.points} points")
    return new_user


@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    OAuth2 compatible login endpoint. ``username`` carries the email.
    """
    user = db.query(User).filter(User.email == form_data.username).first()

    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated"
        )

    access_token = create_access_token(
        subject=user.id,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        additional_claims={"email": user.email, "role": user.role}
    )

    return {
        "access_token": access_token,
        "token_type": "bearer"
    }


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current user information, including the points balance.
    """
    return current_user
