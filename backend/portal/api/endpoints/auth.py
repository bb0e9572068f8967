import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.database import get_session
from portal.models.user import User
from portal.schemas.auth import Credentials, UserOut, AuthResponse
from portal.services.auth import TokenService, get_token_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _auth_response(user: User, token_service: TokenService) -> AuthResponse:
    token = token_service.create_access_token(user.id, user.email, user.role)
    return AuthResponse(user=UserOut.model_validate(user), token=token)


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    payload: Credentials,
    session: AsyncSession = Depends(get_session),
    token_service: TokenService = Depends(get_token_service),
):
    """Register a user and return an access token for immediate login."""
    user = User(
        email=payload.email,
        password_hash=token_service.hash_password(payload.password),
        role=payload.role,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.info(f"Signup rejected, email already registered: {payload.email}")
        raise HTTPException(status_code=409, detail="This email is already registered.")
    except Exception as e:
        await session.rollback()
        logger.error(f"Signup error: {e}")
        raise HTTPException(status_code=500, detail="Could not create account.")

    await session.refresh(user)
    return _auth_response(user, token_service)


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: Credentials,
    session: AsyncSession = Depends(get_session),
    token_service: TokenService = Depends(get_token_service),
):
    """Check credentials for the given email and role."""
    result = await session.execute(
        select(User).where(User.email == payload.email, User.role == payload.role)
    )
    user = result.scalar_one_or_none()

    # Same answer for unknown email, role mismatch and wrong password
    if user is None or not token_service.verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials or role mismatch.")

    return _auth_response(user, token_service)
