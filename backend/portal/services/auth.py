"""
Password hashing and signed access tokens.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import bcrypt
from fastapi import HTTPException, Request, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from portal.core.config import Settings

logger = logging.getLogger(__name__)


class TokenService:
    """Issues and verifies HS256 access tokens for portal users."""

    def __init__(self, settings: Settings):
        self.secret_key = settings.SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
        self.bcrypt_rounds = settings.BCRYPT_ROUNDS
        if settings.SECRET_KEY == "change-me":
            logger.warning("SECRET_KEY is not configured - tokens are signed with the default key")

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Malformed hash stored for this user
            logger.warning("Stored password hash could not be parsed")
            return False

    def create_access_token(self, user_id: int, email: str, role: str) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate an access token.

        Raises:
            HTTPException: 401 if the token is expired, malformed or unsigned
        """
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            logger.warning("Expired access token provided")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired"
            )
        except JWTError as e:
            logger.warning(f"Invalid access token: {e}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication token"
            )

        if not claims.get("sub"):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token missing subject (sub)"
            )
        return {
            "uid": int(claims["sub"]),
            "email": claims.get("email"),
            "role": claims.get("role"),
        }


# HTTP Bearer token scheme for FastAPI; missing headers are handled below
security = HTTPBearer(auto_error=False)

_FALLBACK_USER = {"uid": 0, "email": "dev@localhost", "role": "admin"}


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


# FastAPI dependency for authentication
async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token_service: TokenService = Depends(get_token_service),
) -> Dict[str, Any]:
    """
    FastAPI dependency returning the claims of the caller's access token.

    Raises:
        HTTPException: If the header is missing or the token does not verify
    """
    if credentials is None:
        if request.app.state.settings.ALLOW_AUTH_FALLBACK:
            logger.warning("No credentials - using default user (development fallback enabled)")
            return dict(_FALLBACK_USER)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing"
        )

    return token_service.verify_token(credentials.credentials)
