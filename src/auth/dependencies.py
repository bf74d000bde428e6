"""FastAPI dependency resolving the authenticated user."""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, get_settings
from src.auth.jwt import TokenPayload, decode_token
from src.db.repositories.user_repo import UserRepository
from src.db.models.user import UserORM
from src.settings import Settings

logger = logging.getLogger(__name__)


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> UserORM:
    """Extract and validate the user from a ``Bearer <jwt>`` Authorization header.

    Raises:
        HTTPException: 401 if the header is missing, malformed, invalid, or
            expired, or if the user does not exist or is inactive.
    """
    if not authorization:
        logger.warning("get_current_user_error: reason=missing_authorization_header")
        raise HTTPException(status_code=401, detail="Authorization header required")

    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.warning("get_current_user_error: reason=malformed_authorization_header")
        raise HTTPException(status_code=401, detail="Malformed Authorization header")

    try:
        payload: TokenPayload = decode_token(parts[1], settings)
    except ValueError as e:
        logger.warning(f"get_current_user_error: reason=jwt_decode_failed, error={str(e)}")
        raise HTTPException(status_code=401, detail=str(e)) from e

    if payload.token_type != "access":
        logger.warning(
            f"get_current_user_error: reason=invalid_token_type, type={payload.token_type}"
        )
        raise HTTPException(status_code=401, detail="Invalid token type")

    user = await UserRepository(db).get_by_id(payload.sub)
    if user is None:
        logger.warning(f"get_current_user_error: reason=user_not_found, user_id={payload.sub}")
        raise HTTPException(status_code=401, detail="User not found")

    if not user.is_active:
        logger.warning(f"get_current_user_error: reason=user_inactive, user_id={user.id}")
        raise HTTPException(status_code=401, detail="User account is inactive")

    logger.debug(f"get_current_user_success: user_id={user.id}")
    return user
