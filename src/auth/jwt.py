"""JWT access tokens identifying the calling user.

Tokens are issued by the identity service; this service only needs to
verify them. ``create_access_token`` exists for local tooling and tests.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from src.settings import Settings, load_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPayload:
    """Decoded JWT token payload."""

    sub: UUID
    exp: datetime
    token_type: str


def _secret(settings: Settings) -> str:
    if not settings.jwt_secret_key:
        raise ValueError("jwt_secret_key must be configured in settings")
    return settings.jwt_secret_key


def create_access_token(user_id: UUID, settings: Optional[Settings] = None) -> str:
    """Create a signed access token whose subject is ``user_id``.

    Raises:
        ValueError: If jwt_secret_key is not configured.
    """
    settings = settings or load_settings()
    secret = _secret(settings)

    exp = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    payload = {"sub": str(user_id), "exp": exp, "type": "access"}

    token: str = jwt.encode(payload, secret, algorithm=settings.jwt_algorithm)
    logger.info(f"access_token_created: user_id={user_id}, exp={exp.isoformat()}")
    return token


def decode_token(token: str, settings: Optional[Settings] = None) -> TokenPayload:
    """Decode and validate a JWT token.

    Raises:
        ValueError: If the token is expired, invalid, or malformed.
    """
    settings = settings or load_settings()
    secret = _secret(settings)

    try:
        payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
        return TokenPayload(
            sub=UUID(payload["sub"]),
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            token_type=payload.get("type", "access"),
        )
    except ExpiredSignatureError as e:
        logger.warning(f"token_expired: error={str(e)}")
        raise ValueError("Token has expired") from e
    except JWTError as e:
        logger.warning(f"token_invalid: error={str(e)}")
        raise ValueError("Invalid token") from e
    except (KeyError, ValueError) as e:
        logger.warning(f"token_parse_error: error={str(e)}")
        raise ValueError("Invalid token") from e
