"""Authentication utilities."""

from src.auth.dependencies import get_current_user
from src.auth.jwt import TokenPayload, create_access_token, decode_token

__all__ = [
    "create_access_token",
    "decode_token",
    "get_current_user",
    "TokenPayload",
]
