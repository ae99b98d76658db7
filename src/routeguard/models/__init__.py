"""Database models."""
from routeguard.models.token import APIToken, UserToken
from routeguard.models.user import User

__all__ = [
    "User",
    "UserToken",
    "APIToken",
]
