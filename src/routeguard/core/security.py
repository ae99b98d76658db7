"""Security utilities for token generation and hashing."""

import base64
import hashlib
import secrets
from datetime import UTC, datetime, timedelta

from routeguard.config import Settings


def generate_random_token(num_bytes: int = 32) -> bytes:
    """Generate a random token of specified byte length."""
    return secrets.token_bytes(num_bytes)


def _encode_token(token_bytes: bytes) -> str:
    return base64.urlsafe_b64encode(token_bytes).decode("utf-8").rstrip("=")


def generate_access_token(prefix: str = "tk_") -> tuple[str, bytes, str]:
    """
    Generate an API access token.

    Args:
        prefix: Marker prepended to the plaintext so API tokens can be told
            apart from session tokens

    Returns:
        tuple: (plaintext_token, token_hash, token_prefix)
            - plaintext_token: Prefixed Base64URL encoded token (shown once)
            - token_hash: SHA256 hash of plaintext (stored in DB)
            - token_prefix: First 8 chars after the marker for display
    """
    plaintext_token = prefix + _encode_token(generate_random_token(32))
    token_hash = hash_token(plaintext_token)
    token_prefix = plaintext_token[len(prefix):len(prefix) + 8]

    return plaintext_token, token_hash, token_prefix


def generate_session_token() -> tuple[str, bytes]:
    """Generate a session token, returns the plaintext and its hash."""
    plaintext_token = _encode_token(generate_random_token(32))
    return plaintext_token, hash_token(plaintext_token)


def hash_token(token: str) -> bytes:
    """Hash a token using SHA256."""
    return hashlib.sha256(token.encode("utf-8")).digest()


def is_session_token_expired(token_created_at: datetime, settings: Settings) -> bool:
    """Check if a session token has expired."""
    expiration_threshold = timedelta(days=settings.session_token_expire_days)
    age = datetime.now(UTC) - token_created_at.replace(tzinfo=UTC)
    return age > expiration_threshold
