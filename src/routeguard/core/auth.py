"""Authentication utilities."""
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from routeguard.config import Settings
from routeguard.core.permissions import APIPermissions, validate_permissions
from routeguard.core.registry import RouteRegistry
from routeguard.core.security import (
    generate_access_token,
    generate_session_token,
    hash_token,
    is_session_token_expired,
)
from routeguard.models import APIToken, User, UserToken


def create_session_token(db: Session, user: User) -> str:
    """
    Create a session token for a user.

    Args:
        db: Database session
        user: User to create token for

    Returns:
        Plaintext token
    """
    plaintext_token, token_hash = generate_session_token()

    db.add(UserToken(user_id=user.id, token_hash=token_hash, context="session"))
    db.commit()

    return plaintext_token


def verify_session_token(db: Session, token: str, settings: Settings) -> User | None:
    """
    Verify a session token and return the associated user.

    Expired tokens are deleted.

    Args:
        db: Database session
        token: Plaintext token
        settings: Application settings

    Returns:
        User if valid, None otherwise
    """
    stmt = (
        select(UserToken)
        .where(UserToken.token_hash == hash_token(token), UserToken.context == "session")
        .options(joinedload(UserToken.user))
    )
    user_token = db.execute(stmt).scalar_one_or_none()

    if not user_token:
        return None

    if is_session_token_expired(user_token.inserted_at, settings):
        db.delete(user_token)
        db.commit()
        return None

    return user_token.user


def create_api_token(
    db: Session,
    registry: RouteRegistry,
    user: User,
    title: str,
    permissions: APIPermissions,
    settings: Settings,
) -> tuple[str, APIToken]:
    """
    Create an API token for a user.

    Args:
        db: Database session
        registry: Route registry the permissions are checked against
        user: User to create token for
        title: Human readable token title
        permissions: Route permissions granted to the token
        settings: Application settings

    Returns:
        Tuple of (plaintext_token, APIToken)

    Raises:
        InvalidPermissionError: If a permission group or action does not exist
    """
    validate_permissions(registry, permissions)

    plaintext_token, token_hash, token_prefix = generate_access_token(settings.api_token_prefix)

    api_token = APIToken(
        user_id=user.id,
        title=title,
        token_hash=token_hash,
        token_prefix=token_prefix,
        permissions={group: list(actions) for group, actions in permissions.items()},
    )
    db.add(api_token)
    db.commit()
    db.refresh(api_token)

    return plaintext_token, api_token


def list_api_tokens(db: Session, user: User) -> list[APIToken]:
    """Get all API tokens of a user."""
    stmt = select(APIToken).where(APIToken.user_id == user.id).order_by(APIToken.id)
    return list(db.execute(stmt).scalars().all())


def verify_api_token(db: Session, token: str) -> APIToken | None:
    """
    Verify an API token and return it with its user loaded.

    Args:
        db: Database session
        token: Plaintext token

    Returns:
        APIToken if valid, None otherwise
    """
    stmt = (
        select(APIToken)
        .where(APIToken.token_hash == hash_token(token))
        .options(joinedload(APIToken.user))
    )
    return db.execute(stmt).scalar_one_or_none()
