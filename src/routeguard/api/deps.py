"""FastAPI dependencies for authentication and database."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from routeguard.config import Settings, get_settings
from routeguard.core.auth import verify_api_token, verify_session_token
from routeguard.core.authorizer import authorize
from routeguard.core.registry import RouteRegistry
from routeguard.core.scope import Scope
from routeguard.database import get_db

# HTTP Bearer token authentication
bearer_scheme = HTTPBearer(auto_error=False)


def get_route_registry(request: Request) -> RouteRegistry:
    """
    Get the route registry built during application startup.

    Raises:
        HTTPException: If the application has not finished starting
    """
    registry = getattr(request.app.state, "route_registry", None)
    if registry is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Route registry is not initialized",
        )
    return registry


def _route_path(request: Request) -> str:
    """Path template of the matched route, falls back to the request path."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def get_current_scope(
    request: Request,
    token: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    registry: Annotated[RouteRegistry, Depends(get_route_registry)],
) -> Scope:
    """
    Get the current user from a session token or an API token.

    API tokens are only accepted for routes their permissions grant.

    Args:
        request: Current request
        token: Bearer token from Authorization header
        db: Database session
        settings: Application settings
        registry: Route registry

    Returns:
        Scope object with current user

    Raises:
        HTTPException: If the token is invalid or missing (401) or the API
            token may not use the route (403)
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    api_token = None
    if token.credentials.startswith(settings.api_token_prefix):
        api_token = verify_api_token(db, token.credentials)

    if api_token:
        if not authorize(registry, _route_path(request), request.method, api_token):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="The API token is not allowed to use this route",
            )

        return Scope(user=api_token.user, api_token=api_token)

    user = verify_session_token(db, token.credentials, settings)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Scope(user=user)


def get_session_scope(scope: Annotated[Scope, Depends(get_current_scope)]) -> Scope:
    """
    Get the current user, rejecting API tokens.

    Raises:
        HTTPException: If the request was made with an API token
    """
    if not scope.is_session:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="This route requires a user session",
        )
    return scope


# Type aliases for cleaner dependency injection
CurrentScope = Annotated[Scope, Depends(get_current_scope)]
SessionScope = Annotated[Scope, Depends(get_session_scope)]
DatabaseSession = Annotated[Session, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]
RouteRegistryDep = Annotated[RouteRegistry, Depends(get_route_registry)]
