"""API token routes."""
from fastapi import APIRouter, HTTPException, status

from routeguard.api.deps import AppSettings, DatabaseSession, RouteRegistryDep, SessionScope
from routeguard.core.auth import create_api_token, list_api_tokens
from routeguard.core.exceptions import InvalidPermissionError
from routeguard.schemas.token import (
    APITokenCreate,
    APITokenCreatedResponse,
    APITokenListResponse,
)

router = APIRouter(prefix="/tokens", tags=["tokens"])


@router.put("", response_model=APITokenCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_token(
    token_data: APITokenCreate,
    scope: SessionScope,
    db: DatabaseSession,
    registry: RouteRegistryDep,
    settings: AppSettings,
):
    """
    Create a new API token.

    Args:
        token_data: Token title and permissions
        scope: Current user scope
        db: Database session
        registry: Route registry the permissions are checked against
        settings: Application settings

    Returns:
        Created token with plaintext value (shown once)

    Raises:
        HTTPException: If a permission group or action does not exist
    """
    try:
        plaintext_token, api_token = create_api_token(
            db,
            registry,
            scope.user,
            title=token_data.title,
            permissions=token_data.permissions,
            settings=settings,
        )
    except InvalidPermissionError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return APITokenCreatedResponse(
        id=api_token.id,
        title=api_token.title,
        token=plaintext_token,
        token_prefix=api_token.token_prefix,
        permissions=api_token.permissions,
        inserted_at=api_token.inserted_at,
    )


@router.get("", response_model=APITokenListResponse)
def list_tokens(scope: SessionScope, db: DatabaseSession):
    """
    List the API tokens of the current user.

    Args:
        scope: Current user scope
        db: Database session

    Returns:
        List of tokens without their plaintext values
    """
    return APITokenListResponse(data=list_api_tokens(db, scope.user))
