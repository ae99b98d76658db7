"""Pydantic schemas for request/response validation."""
from routeguard.schemas.route import RouteCatalogResponse, RouteDetailResponse
from routeguard.schemas.token import (
    APITokenCreate,
    APITokenCreatedResponse,
    APITokenListResponse,
    APITokenResponse,
)

__all__ = [
    # Route schemas
    "RouteDetailResponse",
    "RouteCatalogResponse",
    # Token schemas
    "APITokenCreate",
    "APITokenResponse",
    "APITokenCreatedResponse",
    "APITokenListResponse",
]
