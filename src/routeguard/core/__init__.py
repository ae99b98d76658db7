"""Core application modules."""
from routeguard.core.auth import (
    create_api_token,
    create_session_token,
    list_api_tokens,
    verify_api_token,
    verify_session_token,
)
from routeguard.core.authorizer import authorize
from routeguard.core.classifier import RouteGroup, classify
from routeguard.core.exceptions import (
    InvalidPermissionError,
    RouteGuardError,
    UnclassifiableRouteError,
)
from routeguard.core.permissions import APIPermissions, validate_permissions
from routeguard.core.registry import (
    RouteDetail,
    RouteKind,
    RouteRegistration,
    RouteRegistry,
)
from routeguard.core.scope import Scope

__all__ = [
    # Auth
    "create_session_token",
    "verify_session_token",
    "create_api_token",
    "list_api_tokens",
    "verify_api_token",
    "Scope",
    # Route permissions
    "RouteGroup",
    "classify",
    "RouteKind",
    "RouteDetail",
    "RouteRegistration",
    "RouteRegistry",
    "APIPermissions",
    "validate_permissions",
    "authorize",
    # Errors
    "RouteGuardError",
    "UnclassifiableRouteError",
    "InvalidPermissionError",
]
