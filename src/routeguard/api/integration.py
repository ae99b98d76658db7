"""Collection of FastAPI routes into the API token route registry."""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from fastapi import FastAPI
from fastapi.dependencies.models import Dependant
from fastapi.routing import APIRoute

from routeguard.api.deps import get_current_scope
from routeguard.config import Settings
from routeguard.core.registry import RouteKind, RouteRegistration, RouteRegistry

logger = logging.getLogger(__name__)

ROUTE_KIND_ATTRIBUTE = "__route_kind__"

EndpointT = TypeVar("EndpointT", bound=Callable[..., Any])


def route_kind(kind: RouteKind) -> Callable[[EndpointT], EndpointT]:
    """
    Tag an endpoint with the kind of handler it is.

    Apply it below the router decorator::

        @router.put("/projects/{project}/tasks")
        @route_kind(RouteKind.CREATE)
        def create_task(...): ...

    Untagged endpoints are treated as generic routes.
    """

    def decorator(endpoint: EndpointT) -> EndpointT:
        setattr(endpoint, ROUTE_KIND_ATTRIBUTE, kind)
        return endpoint

    return decorator


def get_route_kind(route: APIRoute) -> RouteKind:
    """Get the kind an endpoint was tagged with."""
    return getattr(route.endpoint, ROUTE_KIND_ATTRIBUTE, RouteKind.GENERIC)


def _depends_on(dependant: Dependant, call: Callable[..., Any]) -> bool:
    for dependency in dependant.dependencies:
        if dependency.call is call or _depends_on(dependency, call):
            return True
    return False


def requires_session_auth(route: APIRoute) -> bool:
    """Check whether a route authenticates its callers through the session dependency."""
    return _depends_on(route.dependant, get_current_scope)


def build_route_registry(app: FastAPI, settings: Settings) -> RouteRegistry:
    """
    Build the route registry from all routes of an application.

    Methods of a route are registered in sorted order so the catalog keys are
    stable for a given set of routes.

    Args:
        app: Application with all routers included
        settings: Application settings

    Returns:
        Populated route registry

    Raises:
        UnclassifiableRouteError: If a session-gated route lives outside the API prefix
    """
    registry = RouteRegistry(prefix=settings.route_prefix, strict=settings.strict_route_prefix)

    for route in app.routes:
        if not isinstance(route, APIRoute):
            continue

        kind = get_route_kind(route)
        session_auth = requires_session_auth(route)
        for method in sorted(route.methods):
            registry.register(
                RouteRegistration(
                    path=route.path,
                    method=method,
                    kind=kind,
                    requires_session_auth=session_auth,
                )
            )

    catalog = registry.catalog()
    logger.info(
        f"Collected {sum(len(actions) for actions in catalog.values())} API token routes "
        f"in {len(catalog)} groups"
    )
    return registry
