"""Route catalog routes."""
from fastapi import APIRouter

from routeguard.api.deps import CurrentScope, RouteRegistryDep
from routeguard.schemas.route import RouteCatalogResponse

router = APIRouter(tags=["api"])


@router.get("/routes", response_model=RouteCatalogResponse)
def get_available_routes(scope: CurrentScope, registry: RouteRegistryDep):
    """
    List all routes which can be used with an API token.

    The group and action names are the permission strings accepted when
    creating a token.

    Args:
        scope: Current user scope
        registry: Route registry

    Returns:
        Mapping of group name to action name to route
    """
    return registry.catalog()
