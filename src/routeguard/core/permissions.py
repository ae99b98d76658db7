"""Validation of API token permission sets against the route catalog."""

from typing import Mapping, Sequence

from routeguard.core.exceptions import InvalidPermissionError
from routeguard.core.registry import RouteRegistry

# Group name -> granted action names, e.g. {"tasks": ["create", "read_all"]}
APIPermissions = Mapping[str, Sequence[str]]


def validate_permissions(registry: RouteRegistry, permissions: APIPermissions) -> None:
    """
    Check that every group and action of a permission set exists in the catalog.

    Args:
        registry: Route registry of the running application
        permissions: Permission set of an API token

    Raises:
        InvalidPermissionError: For the first unknown group or action
    """
    for group, actions in permissions.items():
        routes = registry.routes_for(group)
        if routes is None:
            raise InvalidPermissionError(group)

        for action in actions:
            if action not in routes:
                raise InvalidPermissionError(group, action)
