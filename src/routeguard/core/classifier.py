"""Classification of API route paths into permission groups."""

from typing import NamedTuple

API_PREFIX = "/api/v1/"

# Route families which are reachable under more than one URL but share a
# single permission group.
GROUP_ALIASES: dict[str, tuple[str, list[str]]] = {
    "projects_tasks": ("tasks", ["tasks"]),
    "tasks_all": ("tasks", ["tasks"]),
}


class RouteGroup(NamedTuple):
    """Permission group of a route and its path segments without parameters."""

    name: str
    segments: list[str]


def is_path_parameter(segment: str) -> bool:
    """Check whether a path segment is a parameter placeholder (``:id`` or ``{id}``)."""
    return segment.startswith(":") or (segment.startswith("{") and segment.endswith("}"))


def split_path(path: str, prefix: str = API_PREFIX) -> list[str]:
    """Strip the API prefix and split the remaining path into its segments."""
    if path.startswith(prefix):
        path = path[len(prefix):]
    else:
        path = path.lstrip("/")
    return path.split("/")


def classify(path: str, prefix: str = API_PREFIX) -> RouteGroup:
    """
    Derive the permission group of a route path.

    Parameter placeholders are dropped and the remaining segments are joined
    with ``_``, so ``/api/v1/projects/:project/views`` becomes
    ``projects_views``. Known aliased families collapse onto one group.

    Args:
        path: Route path template, usually starting with the API prefix
        prefix: API prefix to strip

    Returns:
        The group name and the filtered path segments
    """
    segments = [part for part in split_path(path, prefix) if not is_path_parameter(part)]
    name = "_".join(segments)

    if name in GROUP_ALIASES:
        alias, alias_segments = GROUP_ALIASES[name]
        return RouteGroup(alias, list(alias_segments))

    return RouteGroup(name, segments)
