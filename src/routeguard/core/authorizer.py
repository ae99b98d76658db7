"""Authorization of API token requests against the route catalog."""

import logging
from collections.abc import Iterator

from opentelemetry import metrics

from routeguard.core.classifier import RouteGroup, classify, is_path_parameter, split_path
from routeguard.core.permissions import APIPermissions
from routeguard.core.registry import OTHER_GROUP, RouteRegistry
from routeguard.models import APIToken

logger = logging.getLogger(__name__)

meter = metrics.get_meter(__name__)
authorization_decisions = meter.create_counter(
    "routeguard.authorization.decisions",
    description="API token authorization decisions",
)


def _candidate_groups(group: RouteGroup) -> Iterator[tuple[str, str]]:
    """Yield (catalog group, default action) pairs in lookup order."""
    yield group.name, ""
    if not group.segments:
        return
    yield group.segments[0], "_".join(group.segments[1:])
    if len(group.segments) == 1:
        yield OTHER_GROUP, group.name


def _permission_group(group: RouteGroup, bucket: str, permissions: APIPermissions) -> str | None:
    """Name of the token's permission group covering a route, None if it has none."""
    candidates = [group.name, *group.segments[:1]]
    if bucket == OTHER_GROUP:
        candidates.append(OTHER_GROUP)
    for name in candidates:
        if name in permissions:
            return name
    return None


def _is_project_task_list(path: str, prefix: str) -> bool:
    # /projects/:project/tasks and /tasks/all both list all tasks
    parts = split_path(path, prefix)
    return (
        path.startswith(prefix)
        and len(parts) == 3
        and parts[0] == "projects"
        and is_path_parameter(parts[1])
        and parts[2] == "tasks"
    )


def _deny(token: APIToken, group: str, message: str, **extra) -> bool:
    logger.info(f"[auth] Token {token.id} {message}", extra={"token_id": token.id, **extra})
    authorization_decisions.add(1, {"group": group, "allowed": False})
    return False


def authorize(registry: RouteRegistry, path: str, method: str, token: APIToken) -> bool:
    """
    Check if an API token is allowed to use a route.

    The route is looked up in the catalog as the full group name, then as its
    first path segment and for top level routes in the "other" group. The
    token's permissions are looked up the same way, by full group name first
    and first path segment second, so a grant on ``tasks`` also covers
    ``tasks_attachments`` routes.

    Args:
        registry: Route registry of the running application
        path: Route template of the request, or the concrete request path
        method: Request method
        token: API token used for the request

    Returns:
        True if the token holds the permission for the route, False otherwise
    """
    method = method.upper()
    path = registry.resolve_path(path, method)
    group = classify(path, registry.prefix)
    permissions = token.permissions or {}

    for bucket, default_action in _candidate_groups(group):
        if registry.routes_for(bucket) is not None:
            break
    else:
        return _deny(
            token,
            group.name,
            f"tried to use unknown route {method} {path}",
            method=method,
            path=path,
        )

    action = registry.action_for(bucket, path, method) or default_action

    if group.name == "tasks" and method == "GET" and _is_project_task_list(path, registry.prefix):
        action = "read_all"

    permission_group = _permission_group(group, bucket, permissions)
    if permission_group is None or action not in (permissions[permission_group] or []):
        return _deny(
            token,
            bucket,
            f"tried to use route {path} which requires permission {bucket}.{action} "
            f"but has only {permissions}",
            method=method,
            path=path,
            permission=f"{bucket}.{action}",
        )

    authorization_decisions.add(1, {"group": bucket, "allowed": True})
    return True
