"""Catalog of API routes which can be granted to API tokens."""

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from routeguard.core.classifier import API_PREFIX, RouteGroup, classify, is_path_parameter
from routeguard.core.exceptions import UnclassifiableRouteError

logger = logging.getLogger(__name__)

CRUD_ACTIONS = ("create", "read_one", "read_all", "update", "delete")
OTHER_GROUP = "other"
ATTACHMENT_GROUP = "tasks_attachments"

# Session-only surfaces which must never be callable with an API token.
EXCLUDED_GROUPS = frozenset({"user", "tokenTest", "subscriptions", "tokens", "*"})


class RouteKind(str, Enum):
    """Kind of handler serving a route, declared by the routing layer."""

    CREATE = "create"
    READ_ONE = "read_one"
    READ_ALL = "read_all"
    UPDATE = "update"
    DELETE = "delete"
    UPLOAD_ATTACHMENT = "upload_attachment"
    GET_ATTACHMENT = "get_attachment"
    GENERIC = "generic"
    NOT_FOUND = "not_found"


ATTACHMENT_ACTIONS = {
    RouteKind.UPLOAD_ATTACHMENT: "create",
    RouteKind.GET_ATTACHMENT: "read_one",
}


@dataclass(frozen=True)
class RouteDetail:
    """One concrete endpoint."""

    path: str
    method: str


@dataclass(frozen=True)
class RouteRegistration:
    """A route as announced by the routing layer during startup."""

    path: str
    method: str
    kind: RouteKind = RouteKind.GENERIC
    requires_session_auth: bool = True


def is_excluded_group(name: str) -> bool:
    """Check whether a group is reserved for session authentication."""
    return name in EXCLUDED_GROUPS or name.startswith("user_") or name.endswith("_bulk")


def _template_score(template: str, path: str) -> int | None:
    """Number of literal segments shared by a route template and a concrete path, None if they differ."""
    template_parts = template.split("/")
    path_parts = path.split("/")
    if len(template_parts) != len(path_parts):
        return None

    score = 0
    for template_part, path_part in zip(template_parts, path_parts):
        if is_path_parameter(template_part):
            if not path_part:
                return None
            continue
        if template_part != path_part:
            return None
        score += 1
    return score


class RouteRegistry:
    """
    Permission catalog built from the routes of an application.

    The registry is filled once while the application starts and only read
    afterwards. It maps permission groups to actions to the route serving the
    action, e.g. ``{"tasks": {"create": RouteDetail("/api/v1/projects/:project/tasks", "PUT")}}``.
    """

    def __init__(self, prefix: str = API_PREFIX, strict: bool = True):
        self.prefix = prefix
        self.strict = strict
        self._routes: dict[str, dict[str, RouteDetail]] = {}
        # (path, method) -> (group, action) for every registered route,
        # including routes sharing an action with another path.
        self._actions: dict[tuple[str, str], tuple[str, str]] = {}
        # Every path announced by the routing layer, catalogued or not.
        self._known_paths: set[str] = set()

    def register(self, registration: RouteRegistration) -> None:
        """
        Add a route to the catalog.

        Routes without session authentication, the not-found sentinel and
        session-only groups are ignored.

        Args:
            registration: Route announced by the routing layer

        Raises:
            UnclassifiableRouteError: If the route lives outside the API prefix in strict mode
        """
        self._known_paths.add(registration.path)

        if registration.kind is RouteKind.NOT_FOUND or not registration.requires_session_auth:
            return

        if not registration.path.startswith(self.prefix):
            if self.strict:
                raise UnclassifiableRouteError(registration.path, self.prefix)
            logger.warning(
                f"Route {registration.path} is outside of {self.prefix}, classifying it as-is"
            )

        group = classify(registration.path, self.prefix)
        if is_excluded_group(group.name):
            logger.debug(f"Route {registration.path} is session only, skipping")
            return

        detail = RouteDetail(path=registration.path, method=registration.method.upper())

        if registration.kind is RouteKind.GENERIC:
            self._register_generic(group, detail)
            return

        action = self._canonical_action(registration.kind, group.name)
        if action is None:
            logger.debug(
                f"Route {registration.path} of kind {registration.kind.value} has no action "
                f"in group {group.name}, skipping"
            )
            return

        self._add(group.name, action, detail, same_method_is_alias=True)

    def _canonical_action(self, kind: RouteKind, group_name: str) -> str | None:
        if kind.value in CRUD_ACTIONS:
            return kind.value
        if group_name == ATTACHMENT_GROUP:
            return ATTACHMENT_ACTIONS.get(kind)
        return None

    def _register_generic(self, group: RouteGroup, detail: RouteDetail) -> None:
        # Sub routes are added to their parent, e.g. projects_background ends
        # up as "background" under "projects". Top level routes go to "other".
        if not group.segments:
            logger.debug(f"Route {detail.method} {detail.path} has no literal segment, skipping")
            return

        if len(group.segments) == 1:
            self._add(OTHER_GROUP, group.name, detail)
            return

        self._add(group.segments[0], "_".join(group.segments[1:]), detail)

    def _add(
        self,
        group: str,
        action: str,
        detail: RouteDetail,
        same_method_is_alias: bool = False,
    ) -> None:
        entry = self._routes.setdefault(group, {})
        existing = entry.get(action)

        if existing is not None and existing != detail:
            if same_method_is_alias and existing.method == detail.method:
                logger.debug(
                    f"Route {detail.method} {detail.path} is another path for "
                    f"{group}.{action} ({existing.path})"
                )
                self._index(detail, group, action)
                return
            action = f"{action}_{detail.method.lower()}"
            logger.debug(f"Action collision in group {group}, using key {action}")

        entry.setdefault(action, detail)
        self._index(detail, group, action)

    def _index(self, detail: RouteDetail, group: str, action: str) -> None:
        # A route holding several CRUD actions resolves to the last one in
        # CRUD_ACTIONS order, otherwise the first registration is kept.
        key = (detail.path, detail.method)
        registered = self._actions.get(key)
        if registered is None or (
            registered[0] == group
            and registered[1] in CRUD_ACTIONS
            and action in CRUD_ACTIONS
            and CRUD_ACTIONS.index(action) > CRUD_ACTIONS.index(registered[1])
        ):
            self._actions[key] = (group, action)

    def catalog(self) -> dict[str, dict[str, RouteDetail]]:
        """Return a copy of the full catalog."""
        return {group: dict(entry) for group, entry in self._routes.items()}

    def routes_for(self, group: str) -> Mapping[str, RouteDetail] | None:
        """Return the read-only actions of a group, or None if the group does not exist."""
        entry = self._routes.get(group)
        if entry is None:
            return None
        return MappingProxyType(entry)

    def action_for(self, group: str, path: str, method: str) -> str | None:
        """Return the action a route was registered under if it belongs to the given group."""
        registered = self._actions.get((path, method.upper()))
        if registered is None or registered[0] != group:
            return None
        return registered[1]

    def resolve_path(self, path: str, method: str) -> str:
        """
        Map a concrete request path onto the registered template it matches.

        Templates with more literal segments win, a template registered for
        the same method wins a tie. Paths the routing layer announced (even if
        they are not in the catalog), paths which already are templates and
        paths without any matching template are returned unchanged.

        Args:
            path: Request path, e.g. ``/api/v1/projects/42/tasks``
            method: Request method

        Returns:
            The matching route template, e.g. ``/api/v1/projects/:project/tasks``
        """
        if path in self._known_paths or any(is_path_parameter(part) for part in path.split("/")):
            return path

        best = path
        best_score: tuple[int, bool] | None = None
        for template, template_method in self._actions:
            literal_segments = _template_score(template, path)
            if literal_segments is None:
                continue
            score = (literal_segments, template_method == method.upper())
            if best_score is None or score > best_score:
                best, best_score = template, score
        return best
