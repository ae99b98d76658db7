"""Unit tests for the route registry."""
import pytest

from routeguard.core.exceptions import UnclassifiableRouteError
from routeguard.core.registry import (
    RouteDetail,
    RouteKind,
    RouteRegistration,
    RouteRegistry,
    is_excluded_group,
)


def register(registry: RouteRegistry, path: str, method: str, kind=RouteKind.GENERIC, **kwargs):
    registry.register(RouteRegistration(path=path, method=method, kind=kind, **kwargs))


def test_register_crud_routes():
    """Test that CRUD handlers are stored under their canonical action."""
    registry = RouteRegistry()
    register(registry, "/api/v1/projects", "PUT", RouteKind.CREATE)
    register(registry, "/api/v1/projects", "GET", RouteKind.READ_ALL)
    register(registry, "/api/v1/projects/:project", "GET", RouteKind.READ_ONE)
    register(registry, "/api/v1/projects/:project", "POST", RouteKind.UPDATE)
    register(registry, "/api/v1/projects/:project", "DELETE", RouteKind.DELETE)

    assert registry.catalog() == {
        "projects": {
            "create": RouteDetail("/api/v1/projects", "PUT"),
            "read_all": RouteDetail("/api/v1/projects", "GET"),
            "read_one": RouteDetail("/api/v1/projects/:project", "GET"),
            "update": RouteDetail("/api/v1/projects/:project", "POST"),
            "delete": RouteDetail("/api/v1/projects/:project", "DELETE"),
        }
    }


def test_register_normalizes_method():
    """Test that methods are stored upper case."""
    registry = RouteRegistry()
    register(registry, "/api/v1/labels", "put", RouteKind.CREATE)
    assert registry.catalog()["labels"]["create"].method == "PUT"


def test_register_crud_collision_with_other_method():
    """Test that the second method for the same action gets a suffixed key."""
    registry = RouteRegistry()
    register(registry, "/api/v1/projects", "PUT", RouteKind.CREATE)
    register(registry, "/api/v1/projects", "POST", RouteKind.CREATE)

    routes = registry.catalog()["projects"]
    assert routes["create"] == RouteDetail("/api/v1/projects", "PUT")
    assert routes["create_post"] == RouteDetail("/api/v1/projects", "POST")


def test_register_crud_collision_with_same_method():
    """Test that another path for the same action and method shares the action."""
    registry = RouteRegistry()
    register(registry, "/api/v1/projects/:project/tasks", "GET", RouteKind.READ_ALL)
    register(registry, "/api/v1/tasks/all", "GET", RouteKind.READ_ALL)

    assert registry.catalog()["tasks"] == {
        "read_all": RouteDetail("/api/v1/projects/:project/tasks", "GET"),
    }
    assert registry.action_for("tasks", "/api/v1/tasks/all", "GET") == "read_all"


def test_register_generic_top_level_route():
    """Test that generic top level routes are collected in the other group."""
    registry = RouteRegistry()
    register(registry, "/api/v1/notifications", "GET")
    register(registry, "/api/v1/notifications", "POST")

    assert registry.catalog() == {
        "other": {
            "notifications": RouteDetail("/api/v1/notifications", "GET"),
            "notifications_post": RouteDetail("/api/v1/notifications", "POST"),
        }
    }


def test_register_generic_sub_route():
    """Test that generic sub routes are added to their parent group."""
    registry = RouteRegistry()
    register(registry, "/api/v1/projects/:project/background", "GET")
    register(registry, "/api/v1/projects/:project/background", "DELETE")
    register(registry, "/api/v1/projects/:project/views/:view/buckets", "GET")

    routes = registry.catalog()["projects"]
    assert routes["background"] == RouteDetail("/api/v1/projects/:project/background", "GET")
    assert routes["background_delete"] == RouteDetail(
        "/api/v1/projects/:project/background", "DELETE"
    )
    assert routes["views_buckets"].path == "/api/v1/projects/:project/views/:view/buckets"


def test_register_generic_route_without_literal_segment():
    """Test that a generic route made only of parameters is skipped."""
    registry = RouteRegistry()
    register(registry, "/api/v1/:id", "GET")
    register(registry, "/api/v1/{id}/{name}", "POST")
    assert registry.catalog() == {}


def test_register_route_with_several_crud_kinds():
    """Test that a route registered for several CRUD actions resolves to the last in CRUD order."""
    registry = RouteRegistry()
    register(registry, "/api/v1/labels/:label", "POST", RouteKind.UPDATE)
    register(registry, "/api/v1/labels/:label", "POST", RouteKind.CREATE)
    register(registry, "/api/v1/labels/:label", "POST", RouteKind.READ_ONE)

    assert set(registry.catalog()["labels"]) == {"update", "create", "read_one"}
    assert registry.action_for("labels", "/api/v1/labels/:label", "POST") == "update"

    register(registry, "/api/v1/labels/:label", "POST", RouteKind.DELETE)
    assert registry.action_for("labels", "/api/v1/labels/:label", "POST") == "delete"


def test_register_attachment_routes():
    """Test that attachment handlers map to create and read_one."""
    registry = RouteRegistry()
    register(registry, "/api/v1/tasks/:task/attachments", "PUT", RouteKind.UPLOAD_ATTACHMENT)
    register(
        registry, "/api/v1/tasks/:task/attachments/:attachment", "GET", RouteKind.GET_ATTACHMENT
    )
    register(
        registry, "/api/v1/tasks/:task/attachments/:attachment", "DELETE", RouteKind.DELETE
    )

    assert registry.catalog()["tasks_attachments"] == {
        "create": RouteDetail("/api/v1/tasks/:task/attachments", "PUT"),
        "read_one": RouteDetail("/api/v1/tasks/:task/attachments/:attachment", "GET"),
        "delete": RouteDetail("/api/v1/tasks/:task/attachments/:attachment", "DELETE"),
    }


def test_register_attachment_kind_outside_attachment_group():
    """Test that attachment handlers elsewhere are neither canonical nor generic."""
    registry = RouteRegistry()
    register(registry, "/api/v1/projects/:project/background", "PUT", RouteKind.UPLOAD_ATTACHMENT)
    assert registry.catalog() == {}


@pytest.mark.parametrize(
    "path",
    [
        "/api/v1/user",
        "/api/v1/user/settings/general",
        "/api/v1/tokenTest",
        "/api/v1/subscriptions/:entity/:entityID",
        "/api/v1/tokens",
        "/api/v1/tokens/:token",
        "/api/v1/*",
        "/api/v1/tasks/bulk",
        "/api/v1/projects/:project/tasks/bulk",
    ],
)
def test_register_excluded_groups(path):
    """Test that session only routes never enter the catalog."""
    registry = RouteRegistry()
    register(registry, path, "GET")
    register(registry, path, "PUT", RouteKind.CREATE)
    assert registry.catalog() == {}


def test_is_excluded_group():
    """Test the excluded group rules."""
    assert is_excluded_group("user")
    assert is_excluded_group("user_settings_general")
    assert is_excluded_group("tasks_bulk")
    assert not is_excluded_group("users")
    assert not is_excluded_group("projects")


def test_register_skips_routes_without_session_auth():
    """Test that public routes are ignored."""
    registry = RouteRegistry()
    register(registry, "/api/v1/info", "GET", requires_session_auth=False)
    register(registry, "/api/v1/projects", "PUT", RouteKind.CREATE, requires_session_auth=False)
    assert registry.catalog() == {}


def test_register_skips_not_found_route():
    """Test that the not found sentinel is ignored."""
    registry = RouteRegistry()
    register(registry, "/api/v1/*", "GET", RouteKind.NOT_FOUND)
    register(registry, "/api/v1/anything", "GET", RouteKind.NOT_FOUND)
    assert registry.catalog() == {}


def test_register_outside_prefix_strict():
    """Test that routes outside the API prefix fail loudly."""
    registry = RouteRegistry()
    with pytest.raises(UnclassifiableRouteError) as exc_info:
        register(registry, "/health", "GET")
    assert exc_info.value.path == "/health"


def test_register_outside_prefix_lenient():
    """Test that routes outside the API prefix are classified as-is when not strict."""
    registry = RouteRegistry(strict=False)
    register(registry, "/health", "GET")
    assert registry.catalog() == {"other": {"health": RouteDetail("/health", "GET")}}


def test_registration_order_decides_plain_key():
    """Test that the first registered route keeps the unsuffixed key."""
    registry = RouteRegistry()
    register(registry, "/api/v1/labels", "POST", RouteKind.CREATE)
    register(registry, "/api/v1/labels", "PUT", RouteKind.CREATE)

    routes = registry.catalog()["labels"]
    assert routes["create"].method == "POST"
    assert routes["create_put"].method == "PUT"


def test_catalog_returns_copy():
    """Test that changing the returned catalog does not touch the registry."""
    registry = RouteRegistry()
    register(registry, "/api/v1/labels", "PUT", RouteKind.CREATE)

    catalog = registry.catalog()
    catalog["labels"]["delete"] = RouteDetail("/api/v1/labels/:label", "DELETE")
    catalog["other"] = {}

    assert registry.catalog() == {"labels": {"create": RouteDetail("/api/v1/labels", "PUT")}}


def test_routes_for_is_read_only():
    """Test that group routes cannot be changed through the accessor."""
    registry = RouteRegistry()
    register(registry, "/api/v1/labels", "PUT", RouteKind.CREATE)

    routes = registry.routes_for("labels")
    with pytest.raises(TypeError):
        routes["delete"] = RouteDetail("/api/v1/labels/:label", "DELETE")
    assert registry.routes_for("missing") is None


def test_action_for():
    """Test looking up the action of a registered route."""
    registry = RouteRegistry()
    register(registry, "/api/v1/labels", "PUT", RouteKind.CREATE)
    register(registry, "/api/v1/labels", "POST", RouteKind.CREATE)

    assert registry.action_for("labels", "/api/v1/labels", "PUT") == "create"
    assert registry.action_for("labels", "/api/v1/labels", "post") == "create_post"
    assert registry.action_for("other", "/api/v1/labels", "PUT") is None
    assert registry.action_for("labels", "/api/v1/labels", "GET") is None


def test_resolve_path():
    """Test mapping concrete paths onto registered templates."""
    registry = RouteRegistry()
    register(registry, "/api/v1/tasks/all", "GET", RouteKind.READ_ALL)
    register(registry, "/api/v1/tasks/{task}", "GET", RouteKind.READ_ONE)
    register(registry, "/api/v1/tasks/{task}", "DELETE", RouteKind.DELETE)
    register(registry, "/api/v1/projects/:project/tasks", "PUT", RouteKind.CREATE)

    assert registry.resolve_path("/api/v1/tasks/7", "DELETE") == "/api/v1/tasks/{task}"
    assert registry.resolve_path("/api/v1/tasks/all", "GET") == "/api/v1/tasks/all"
    assert (
        registry.resolve_path("/api/v1/projects/42/tasks", "GET")
        == "/api/v1/projects/:project/tasks"
    )
    assert registry.resolve_path("/api/v1/projects/42/tasks/7", "GET") == (
        "/api/v1/projects/42/tasks/7"
    )
    assert registry.resolve_path("/api/v1/tasks/:id", "GET") == "/api/v1/tasks/:id"


def test_resolve_path_keeps_uncatalogued_routes():
    """Test that excluded literal routes are not mapped onto a parameter template."""
    registry = RouteRegistry()
    register(registry, "/api/v1/tasks/{task}", "POST", RouteKind.UPDATE)
    register(registry, "/api/v1/tasks/bulk", "POST", RouteKind.UPDATE)
    register(registry, "/api/v1/tasks/public", "GET", requires_session_auth=False)

    assert registry.resolve_path("/api/v1/tasks/bulk", "POST") == "/api/v1/tasks/bulk"
    assert registry.resolve_path("/api/v1/tasks/public", "POST") == "/api/v1/tasks/public"
    assert registry.resolve_path("/api/v1/tasks/3", "POST") == "/api/v1/tasks/{task}"
