"""Errors raised by the route permission core."""


class RouteGuardError(Exception):
    """Base class for routeguard errors."""


class UnclassifiableRouteError(RouteGuardError):
    """A session-gated route does not live under the API prefix."""

    def __init__(self, path: str, prefix: str):
        self.path = path
        self.prefix = prefix
        super().__init__(f"Route {path} does not start with the API prefix {prefix}")


class InvalidPermissionError(RouteGuardError):
    """An API token permission names an unknown group or action."""

    def __init__(self, group: str, action: str | None = None):
        self.group = group
        self.action = action
        if action is None:
            message = f"The API token permission group {group} does not exist"
        else:
            message = f"The API token permission {action} of group {group} does not exist"
        super().__init__(message)
