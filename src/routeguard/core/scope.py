"""Authorization scope of a request."""
from dataclasses import dataclass

from routeguard.models import APIToken, User


@dataclass
class Scope:
    """Authorization scope containing the current user and the API token used, if any."""

    user: User
    api_token: APIToken | None = None

    @property
    def is_session(self) -> bool:
        """Whether the request was authenticated with a user session."""
        return self.api_token is None
