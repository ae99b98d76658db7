"""Route catalog Pydantic schemas."""
from pydantic import BaseModel


class RouteDetailResponse(BaseModel):
    """A single endpoint an API token permission grants access to."""

    path: str
    method: str

    model_config = {"from_attributes": True}


# Group name -> action name -> endpoint
RouteCatalogResponse = dict[str, dict[str, RouteDetailResponse]]
