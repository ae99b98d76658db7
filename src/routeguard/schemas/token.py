"""API token Pydantic schemas."""
from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class APITokenCreate(BaseModel):
    """Schema for creating an API token."""

    title: str = Field(..., min_length=1, max_length=250, description="Token title")
    permissions: dict[str, list[str]] = Field(
        ..., description="Granted actions per permission group, see GET /routes"
    )

    @field_validator("permissions")
    @classmethod
    def validate_not_empty(cls, v):
        """Validate that at least one permission is granted."""
        if not any(v.values()):
            raise ValueError("At least one permission must be granted")
        return v


class APITokenResponse(BaseModel):
    """Schema for API token response."""

    id: int
    title: str
    token_prefix: str
    permissions: dict[str, list[str]]
    inserted_at: datetime

    model_config = {"from_attributes": True}


class APITokenCreatedResponse(APITokenResponse):
    """Schema for newly created API token with plaintext token."""

    token: str  # Only shown once


class APITokenListResponse(BaseModel):
    """Schema for API token list response."""

    data: list[APITokenResponse]
