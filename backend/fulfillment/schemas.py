"""Pydantic schemas for API."""
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class StatusTransitionRequest(BaseModel):
    status: str = Field(min_length=1, max_length=50)


class TransitionResponse(BaseModel):
    """Entity after the change plus any non-fatal side-effect warnings."""

    entity: dict[str, Any]
    warnings: list[str] = Field(default_factory=list)


class ManufacturingUpdateCreate(BaseModel):
    status: str = Field(min_length=1, max_length=50)
    notes: Optional[str] = None
    manufacturer_id: Optional[UUID] = None


class UserRoleUpdate(BaseModel):
    role: str = Field(min_length=1, max_length=20)


class UserResponse(BaseModel):
    id: UUID
    name: str
    email: Optional[str] = None
    role: str
    is_active: bool
    model_config = ConfigDict(from_attributes=True)


class UserRoleResponse(BaseModel):
    user: UserResponse
    warnings: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str
