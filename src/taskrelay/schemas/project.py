"""Project schemas for API request/response."""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from src.taskrelay.models import ProjectRole
from src.taskrelay.schemas.base import CamelModel


class ProjectCreate(CamelModel):
    """Schema for creating a project."""

    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Project name cannot be empty or whitespace only")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                return None
        return v


class ProjectRead(CamelModel):
    """Schema for reading a project."""

    id: UUID
    name: str
    description: str | None
    created_at: datetime
    updated_at: datetime


class ProjectSummary(CamelModel):
    id: UUID
    name: str


class ProjectWithRole(ProjectRead):
    """A project as seen by one of its members."""

    role: ProjectRole
