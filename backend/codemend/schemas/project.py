"""
Project file models.
"""

from typing import List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ProjectFile(BaseModel):
    """A single project file, owned by the caller and immutable per call."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default="", description="Caller-side file id")
    path: str = Field(
        ...,
        validation_alias=AliasChoices("path", "name"),
        description="Project-relative path, forward slashes",
    )
    language: str = Field(default="", description="Language hint")
    content: str = Field(default="", description="Full file text")


class Project(BaseModel):
    """A project snapshot handed to the engine for one turn."""

    id: str = Field(..., min_length=1, description="Project id")
    name: str = Field(default="", description="Display name")
    files: List[ProjectFile] = Field(default_factory=list, description="Files in caller order")
