"""
Context preparation request/response models.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .project import Project


class PrepareOptions(BaseModel):
    """Per-turn knobs; unset values fall back to config.yaml."""

    top_k: Optional[int] = Field(default=None, ge=1, description="Max files to select")
    chunk_threshold: Optional[int] = Field(default=None, ge=1, description="Line count above which files are chunked")
    max_tokens: Optional[int] = Field(default=None, ge=1, description="Token budget for selected content")
    include_content: bool = Field(default=True, description="Include whole-file content for unchunked files")


class ChunkOut(BaseModel):
    content: str
    start_line: int
    end_line: int
    summary: str


class SelectedFile(BaseModel):
    """One file chosen for the turn, either whole or as chunks."""

    path: str
    score: float = 0.0
    token_count: int = 0
    content: Optional[str] = None
    chunks: Optional[List[ChunkOut]] = None


class ContextPayload(BaseModel):
    """Structured context returned for one conversational turn."""

    project_id: str
    is_full_context: bool
    template_name: str = Field(default="none", description="Detected template or 'none'")
    framework_context: str = Field(default="", description="Template conventions rendered for the model")
    continuity_note: str = ""
    files: List[SelectedFile] = Field(default_factory=list)
    degraded: bool = Field(default=False, description="True when ranking fell back to the unranked candidate set")
    total_tokens: int = 0


class PrepareContextRequest(BaseModel):
    project: Project
    task: str = ""
    options: Optional[PrepareOptions] = None


class ProjectRequest(BaseModel):
    project: Project


class DependencyNodeOut(BaseModel):
    path: str
    imports: List[str] = Field(default_factory=list)
    imported_by: List[str] = Field(default_factory=list)
    related: List[str] = Field(default_factory=list)


class DependencyGraphResponse(BaseModel):
    nodes: List[DependencyNodeOut]
    description: str


class FileSummaryOut(BaseModel):
    path: str
    purpose: str
    key_functions: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    complexity: str = "low"


class ProjectSummaryResponse(BaseModel):
    project_id: str
    summary: str
    architecture: str
    key_files: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    entry_points: List[str] = Field(default_factory=list)
    file_types: Dict[str, int] = Field(default_factory=dict)
    files: List[FileSummaryOut] = Field(default_factory=list)
    template: Optional[Dict[str, Any]] = None


class RelatedFilesRequest(BaseModel):
    project: Project
    path: str = Field(..., min_length=1)
    depth: Optional[int] = Field(default=None, ge=0, description="BFS radius; config graph_depth when unset")


class RelatedFilesResponse(BaseModel):
    path: str
    related: List[str] = Field(default_factory=list)
