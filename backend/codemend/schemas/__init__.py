"""
Pydantic Data Models / Pydantic 数据模型
Define data structures for API and engine input/output / 定义 API 与引擎输入输出的数据结构
"""

from .project import Project, ProjectFile
from .context import (
    ChunkOut,
    ContextPayload,
    DependencyGraphResponse,
    DependencyNodeOut,
    FileSummaryOut,
    PrepareContextRequest,
    PrepareOptions,
    ProjectRequest,
    ProjectSummaryResponse,
    RelatedFilesRequest,
    RelatedFilesResponse,
    SelectedFile,
)

__all__ = [
    "Project",
    "ProjectFile",
    "ChunkOut",
    "ContextPayload",
    "DependencyGraphResponse",
    "DependencyNodeOut",
    "FileSummaryOut",
    "PrepareContextRequest",
    "PrepareOptions",
    "ProjectRequest",
    "ProjectSummaryResponse",
    "RelatedFilesRequest",
    "RelatedFilesResponse",
    "SelectedFile",
]
