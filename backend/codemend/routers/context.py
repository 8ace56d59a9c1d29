# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  上下文路由 - 每轮上下文准备、缓存失效、会话重置、依赖图与项目摘要 API。
  Context router - Per-turn context preparation, cache invalidation, session reset, dependency graph and project summary APIs.
  The router holds no state; projects arrive in the request body. Endpoints
  that parse or rank files are plain functions so FastAPI runs them in its
  threadpool.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from codemend.context_engine import ContextPreparationEngine, describe_dependency_graph
from codemend.dependencies import get_context_engine
from codemend.exceptions import ValidationError
from codemend.schemas.context import (
    ContextPayload,
    DependencyGraphResponse,
    DependencyNodeOut,
    FileSummaryOut,
    PrepareContextRequest,
    ProjectRequest,
    ProjectSummaryResponse,
    RelatedFilesRequest,
    RelatedFilesResponse,
)
from codemend.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/context", tags=["context"])


@router.post("/prepare", response_model=ContextPayload)
def prepare_context(
    request: PrepareContextRequest,
    engine: ContextPreparationEngine = Depends(get_context_engine),
):
    """Prepare context for one conversational turn.

    Args:
        request: Project snapshot, task text and per-turn options.

    Returns:
        Context payload.
    """
    return engine.prepare_context(request.project, request.task, request.options)


@router.post("/{project_id}/invalidate")
async def invalidate_project_cache(
    project_id: str,
    engine: ContextPreparationEngine = Depends(get_context_engine),
):
    """Drop cached derived results for a project."""
    removed = engine.invalidate(project_id)
    return {"success": True, "removed": removed}


@router.post("/{project_id}/reset")
async def reset_project_session(
    project_id: str,
    engine: ContextPreparationEngine = Depends(get_context_engine),
):
    """Forget tracked files and task history for a project.

    Args:
        project_id: Target project id.

    Returns:
        Whether tracking state existed before the reset.
    """
    existed = engine.reset_session(project_id)
    return {"success": True, "existed": existed}


@router.post("/graph", response_model=DependencyGraphResponse)
def get_dependency_graph(
    request: ProjectRequest,
    engine: ContextPreparationEngine = Depends(get_context_engine),
):
    """Dependency graph nodes plus a text overview."""
    graph = engine.get_dependency_graph(request.project)
    nodes = [
        DependencyNodeOut(
            path=node.path,
            imports=node.imports,
            imported_by=node.imported_by,
            related=node.related,
        )
        for node in graph.values()
    ]
    return DependencyGraphResponse(nodes=nodes, description=describe_dependency_graph(graph))


@router.post("/related", response_model=RelatedFilesResponse)
def get_related_files(
    request: RelatedFilesRequest,
    engine: ContextPreparationEngine = Depends(get_context_engine),
):
    """Files within the dependency neighborhood of one file."""
    try:
        related = engine.get_related_files(request.project, request.path, request.depth)
    except ValidationError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return RelatedFilesResponse(path=request.path, related=[f.path for f in related])


@router.post("/summary", response_model=ProjectSummaryResponse)
def summarize_project(
    request: ProjectRequest,
    engine: ContextPreparationEngine = Depends(get_context_engine),
):
    """Structural summary of a project.

    Args:
        request: Project snapshot.

    Returns:
        Architecture, key files, dependencies, entry points and per-file summaries.
    """
    summary = engine.summarize_project(request.project)
    return ProjectSummaryResponse(
        project_id=summary.project_id,
        summary=summary.summary,
        architecture=summary.architecture,
        key_files=summary.key_files,
        dependencies=summary.dependencies,
        entry_points=summary.entry_points,
        file_types=summary.file_types,
        files=[
            FileSummaryOut(
                path=f.path,
                purpose=f.purpose,
                key_functions=f.key_functions,
                dependencies=f.dependencies,
                complexity=f.complexity,
            )
            for f in summary.files
        ],
        template=summary.template.to_dict() if summary.template else None,
    )


@router.get("/stats")
async def get_cache_stats(engine: ContextPreparationEngine = Depends(get_context_engine)) -> Dict[str, Any]:
    """Cache entry count and tracked project count."""
    return engine.cache_stats()
