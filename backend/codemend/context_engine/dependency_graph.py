# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  依赖图构建器 - 解析导入、构建正向/反向边以及有界半径邻域
  Dependency Graph Builder - Parses imports, builds forward/reverse edges and bounded-radius neighborhoods.
  Construction depends only on file order and content.
"""

from collections import deque
from typing import Dict, List, Optional, Sequence

from .import_parsers import IMPORT_CONVENTIONS, ImportConvention, PathIndex, extract_imports, resolve_import
from .models import DependencyNode
from codemend.schemas.project import ProjectFile
from codemend.utils.logger import get_logger

logger = get_logger(__name__)

DependencyGraph = Dict[str, DependencyNode]


class DependencyGraphBuilder:
    """
    依赖图构建器

    Builds a ``path -> DependencyNode`` map for a file set. Callers cache the
    result by file-set fingerprint; the builder itself is stateless.

    Attributes:
        depth: 邻域半径 / BFS radius for the ``related`` set
        conventions: 导入约定表 / Import parser table
    """

    def __init__(self, depth: int = 2, conventions: Optional[Sequence[ImportConvention]] = None):
        self.depth = max(int(depth), 0)
        self.conventions = tuple(conventions or IMPORT_CONVENTIONS)

    def build(self, files: Sequence[ProjectFile]) -> DependencyGraph:
        """
        构建依赖图

        Pass 1 extracts and resolves imports (forward edges), pass 2 appends
        reverse edges with a duplicate guard, pass 3 computes ``related``.
        Duplicate paths keep their first occurrence.

        Args:
            files: 项目文件（顺序有意义） / Project files, order significant

        Returns:
            路径到节点的映射 / Mapping of path to node, in file order
        """
        graph: DependencyGraph = {}
        for file in files or []:
            if file.path not in graph:
                graph[file.path] = DependencyNode(file=file)

        index = PathIndex(graph.keys())

        # Pass 1: forward edges
        for path, node in graph.items():
            raw_imports = extract_imports(node.file, self.conventions)
            node.raw_imports = [raw.specifier for raw in raw_imports]
            for raw in raw_imports:
                target = resolve_import(raw, path, index, self.conventions)
                if target and target not in node.imports:
                    node.imports.append(target)

        # Pass 2: reverse edges
        for path, node in graph.items():
            for target in node.imports:
                target_node = graph.get(target)
                if target_node is not None and path not in target_node.imported_by:
                    target_node.imported_by.append(path)

        # Pass 3: bounded neighborhoods
        for path, node in graph.items():
            node.related = related_paths(graph, path, self.depth)

        logger.debug(
            "Built dependency graph: files=%d edges=%d",
            len(graph),
            sum(len(n.imports) for n in graph.values()),
        )
        return graph


def related_paths(graph: DependencyGraph, path: str, depth: int = 2) -> List[str]:
    """
    有界广度优先邻域

    Breadth-first traversal over imports and importers up to ``depth`` hops,
    with a visited set so cycles terminate. The start node is excluded.

    Example:
        A→B→C→A with depth 2 gives ``related(A) == [B, C]``.
    """
    if path not in graph or depth <= 0:
        return []
    related: List[str] = []
    visited = {path}
    queue = deque([(path, 0)])
    while queue:
        current, distance = queue.popleft()
        if distance >= depth:
            continue
        node = graph.get(current)
        if node is None:
            continue
        for neighbor in node.imports + node.imported_by:
            if neighbor in visited:
                continue
            visited.add(neighbor)
            related.append(neighbor)
            queue.append((neighbor, distance + 1))
    return related


def related_files(graph: DependencyGraph, path: str, depth: int = 2) -> List[ProjectFile]:
    """Files within ``depth`` hops of ``path``."""
    return [graph[p].file for p in related_paths(graph, path, depth) if p in graph]


def describe_dependency_graph(graph: DependencyGraph, limit: int = 5) -> str:
    """
    生成依赖图文字描述

    Text overview for the model: the most imported files (core), the files
    importing the most (high coupling) and total connections.
    """
    nodes = list(graph.values())
    most_imported = sorted(nodes, key=lambda n: len(n.imported_by), reverse=True)[:limit]
    most_imports = sorted(nodes, key=lambda n: len(n.imports), reverse=True)[:limit]
    total = sum(len(n.imports) for n in nodes)

    lines = ["DEPENDENCY GRAPH ANALYSIS:", "", "Core Files (most imported by others):"]
    lines.extend(f"- {n.path} (imported by {len(n.imported_by)} files)" for n in most_imported)
    lines.extend(["", "High Coupling Files (import many things):"])
    lines.extend(f"- {n.path} (imports {len(n.imports)} files)" for n in most_imports)
    lines.extend(["", f"Total Connections: {total} imports across {len(graph)} files"])
    return "\n".join(lines)
