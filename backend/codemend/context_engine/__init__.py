"""
Context Engine Module / 上下文引擎模块
Prepares per-turn context for multi-file projects: session tracking, template
detection, relevance ranking, dependency graphs and large-file chunking
为多文件项目准备每轮上下文：会话跟踪、模板识别、相关性排序、依赖图与大文件分块
"""

# 核心数据模型
from .models import (
    ContextMode,
    TaskIntent,
    TrackedProjectState,
    TrackerDecision,
    DependencyNode,
    DetectorClause,
    DetectorSpec,
    FrameworkTemplate,
    RelevanceScore,
    Chunk,
    FileSummary,
    ProjectSummary,
)

# 基础组件
from .fingerprint import fingerprint_files, fingerprint_paths
from .cache import ExpiringCache
from .token_counter import count_tokens, load_encoding

# 协作者
from .session_tracker import SessionContextTracker
from .dependency_graph import DependencyGraphBuilder, describe_dependency_graph, related_files, related_paths
from .templates import FRAMEWORK_TEMPLATES, TemplateClassifier, build_framework_context, prioritize_files
from .relevance import RelevanceScorer, RelevanceWeights
from .chunker import LargeFileChunker
from .project_summary import build_project_summary, summarize_file

# 统一编排器
from .orchestrator import ContextPreparationEngine

__all__ = [
    # 数据模型
    "ContextMode",
    "TaskIntent",
    "TrackedProjectState",
    "TrackerDecision",
    "DependencyNode",
    "DetectorClause",
    "DetectorSpec",
    "FrameworkTemplate",
    "RelevanceScore",
    "Chunk",
    "FileSummary",
    "ProjectSummary",
    # 基础组件
    "fingerprint_files",
    "fingerprint_paths",
    "ExpiringCache",
    "count_tokens",
    "load_encoding",
    # 协作者
    "SessionContextTracker",
    "DependencyGraphBuilder",
    "describe_dependency_graph",
    "related_files",
    "related_paths",
    "FRAMEWORK_TEMPLATES",
    "TemplateClassifier",
    "build_framework_context",
    "prioritize_files",
    "RelevanceScorer",
    "RelevanceWeights",
    "LargeFileChunker",
    "build_project_summary",
    "summarize_file",
    # 编排器
    "ContextPreparationEngine",
]
