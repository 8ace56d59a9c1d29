"""
Context Engine Models / 上下文引擎数据模型
Core data structures for the context preparation engine
上下文准备引擎的核心数据结构
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Dict, List, Optional, Set, Tuple

from codemend.schemas.project import ProjectFile


class ContextMode(str, Enum):
    """上下文发送模式 / Whether a turn resends everything or only new files"""
    FULL = "full"
    INCREMENTAL = "incremental"


class TaskIntent(str, Enum):
    """
    粗粒度任务意图 / Coarse task intents, each paired with a file role

    UI: 组件、页面、渲染
    API: 路由、请求、端点
    STATE: 状态、store、context
    STYLING: 样式、主题
    """
    UI = "ui"
    API = "api"
    STATE = "state"
    STYLING = "styling"


@dataclass
class CacheEntry:
    """
    缓存条目
    A cached value stamped with its insertion time
    """
    key: str
    value: Any
    inserted_at: float


@dataclass
class TrackedProjectState:
    """
    单个项目的会话跟踪状态
    Per-project record of shown files and recent tasks
    """
    seen_paths: Set[str] = field(default_factory=set)
    # Insertion-ordered mirror of seen_paths, used for the continuity note
    seen_order: List[str] = field(default_factory=list)
    task_history: Deque[str] = field(default_factory=lambda: deque(maxlen=5))

    def mark_seen(self, paths: List[str]) -> None:
        for path in paths:
            if path not in self.seen_paths:
                self.seen_paths.add(path)
                self.seen_order.append(path)


@dataclass
class TrackerDecision:
    """
    跟踪器对本轮的判定
    Tracker verdict for one turn
    """
    mode: ContextMode
    candidates: List[ProjectFile]
    continuity_note: str
    similarity: float = 0.0

    @property
    def is_full_context(self) -> bool:
        return self.mode == ContextMode.FULL


@dataclass
class DependencyNode:
    """
    依赖图节点
    One file in the dependency graph with forward, reverse and nearby edges
    """
    file: ProjectFile
    imports: List[str] = field(default_factory=list)
    imported_by: List[str] = field(default_factory=list)
    related: List[str] = field(default_factory=list)
    # Raw specifiers as written in the file, resolved or not
    raw_imports: List[str] = field(default_factory=list)

    @property
    def path(self) -> str:
        return self.file.path


@dataclass(frozen=True)
class DetectorClause:
    """
    检测谓词子句 / One named predicate call, e.g. ("file_named_containing", ("vite.config.ts", "react"))
    """
    predicate: str
    args: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DetectorSpec:
    """
    声明式检测器
    Declarative detector: clauses combined with ``all`` or ``any``
    """
    clauses: Tuple[DetectorClause, ...]
    combine: str = "any"


@dataclass(frozen=True)
class FrameworkTemplate:
    """
    框架模板 - 一组可识别的项目结构约定
    Named bundle of structural conventions for a recognizable project style
    """
    name: str
    detector: DetectorSpec
    key_files: Tuple[str, ...] = ()
    priority_dirs: Tuple[str, ...] = ()
    patterns: Tuple[str, ...] = ()
    practices: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "name": self.name,
            "detector": {
                "combine": self.detector.combine,
                "clauses": [
                    {"predicate": c.predicate, "args": list(c.args)} for c in self.detector.clauses
                ],
            },
            "key_files": list(self.key_files),
            "priority_dirs": list(self.priority_dirs),
            "patterns": list(self.patterns),
            "practices": list(self.practices),
        }


@dataclass
class RelevanceScore:
    """
    文件相关性评分
    Heuristic usefulness of one file for the current task
    """
    file: ProjectFile
    score: float
    reasons: List[str] = field(default_factory=list)


@dataclass
class Chunk:
    """
    大文件分块
    Bounded, logically-aligned slice of a large file (1-indexed, inclusive lines)
    """
    content: str
    start_line: int
    end_line: int
    summary: str

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "summary": self.summary,
        }


@dataclass
class FileSummary:
    """
    文件结构摘要
    Structural description of a single file
    """
    path: str
    purpose: str
    key_functions: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    complexity: str = "low"


@dataclass
class ProjectSummary:
    """
    项目结构摘要
    Structural description of a whole project
    """
    project_id: str
    summary: str
    architecture: str
    key_files: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    entry_points: List[str] = field(default_factory=list)
    file_types: Dict[str, int] = field(default_factory=dict)
    files: List[FileSummary] = field(default_factory=list)
    template: Optional[FrameworkTemplate] = None
