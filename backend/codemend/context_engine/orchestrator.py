"""
Context Preparation Engine / 上下文准备引擎
Per-turn orchestration of tracker, classifier, scorer and chunker
每轮对话编排：会话跟踪、模板识别、相关性排序、大文件分块
"""

import hashlib
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .cache import ExpiringCache
from .chunker import LargeFileChunker
from .dependency_graph import DependencyGraph, DependencyGraphBuilder, related_files
from .fingerprint import fingerprint_files
from .models import ContextMode, FrameworkTemplate, ProjectSummary, RelevanceScore, TrackerDecision
from .project_summary import build_project_summary
from .relevance import RelevanceScorer, RelevanceWeights
from .session_tracker import FULL_CONTEXT_NOTE, SessionContextTracker
from .templates import TemplateClassifier, build_framework_context, prioritize_files
from .token_counter import count_tokens
from codemend.config import config
from codemend.exceptions import ValidationError
from codemend.schemas.context import ChunkOut, ContextPayload, PrepareOptions, SelectedFile
from codemend.schemas.project import Project, ProjectFile
from codemend.utils.logger import get_logger

logger = get_logger(__name__)


def project_key_prefix(project_id: str) -> str:
    """
    项目缓存键前缀

    Length-prefixed so that no project id is a key prefix of another
    (``"a"`` and ``"a:b"`` yield ``"1#a:"`` and ``"3#a:b:"``).
    """
    return f"{len(project_id)}#{project_id}:"


class ContextPreparationEngine:
    """
    上下文准备引擎

    Owns the expiring cache and the session tracker; every other
    collaborator is stateless. One instance serves many projects, keyed by
    project id. A turn never raises: collaborator failures are logged and
    the payload degrades to the unranked candidate set.
    """

    def __init__(
        self,
        cache: Optional[ExpiringCache] = None,
        tracker: Optional[SessionContextTracker] = None,
        classifier: Optional[TemplateClassifier] = None,
        scorer: Optional[RelevanceScorer] = None,
        chunker: Optional[LargeFileChunker] = None,
        graph_builder: Optional[DependencyGraphBuilder] = None,
        settings: Optional[Mapping[str, Any]] = None,
    ):
        """
        初始化引擎

        Args:
            cache: 过期缓存 / Expiring cache
            tracker: 会话跟踪器 / Session tracker
            classifier: 模板分类器 / Template classifier
            scorer: 相关性评分器 / Relevance scorer
            chunker: 大文件分块器 / Large-file chunker
            graph_builder: 依赖图构建器 / Dependency graph builder
            settings: 完整配置字典，默认读取 config.yaml / Full config mapping, defaults to config.yaml
        """
        settings = settings if settings is not None else config
        engine_cfg = dict(settings.get("context_engine") or {})

        self.top_k = int(engine_cfg.get("top_k", 10))
        self.chunk_threshold = int(engine_cfg.get("chunk_threshold", 500))
        self.chunk_min_lines = int(engine_cfg.get("chunk_min_lines", 50))
        self.graph_depth = int(engine_cfg.get("graph_depth", 2))

        # Empty caches and trackers are falsy; compare against None
        if cache is None:
            cache = ExpiringCache(ttl_seconds=engine_cfg.get("cache_ttl_seconds", 300))
        if tracker is None:
            tracker = SessionContextTracker(
                threshold=engine_cfg.get("similarity_threshold", 0.7),
                history_limit=engine_cfg.get("task_history_limit", 5),
                preview_limit=engine_cfg.get("continuity_preview_limit", 10),
            )
        if classifier is None:
            classifier = TemplateClassifier()
        if scorer is None:
            scorer = RelevanceScorer(RelevanceWeights.from_config(settings.get("relevance_weights")))
        if chunker is None:
            chunker = LargeFileChunker(threshold=self.chunk_threshold, min_lines=self.chunk_min_lines)
        if graph_builder is None:
            graph_builder = DependencyGraphBuilder(depth=self.graph_depth)
        self.cache = cache
        self.tracker = tracker
        self.classifier = classifier
        self.scorer = scorer
        self.chunker = chunker
        self.graph_builder = graph_builder

    # ------------------------------------------------------------------
    # Cached collaborators
    # ------------------------------------------------------------------

    def _cached(self, key: str, compute):
        hit, value = self.cache.lookup(key)
        if hit:
            return value
        value = compute()
        self.cache.set(key, value)
        return value

    def detect_template(self, project: Project) -> Optional[FrameworkTemplate]:
        """识别项目模板（按文件集指纹缓存） / Classify the full file set, cached by fingerprint."""
        key = f"{project_key_prefix(project.id)}template:{fingerprint_files(project.files, include_content=True)}"
        return self._cached(key, lambda: self.classifier.classify(project.files))

    def get_dependency_graph(self, project: Project) -> DependencyGraph:
        """构建或读取缓存的依赖图 / Build the dependency graph, cached by fingerprint."""
        key = f"{project_key_prefix(project.id)}graph:{fingerprint_files(project.files, include_content=True)}"
        return self._cached(key, lambda: self.graph_builder.build(project.files))

    def get_related_files(self, project: Project, path: str, depth: Optional[int] = None) -> List[ProjectFile]:
        """
        获取依赖图邻域内的文件

        Raises:
            ValidationError: 路径不在项目中 / Path is not part of the project
        """
        graph = self.get_dependency_graph(project)
        if path not in graph:
            raise ValidationError(f"File not in project: {path}")
        return related_files(graph, path, self.graph_depth if depth is None else depth)

    def _rank(self, project_id: str, task: str, candidates: Sequence[ProjectFile], top_k: int) -> List[RelevanceScore]:
        task_digest = hashlib.sha1((task or "").encode("utf-8")).hexdigest()
        fp = fingerprint_files(candidates, include_content=True)
        key = f"{project_key_prefix(project_id)}relevance:{fp}:{top_k}:{task_digest}"
        return self._cached(key, lambda: self.scorer.rank(task, candidates, top_k))

    # ------------------------------------------------------------------
    # Turn preparation
    # ------------------------------------------------------------------

    def _select(
        self,
        ranked: Sequence[Tuple[ProjectFile, float]],
        threshold: int,
        include_content: bool,
    ) -> List[SelectedFile]:
        chunker = self.chunker
        if threshold != chunker.threshold:
            chunker = LargeFileChunker(threshold=threshold, min_lines=chunker.min_lines)

        selected: List[SelectedFile] = []
        for file, score in ranked:
            if chunker.needs_chunking(file):
                chunks = chunker.chunk(file)
                selected.append(SelectedFile(
                    path=file.path,
                    score=score,
                    token_count=sum(count_tokens(c.content) for c in chunks),
                    chunks=[ChunkOut(**c.to_dict()) for c in chunks],
                ))
            else:
                selected.append(SelectedFile(
                    path=file.path,
                    score=score,
                    token_count=count_tokens(file.content),
                    content=file.content if include_content else None,
                ))
        return selected

    @staticmethod
    def _apply_budget(files: List[SelectedFile], max_tokens: Optional[int]) -> List[SelectedFile]:
        """Admit files in rank order while they fit; the first file is always admitted."""
        if not max_tokens or not files:
            return files
        admitted = [files[0]]
        used = files[0].token_count
        for item in files[1:]:
            if used + item.token_count > max_tokens:
                break
            admitted.append(item)
            used += item.token_count
        return admitted

    def _fallback_decision(self, project: Project) -> TrackerDecision:
        return TrackerDecision(mode=ContextMode.FULL, candidates=list(project.files), continuity_note=FULL_CONTEXT_NOTE)

    def prepare_context(
        self,
        project: Project,
        task: str,
        options: Optional[PrepareOptions] = None,
    ) -> ContextPayload:
        """
        为一轮对话准备上下文

        (a) tracker decides full vs incremental and yields candidates;
        (b) classifier runs on the full file set;
        (c) scorer ranks candidates and keeps the top K;
        (d) selected files over the line threshold are chunked;
        (e) the payload is assembled, applying the optional token budget.

        Args:
            project: 项目快照 / Project snapshot
            task: 任务描述 / Task text
            options: 每轮参数 / Per-turn options

        Returns:
            ContextPayload
        """
        options = options or PrepareOptions()
        top_k = options.top_k or self.top_k
        threshold = options.chunk_threshold or self.chunk_threshold
        degraded = False

        try:
            decision = self.tracker.decide(project.id, project.files, task)
        except Exception as exc:
            logger.exception("Session tracking failed for %s: %s", project.id, exc)
            decision = self._fallback_decision(project)
            degraded = True

        template: Optional[FrameworkTemplate] = None
        framework_context = ""
        try:
            template = self.detect_template(project)
            if template is not None:
                framework_context = build_framework_context(project.files, template, task)
        except Exception as exc:
            logger.warning("Template classification failed for %s: %s", project.id, exc)
            template = None

        candidates = decision.candidates
        try:
            ranked = [(s.file, s.score) for s in self._rank(project.id, task, candidates, top_k)]
            selected = self._select(ranked, threshold, options.include_content)
        except Exception as exc:
            logger.exception("Ranking failed for %s, falling back to unranked candidates: %s", project.id, exc)
            degraded = True
            selected = [
                SelectedFile(
                    path=f.path,
                    token_count=count_tokens(f.content),
                    content=f.content if options.include_content else None,
                )
                for f in candidates
            ]

        selected = self._apply_budget(selected, options.max_tokens)

        logger.info(
            "Prepared context for %s: mode=%s template=%s files=%d/%d degraded=%s",
            project.id,
            decision.mode.value,
            template.name if template else "none",
            len(selected),
            len(candidates),
            degraded,
        )
        return ContextPayload(
            project_id=project.id,
            is_full_context=decision.is_full_context,
            template_name=template.name if template else "none",
            framework_context=framework_context,
            continuity_note=decision.continuity_note,
            files=selected,
            degraded=degraded,
            total_tokens=sum(f.token_count for f in selected),
        )

    # ------------------------------------------------------------------
    # Project-level views
    # ------------------------------------------------------------------

    def summarize_project(self, project: Project) -> ProjectSummary:
        """
        生成项目结构摘要（缓存）

        Files are listed in template priority order when a template is detected.
        """
        key = f"{project_key_prefix(project.id)}summary:{fingerprint_files(project.files, include_content=True)}"

        def compute() -> ProjectSummary:
            template = self.detect_template(project)
            files = prioritize_files(project.files, template) if template else project.files
            return build_project_summary(project.id, files, template)

        return self._cached(key, compute)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def invalidate(self, project_id: str) -> int:
        """Drop every cache entry owned by a project."""
        removed = self.cache.invalidate(project_key_prefix(project_id))
        logger.info("Invalidated %d cached entries for project %s", removed, project_id)
        return removed

    def reset_session(self, project_id: str) -> bool:
        """Forget the tracked session and cached results for a project."""
        existed = self.tracker.reset(project_id)
        self.invalidate(project_id)
        return existed

    def cache_stats(self) -> Dict[str, Any]:
        stats = self.cache.get_stats()
        stats["tracked_projects"] = len(self.tracker)
        return stats
