# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  会话上下文跟踪器 - 记录每个项目已展示的文件与最近任务，决定全量或增量上下文
  Session Context Tracker - Records shown files and recent tasks per project and decides
  between full and incremental context for each turn.
"""

import threading
from collections import deque
from typing import Dict, List, Optional

from .models import ContextMode, TrackedProjectState, TrackerDecision
from .text_tokenizer import extract_task_keywords, jaccard_similarity
from codemend.schemas.project import ProjectFile
from codemend.utils.logger import get_logger

logger = get_logger(__name__)

FULL_CONTEXT_NOTE = "Full project context provided."
FIRST_INTERACTION_NOTE = "This is your first interaction with this project."


class SessionContextTracker:
    """
    会话上下文跟踪器

    One ``TrackedProjectState`` per project id, created lazily on the first
    request and removed only by ``reset``. ``decide`` and ``reset`` hold a
    lock, so concurrent turns see a consistent seen-set.

    Attributes:
        threshold: 任务相似度阈值 / Similarity below this forces a full resend
        history_limit: 任务历史长度 / Number of recent tasks kept
        preview_limit: 连续性说明中列出的文件数 / Files named in the continuity note
    """

    def __init__(self, threshold: float = 0.7, history_limit: int = 5, preview_limit: int = 10):
        self.threshold = float(threshold)
        self.history_limit = max(int(history_limit), 1)
        self.preview_limit = max(int(preview_limit), 0)
        self._states: Dict[str, TrackedProjectState] = {}
        self._lock = threading.Lock()

    def _state_for(self, project_id: str) -> TrackedProjectState:
        state = self._states.get(project_id)
        if state is None:
            state = TrackedProjectState(task_history=deque(maxlen=self.history_limit))
            self._states[project_id] = state
        return state

    def get_state(self, project_id: str) -> Optional[TrackedProjectState]:
        return self._states.get(project_id)

    def is_initialized(self, project_id: str) -> bool:
        return project_id in self._states

    def task_similarity(self, project_id: str, task: str) -> float:
        """
        当前任务与最近任务的相似度

        Jaccard similarity between ``task`` and the most recently tracked
        task; 0.0 when nothing has been tracked yet.
        """
        state = self._states.get(project_id)
        if state is None or not state.task_history:
            return 0.0
        current = extract_task_keywords(task)
        previous = extract_task_keywords(state.task_history[-1])
        return jaccard_similarity(current, previous)

    def should_send_full_context(self, project_id: str, task: str) -> bool:
        if not self.is_initialized(project_id):
            return True
        return self.task_similarity(project_id, task) < self.threshold

    def describe_seen(self, project_id: str) -> str:
        """
        生成连续性说明

        Continuity note naming up to ``preview_limit`` previously shown files
        followed by a remainder count.
        """
        state = self._states.get(project_id)
        seen = list(state.seen_order) if state else []
        if not seen:
            return FIRST_INTERACTION_NOTE

        lines = [f"You have already seen {len(seen)} files in this project, including:"]
        lines.extend(seen[: self.preview_limit])
        remainder = len(seen) - self.preview_limit
        if remainder > 0:
            lines.append(f"...and {remainder} more")
        return "\n".join(lines)

    def decide(self, project_id: str, files: List[ProjectFile], task: str) -> TrackerDecision:
        """
        判定本轮上下文模式并更新跟踪状态

        Decide full vs incremental context for this turn, then record the
        task and mark the returned paths as seen.

        Args:
            project_id: 项目ID / Project id
            files: 当前完整文件集 / Current full file set
            task: 当前任务描述 / Current task text

        Returns:
            本轮判定 / Mode, candidate files and continuity note
        """
        files = list(files or [])
        with self._lock:
            similarity = self.task_similarity(project_id, task)
            full = self.should_send_full_context(project_id, task)

            if full:
                candidates = files
                note = FULL_CONTEXT_NOTE
            else:
                state = self._states[project_id]
                candidates = [f for f in files if f.path not in state.seen_paths]
                note = self.describe_seen(project_id)

            state = self._state_for(project_id)
            state.task_history.append(task or "")
            state.mark_seen([f.path for f in candidates])

        logger.debug(
            "Tracker decision for %s: mode=%s similarity=%.2f candidates=%d/%d",
            project_id,
            "full" if full else "incremental",
            similarity,
            len(candidates),
            len(files),
        )
        return TrackerDecision(
            mode=ContextMode.FULL if full else ContextMode.INCREMENTAL,
            candidates=candidates,
            continuity_note=note,
            similarity=similarity,
        )

    def reset(self, project_id: str) -> bool:
        """重置项目跟踪状态 / Forget everything tracked for a project."""
        with self._lock:
            existed = self._states.pop(project_id, None) is not None
        if existed:
            logger.info("Reset context tracking for project %s", project_id)
        return existed

    def __len__(self) -> int:
        return len(self._states)
