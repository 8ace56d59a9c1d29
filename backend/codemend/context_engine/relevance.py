# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  相关性评分器 - 基于文件名、内容与角色启发式对文件排序
  Relevance Scorer - Ranks files against a task with filename, content and role heuristics.

评分项 / Score components:
  - 路径命中任务词 / task token in path
  - 内容命中任务词（封顶） / task token in content, capped
  - 上下文关键词 / contextual keywords
  - 意图与文件角色匹配 / intent-to-role pairs
  - 启动/配置文件 / bootstrap and config files
  - 体积惩罚 / size penalty
"""

import re
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set

from .models import RelevanceScore, TaskIntent
from .text_tokenizer import extract_context_keywords, scoring_tokens
from codemend.schemas.project import ProjectFile
from codemend.utils.text import basename


@dataclass(frozen=True)
class RelevanceWeights:
    """
    评分权重 / Scoring weights

    Empirical constants, kept tunable through config.yaml (``relevance_weights``).
    """
    path_token: float = 50
    content_token: float = 5
    content_token_cap: float = 50
    context_keyword: float = 20
    intent_role: float = 30
    bootstrap_file: float = 20
    size_penalty: float = 10
    min_content_chars: int = 100
    max_content_chars: int = 50000

    @classmethod
    def from_config(cls, values: Optional[Mapping[str, Any]]) -> "RelevanceWeights":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (values or {}).items() if k in known})


# ========================================================================
# 任务意图 / Task intents
# ========================================================================

INTENT_KEYWORDS: Dict[TaskIntent, tuple] = {
    TaskIntent.UI: ("component", "ui", "button", "form", "modal", "layout", "page", "view", "render", "display"),
    TaskIntent.API: ("api", "endpoint", "route", "request", "response", "fetch", "http", "rest"),
    TaskIntent.STATE: ("state", "store", "redux", "context", "provider", "hook", "data"),
    TaskIntent.STYLING: ("style", "css", "theme", "color", "layout", "design"),
}

_INTENT_PATTERNS = {
    intent: re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")", re.IGNORECASE)
    for intent, keywords in INTENT_KEYWORDS.items()
}


def detect_intents(task: str) -> Set[TaskIntent]:
    """
    检测任务意图

    Keyword sniffing anchored at word starts, so "components" counts as UI
    while "build" does not.
    """
    text = task or ""
    return {intent for intent, pattern in _INTENT_PATTERNS.items() if pattern.search(text)}


# ========================================================================
# 文件角色 / File roles
# ========================================================================

def is_ui_file(file: ProjectFile) -> bool:
    name = file.path.lower()
    content = file.content or ""
    return (
        any(marker in name for marker in ("component", "view", "page"))
        or ("return (" in content and "<" in content)
        or name.endswith((".vue", ".jsx", ".tsx"))
    )


def is_api_file(file: ProjectFile) -> bool:
    name = file.path.lower()
    content = file.content or ""
    return (
        any(marker in name for marker in ("api", "route", "endpoint"))
        or any(marker in content for marker in ("app.get(", "app.post(", "@app.route", "router."))
    )


def is_state_file(file: ProjectFile) -> bool:
    name = file.path.lower()
    content = file.content or ""
    return (
        any(marker in name for marker in ("store", "state", "context", "provider"))
        or "createContext" in content
        or "useState" in content
    )


def is_style_file(file: ProjectFile) -> bool:
    name = file.path.lower()
    return name.endswith((".css", ".scss", ".sass", ".less")) or "style" in name or "theme" in name


ROLE_DETECTORS = {
    TaskIntent.UI: is_ui_file,
    TaskIntent.API: is_api_file,
    TaskIntent.STATE: is_state_file,
    TaskIntent.STYLING: is_style_file,
}

_BOOTSTRAP_PATTERNS = (
    re.compile(r"package\.json$"),
    re.compile(r"requirements\.txt$"),
    re.compile(r"pyproject\.toml$"),
    re.compile(r"^index\."),
    re.compile(r"^main\."),
    re.compile(r"^app\."),
    re.compile(r"^server\."),
    re.compile(r"^config\."),
    re.compile(r"\.env"),
    re.compile(r"README\.md", re.IGNORECASE),
)


def is_bootstrap_file(path: str) -> bool:
    """启动/配置文件 / Manifest, entry point, env/config or readme by file name."""
    name = basename(path)
    return any(pattern.search(name) for pattern in _BOOTSTRAP_PATTERNS)


class RelevanceScorer:
    """
    相关性评分器

    Pure and deterministic; caching happens in the orchestrator, keyed by
    (task, file-set fingerprint, K).
    """

    def __init__(self, weights: Optional[RelevanceWeights] = None):
        self.weights = weights or RelevanceWeights()

    def score_file(self, task: str, file: ProjectFile) -> RelevanceScore:
        """
        计算单个文件的相关性分数

        Args:
            task: 任务描述 / Task text
            file: 候选文件 / Candidate file

        Returns:
            分数与命中原因 / Score with the reasons that contributed
        """
        w = self.weights
        score = 0.0
        reasons: List[str] = []
        path_lower = file.path.lower()
        content = file.content or ""
        content_lower = content.lower()

        # 1. 文件路径命中 / filename match
        for token in scoring_tokens(task, 2):
            if token in path_lower:
                score += w.path_token
                reasons.append(f"path:{token}")

        # 2. 内容命中（封顶） / content match, capped
        content_hits = sum(1 for token in scoring_tokens(task, 3) if token in content_lower)
        if content_hits:
            score += min(content_hits * w.content_token, w.content_token_cap)
            reasons.append(f"content:{content_hits}")

        # 3. 上下文关键词 / contextual keywords
        for keyword in extract_context_keywords(task):
            if keyword.lower() in content_lower:
                score += w.context_keyword
                reasons.append(f"keyword:{keyword}")

        # 4. 意图与角色 / intent-role pairs
        for intent in sorted(detect_intents(task), key=lambda i: i.value):
            if ROLE_DETECTORS[intent](file):
                score += w.intent_role
                reasons.append(f"role:{intent.value}")

        # 5. 启动/配置文件 / bootstrap files
        if is_bootstrap_file(file.path):
            score += w.bootstrap_file
            reasons.append("bootstrap")

        # 6. 体积惩罚 / size penalty
        size = len(content)
        if size < w.min_content_chars or size > w.max_content_chars:
            score -= w.size_penalty
            reasons.append("size")

        return RelevanceScore(file=file, score=score, reasons=reasons)

    def rank(self, task: str, files: Sequence[ProjectFile], top_k: int = 10) -> List[RelevanceScore]:
        """
        排序并返回前K个文件

        Stable sort, so ties keep input order.
        """
        if top_k <= 0:
            return []
        scored = [self.score_file(task, f) for f in files or []]
        scored.sort(key=lambda s: s.score, reverse=True)
        return scored[:top_k]
