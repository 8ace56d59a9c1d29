# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  文本分词器 - 任务文本的关键词提取与相似度计算
  Text Tokenizer - Keyword extraction and similarity for task descriptions.

功能 / Features:
  - 任务关键词：小写、长度>3、去停用词 / Task keywords: lowercased, len > 3, stopwords removed
  - 评分词：按空白切分的去重词 / Scoring tokens: distinct whitespace-split words
  - 上下文关键词：引号内文本、驼峰标识符、角色词汇 / Context keywords: quoted text, CamelCase, role vocabulary
  - 相似度：Jaccard / Similarity: Jaccard
"""

import re
from typing import List, Set

from codemend.utils.stopwords import get_stopwords

_WHITESPACE = re.compile(r"\s+")
_QUOTED = re.compile(r'"([^"]+)"|\'([^\']+)\'')
_PASCAL_IDENTIFIER = re.compile(r"\b[A-Z][a-z]+(?:[A-Z][a-z]+)*\b")
_CAMEL_IDENTIFIER = re.compile(r"\b[a-z]+(?:[A-Z][a-z0-9]*)+\b")

# Programming role vocabulary; a term counts when it appears in the task text.
# 编程角色词汇
ROLE_VOCABULARY = (
    "component", "service", "controller", "model", "view",
    "api", "route", "handler", "middleware", "hook",
    "function", "class", "interface", "type", "util", "helper",
)


def _split_words(text: str) -> List[str]:
    return [w for w in _WHITESPACE.split((text or "").lower()) if w]


def extract_task_keywords(task: str) -> Set[str]:
    """
    提取任务关键词集合

    Extract the keyword set used to compare consecutive tasks.

    Example:
        >>> sorted(extract_task_keywords("Refactor the login form which breaks"))
        ['breaks', 'form', 'login', 'refactor']
    """
    stopwords = get_stopwords()
    return {w for w in _split_words(task) if len(w) > 3 and w not in stopwords}


def jaccard_similarity(left: Set[str], right: Set[str]) -> float:
    """
    计算 Jaccard 相似度

    Jaccard similarity of two sets; two empty sets score 0.0 so that an
    empty task never counts as "unchanged".
    """
    union = left | right
    if not union:
        return 0.0
    return len(left & right) / len(union)


def scoring_tokens(task: str, min_length: int) -> List[str]:
    """
    评分用的去重词（保持首次出现顺序）

    Distinct lowercased words longer than ``min_length``, first-seen order.
    """
    return list(dict.fromkeys(w for w in _split_words(task) if len(w) > min_length))


def extract_context_keywords(task: str) -> List[str]:
    """
    提取上下文关键词

    Extract contextual keywords from a task: quoted substrings, CamelCase and
    PascalCase identifiers, and role vocabulary terms mentioned in the task.

    Example:
        >>> extract_context_keywords('fix the "LoginForm" hook')
        ['LoginForm', 'hook']
    """
    text = task or ""
    keywords: List[str] = []

    for match in _QUOTED.finditer(text):
        quoted = (match.group(1) or match.group(2) or "").strip()
        if quoted:
            keywords.append(quoted)

    keywords.extend(_PASCAL_IDENTIFIER.findall(text))
    keywords.extend(_CAMEL_IDENTIFIER.findall(text))

    lowered = text.lower()
    for term in ROLE_VOCABULARY:
        if term in lowered:
            keywords.append(term)

    # 大小写不敏感去重 / Case-insensitive dedupe, first spelling wins
    seen: Set[str] = set()
    unique: List[str] = []
    for keyword in keywords:
        folded = keyword.lower()
        if folded in seen:
            continue
        seen.add(folded)
        unique.append(keyword)
    return unique
