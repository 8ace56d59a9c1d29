# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  文本规范化工具 - 换行符规范化与行切分
  Text Normalization Utilities - Normalize newlines and split source text into lines.
"""

from typing import List


def normalize_newlines(text: str | None) -> str:
    """
    规范化换行符（\\r\\n 和 \\r 转换为 \\n）

    Normalize \\\\r\\\\n and \\\\r to \\\\n.

    安全处理None值，返回空字符串。
    Accepts *None* safely (returns empty string).

    Example:
        >>> normalize_newlines("line1\\r\\nline2")
        "line1\\nline2"
        >>> normalize_newlines(None)
        ""
    """
    return (text or "").replace("\r\n", "\n").replace("\r", "\n")


def split_lines(text: str | None) -> List[str]:
    """
    按行切分源码，保留末尾空行语义

    Split source text into lines the way an editor numbers them: a trailing
    newline produces a final empty line, and empty text has no lines.

    Example:
        >>> split_lines("a\\nb")
        ["a", "b"]
        >>> split_lines("")
        []
    """
    normalized = normalize_newlines(text)
    if not normalized:
        return []
    return normalized.split("\n")


def basename(path: str) -> str:
    """Return the last path segment of a forward- or back-slash path."""
    return (path or "").replace("\\", "/").rsplit("/", 1)[-1]
