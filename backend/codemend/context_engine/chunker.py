# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  大文件分块器 - 按逻辑边界将超长文件切分为有界片段，并生成结构摘要
  Large-File Chunker - Splits oversized files into bounded, logically-aligned segments with structural summaries.
  Chunks always cover every line exactly once; unbalanced braces only make
  the split coarser (pure line-count splitting). Brace-less definitions
  (Python) are split just before the next top-level block.
"""

import re
from typing import List, Optional

from .models import Chunk
from codemend.schemas.project import ProjectFile
from codemend.utils.text import split_lines

# Top-level block openers: class/function/def, exported or arrow-function constants, member modifiers
_BLOCK_OPENER = re.compile(
    r"^(?:export\s+(?:default\s+)?)?(?:async\s+)?(?:class|function|def)\b"
    r"|^(?:export\s+)?(?:const|let)\s+\w+\s*="
    r"|^\s*(?:public|private|protected)\s+"
)

_DEFINITION = re.compile(r"(?:function|const)\s+\w+|def\s+\w+|class\s+\w+")
_IMPORT = re.compile(r"import\s+.*from|require\(|from\s+[\w.]+\s+import")
_EXPORT = re.compile(r"export\s+(?:default\s+)?(?:class|function|const)")
_DECORATOR = re.compile(r"^@\w")


def _starts_block(line: str) -> bool:
    return bool(_BLOCK_OPENER.match(line) or _DECORATOR.match(line))


def summarize_section(code: str) -> str:
    """
    生成片段结构摘要

    Count imports, definitions and exports in a section.

    Example:
        >>> summarize_section("import a from 'a'\\nexport function f() {}")
        '1 imports, 1 definitions, 1 exports'
    """
    if not any(line.strip() for line in (code or "").split("\n")):
        return "Empty section"

    imports = len(_IMPORT.findall(code))
    definitions = len(_DEFINITION.findall(code))
    exports = len(_EXPORT.findall(code))

    parts = []
    if imports:
        parts.append(f"{imports} imports")
    if definitions:
        parts.append(f"{definitions} definitions")
    if exports:
        parts.append(f"{exports} exports")
    return ", ".join(parts) if parts else "Code section"


class LargeFileChunker:
    """
    大文件分块器

    Attributes:
        threshold: 超过该行数才分块 / Files with more lines than this are chunked
        max_lines: 单块最大行数 / Hard line cap per chunk (defaults to threshold)
        min_lines: 逻辑边界切分的最小行数 / A closed definition only flushes a chunk longer than this
    """

    def __init__(self, threshold: int = 500, max_lines: Optional[int] = None, min_lines: int = 50):
        self.threshold = max(int(threshold), 1)
        self.max_lines = max(int(max_lines or self.threshold), 1)
        self.min_lines = max(int(min_lines), 0)

    def needs_chunking(self, file: ProjectFile) -> bool:
        return len(split_lines(file.content)) > self.threshold

    def chunk(self, file: ProjectFile) -> List[Chunk]:
        """
        将文件切分为片段

        Args:
            file: 项目文件 / Project file

        Returns:
            片段列表，空文件返回空列表 / Chunks in line order; empty content yields none
        """
        lines = split_lines(file.content if file else "")
        if not lines:
            return []

        if len(lines) <= self.threshold:
            content = "\n".join(lines)
            return [Chunk(content=content, start_line=1, end_line=len(lines), summary=summarize_section(content))]

        chunks: List[Chunk] = []
        current: List[str] = []
        start_line = 1
        in_definition = False
        braced = False
        balance = 0

        for index, line in enumerate(lines):
            number = index + 1
            current.append(line)

            if _BLOCK_OPENER.match(line):
                in_definition = True

            balance += line.count("{") - line.count("}")
            if balance < 0:
                # 多余的右括号：回到纯行数切分 / stray closers, fall back to line counting
                balance = 0
            if balance > 0:
                braced = True

            closed_definition = False
            if in_definition and balance == 0 and len(current) > self.min_lines:
                if braced:
                    closed_definition = True
                else:
                    # 无括号定义（如 Python def）在下一个定义开始前切分 / brace-less bodies end where the next block starts
                    next_line = lines[index + 1] if index + 1 < len(lines) else None
                    closed_definition = next_line is not None and _starts_block(next_line)

            if len(current) >= self.max_lines or closed_definition:
                content = "\n".join(current)
                chunks.append(Chunk(
                    content=content,
                    start_line=start_line,
                    end_line=number,
                    summary=summarize_section(content),
                ))
                current = []
                start_line = number + 1
                in_definition = False
                braced = False

        if current:
            content = "\n".join(current)
            chunks.append(Chunk(
                content=content,
                start_line=start_line,
                end_line=len(lines),
                summary=summarize_section(content),
            ))

        return chunks
