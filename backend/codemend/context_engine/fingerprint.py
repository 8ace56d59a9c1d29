# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  文件集指纹 - 由文件数量、有序路径与可选内容哈希派生的缓存键
  File-set fingerprint - Cache key derived from file count, ordered paths and an optional content hash.
  Any add, remove, rename or reorder changes the fingerprint, so stale cache
  entries are never read back.
"""

import hashlib
from typing import Iterable, List

from codemend.schemas.project import ProjectFile


def fingerprint_paths(paths: Iterable[str]) -> str:
    """
    对有序路径列表计算指纹

    Fingerprint an ordered path list as ``"<count>:<sha1>"``.

    Example:
        >>> fingerprint_paths(["a.ts", "b.ts"]).startswith("2:")
        True
    """
    ordered: List[str] = list(paths)
    digest = hashlib.sha1("\n".join(ordered).encode("utf-8")).hexdigest()
    return f"{len(ordered)}:{digest}"


def fingerprint_files(files: Iterable[ProjectFile], include_content: bool = False) -> str:
    """
    计算文件集指纹

    Fingerprint a file collection.

    Args:
        files: 文件列表（顺序有意义） / Files, order significant
        include_content: 是否附加内容哈希 / Append a hash over (path, length, content)

    Returns:
        指纹字符串 / ``"<count>:<paths sha1>"`` or ``"<count>:<paths sha1>:<content sha1>"``
    """
    file_list = list(files or [])
    base = fingerprint_paths(f.path for f in file_list)
    if not include_content:
        return base

    hasher = hashlib.sha1()
    for f in file_list:
        content = f.content or ""
        hasher.update(f.path.encode("utf-8"))
        hasher.update(b"\0")
        hasher.update(str(len(content)).encode("ascii"))
        hasher.update(b"\0")
        hasher.update(content.encode("utf-8"))
        hasher.update(b"\1")
    return f"{base}:{hasher.hexdigest()}"
