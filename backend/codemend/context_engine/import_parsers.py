# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  导入解析表 - 可插拔的 (正则, 解析器) 源码约定表
  Import parser table - Pluggable (pattern, resolver) pairs, one per source convention.
  Adding a convention means appending a row; nothing else changes.

  解析是尽力而为的启发式：无法解析的导入被静默丢弃。
  Parsing is best-effort: unresolvable specifiers are dropped silently.
"""

import posixpath
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Pattern, Sequence

from codemend.schemas.project import ProjectFile

# Probe order for a resolved stem
RESOLVE_EXTENSIONS = ("", ".ts", ".tsx", ".js", ".jsx", ".py", ".vue")
INDEX_FILES = ("index.ts", "index.tsx", "index.js", "index.jsx", "__init__.py")

# resolver(raw specifier, importer path) -> candidate path stems, most specific first.
# An empty list marks the specifier as external.
Resolver = Callable[[str, str], List[str]]


@dataclass(frozen=True)
class ImportConvention:
    """
    一种导入语法约定
    One source convention: a tag, the regex capturing the specifier, and its resolver
    """
    name: str
    pattern: Pattern[str]
    resolver: Resolver

    def extract(self, content: str) -> List[str]:
        found: List[str] = []
        for match in self.pattern.finditer(content or ""):
            raw = next((g for g in match.groups() if g), "")
            raw = raw.strip()
            if raw:
                found.append(raw)
        return found


def _strip_relative_prefix(specifier: str) -> str:
    cleaned = specifier
    while True:
        if cleaned.startswith("./"):
            cleaned = cleaned[2:]
        elif cleaned.startswith("../"):
            cleaned = cleaned[3:]
        else:
            return cleaned


def resolve_script_specifier(specifier: str, importer: str) -> List[str]:
    """
    解析 ES/CommonJS 模块说明符

    Relative specifiers yield the importer-relative path first, then the
    specifier with its leading ``./`` and ``../`` segments stripped.
    Bare specifiers (packages) are external.
    """
    if not specifier.startswith("."):
        return []
    candidates: List[str] = []
    joined = posixpath.normpath(posixpath.join(posixpath.dirname(importer), specifier))
    if joined not in (".", "") and not joined.startswith("../"):
        candidates.append(joined)
    stripped = _strip_relative_prefix(specifier).rstrip("/")
    if stripped and stripped not in candidates and stripped not in (".", ".."):
        candidates.append(stripped)
    return candidates


def resolve_python_module(module: str, importer: str) -> List[str]:
    """
    解析 Python 相对模块

    ``from .models import X`` inside ``pkg/service.py`` resolves to
    ``pkg/models`` first, then ``models``. Absolute modules are external.
    """
    if not module.startswith("."):
        return []
    dots = len(module) - len(module.lstrip("."))
    remainder = module.lstrip(".").replace(".", "/")
    if not remainder:
        return []
    base = posixpath.dirname(importer)
    for _ in range(dots - 1):
        base = posixpath.dirname(base)
    candidates: List[str] = []
    joined = posixpath.normpath(posixpath.join(base, remainder)) if base else remainder
    if not joined.startswith("../"):
        candidates.append(joined)
    if remainder not in candidates:
        candidates.append(remainder)
    return candidates


def resolve_external(_specifier: str, _importer: str) -> List[str]:
    return []


IMPORT_CONVENTIONS: List[ImportConvention] = [
    ImportConvention(
        name="es_module",
        pattern=re.compile(r"""\b(?:import|export)\s+(?:type\s+)?(?:[\w{},\s*$]+\s+from\s+)?['"]([^'"\n]+)['"]"""),
        resolver=resolve_script_specifier,
    ),
    ImportConvention(
        name="dynamic_import",
        pattern=re.compile(r"""\bimport\s*\(\s*['"]([^'"\n]+)['"]\s*\)"""),
        resolver=resolve_script_specifier,
    ),
    ImportConvention(
        name="commonjs_require",
        pattern=re.compile(r"""\brequire\s*\(\s*['"]([^'"\n]+)['"]\s*\)"""),
        resolver=resolve_script_specifier,
    ),
    ImportConvention(
        name="python_from",
        pattern=re.compile(r"^[ \t]*from[ \t]+(\.+[\w.]*|[A-Za-z_][\w.]*)[ \t]+import\b", re.MULTILINE),
        resolver=resolve_python_module,
    ),
    ImportConvention(
        name="python_import",
        pattern=re.compile(r"^[ \t]*import[ \t]+([A-Za-z_][\w.]*)[ \t]*(?:as[ \t]+\w+)?[ \t]*$", re.MULTILINE),
        resolver=resolve_external,
    ),
]


@dataclass(frozen=True)
class RawImport:
    """A specifier as written, tagged with the convention that matched it."""
    specifier: str
    convention: str


def extract_imports(
    file: ProjectFile,
    conventions: Sequence[ImportConvention] = tuple(IMPORT_CONVENTIONS),
) -> List[RawImport]:
    """
    提取文件中的原始导入（按文件去重）

    Extract raw import targets from one file, deduplicated by specifier in
    first-seen order. Malformed statements simply do not match.
    """
    if not file or not file.content:
        return []
    seen: Dict[str, RawImport] = {}
    for convention in conventions:
        for specifier in convention.extract(file.content):
            if specifier not in seen:
                seen[specifier] = RawImport(specifier=specifier, convention=convention.name)
    return list(seen.values())


class PathIndex:
    """
    项目路径索引
    Path lookup for probing: exact paths plus first-match suffix lookup in file order
    """

    def __init__(self, paths: Iterable[str]):
        self.ordered: List[str] = list(dict.fromkeys(paths))
        self._exact = set(self.ordered)

    def find(self, candidate: str) -> Optional[str]:
        if not candidate:
            return None
        if candidate in self._exact:
            return candidate
        prefixed = f"src/{candidate}"
        if prefixed in self._exact:
            return prefixed
        suffix = "/" + candidate
        for path in self.ordered:
            if path.endswith(suffix):
                return path
        return None

    def probe(self, stem: str) -> Optional[str]:
        """
        用扩展名与 index 文件探测路径

        Probe a stem against extensions, then index files inside a directory
        of the same name. First match wins.
        """
        for ext in RESOLVE_EXTENSIONS:
            found = self.find(stem + ext)
            if found:
                return found
        for index_name in INDEX_FILES:
            found = self.find(f"{stem}/{index_name}")
            if found:
                return found
        return None


def resolve_import(
    raw: RawImport,
    importer: str,
    index: PathIndex,
    conventions: Sequence[ImportConvention] = tuple(IMPORT_CONVENTIONS),
) -> Optional[str]:
    """
    将原始导入解析为项目内路径

    Resolve a raw import to a project path, or None for external and
    unresolvable targets.
    """
    resolver = next((c.resolver for c in conventions if c.name == raw.convention), resolve_external)
    for stem in resolver(raw.specifier, importer):
        found = index.probe(stem)
        if found and found != importer:
            return found
    return None
