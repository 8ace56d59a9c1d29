# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  项目结构摘要 - 架构判断、关键文件、外部依赖、入口文件与单文件摘要
  Project summary - Architecture guess, key files, external dependencies, entry points and per-file summaries.
  Everything here is derived from paths and content alone; no model calls.
"""

import json
import re
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence

from .models import FileSummary, FrameworkTemplate, ProjectSummary
from .relevance import is_bootstrap_file
from codemend.schemas.project import ProjectFile
from codemend.utils.logger import get_logger
from codemend.utils.text import basename

logger = get_logger(__name__)

MAX_KEY_FILES = 10
MAX_DEPENDENCIES = 15
MAX_ENTRY_POINTS = 5
MAX_KEY_FUNCTIONS = 5

_BACKEND_EXTENSIONS = {"py", "java", "go", "rb", "php"}
_FRONTEND_EXTENSIONS = {"html", "js", "jsx", "tsx", "css", "scss", "vue", "svelte"}

_BARE_IMPORT = re.compile(r"""(?:import|from|require\(?)\s*['"]([^'"]+)['"]""")
_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._\-]*)")
_KEY_FUNCTION = re.compile(r"(?:function|def|class|const|let|var)\s+(\w+)")
_TEST_CALL = re.compile(r"\b(?:describe|it|test)\(")


def _extension(path: str) -> str:
    name = basename(path)
    if "." not in name:
        return "other"
    return name.rsplit(".", 1)[-1].lower() or "other"


def _package_name(specifier: str) -> str:
    """``lodash/fp`` -> ``lodash``; scoped packages keep their scope."""
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2])
    return parts[0]


def analyze_structure(files: Sequence[ProjectFile]) -> Dict[str, Any]:
    """
    分析项目结构

    Returns:
        {"architecture": fullstack|backend|frontend|unknown,
         "file_types": {ext: count}, "total_files": n}
    """
    files = [f for f in files or [] if f and f.path]
    file_types = Counter(_extension(f.path) for f in files)

    has_backend = any(
        _extension(f.path) in _BACKEND_EXTENSIONS
        or basename(f.path).startswith(("server.", "api."))
        for f in files
    )
    has_frontend = any(
        _extension(f.path) in _FRONTEND_EXTENSIONS
        or "react" in f.path.lower()
        or "vue" in f.path.lower()
        for f in files
    )

    if has_backend and has_frontend:
        architecture = "fullstack"
    elif has_backend:
        architecture = "backend"
    elif has_frontend:
        architecture = "frontend"
    else:
        architecture = "unknown"

    return {"architecture": architecture, "file_types": dict(file_types), "total_files": len(files)}


def identify_key_files(files: Sequence[ProjectFile]) -> List[ProjectFile]:
    """Manifests, entry points, env/config files and readmes, at most ten."""
    return [f for f in files or [] if f and is_bootstrap_file(f.path)][:MAX_KEY_FILES]


def _manifest_dependencies(file: ProjectFile) -> List[str]:
    name = basename(file.path)
    if name == "package.json":
        try:
            manifest = json.loads(file.content)
        except ValueError:
            logger.debug("Ignoring malformed package.json at %s", file.path)
            return []
        if not isinstance(manifest, dict):
            return []
        found: List[str] = []
        for section in ("dependencies", "devDependencies"):
            block = manifest.get(section)
            if isinstance(block, dict):
                found.extend(block.keys())
        return found

    if name == "requirements.txt":
        found = []
        for line in file.content.split("\n"):
            line = line.strip()
            if not line or line.startswith(("#", "-")):
                continue
            match = _REQUIREMENT_NAME.match(line)
            if match:
                found.append(match.group(1))
        return found

    return []


def _bare_imports(content: str) -> List[str]:
    return [
        _package_name(specifier)
        for specifier in _BARE_IMPORT.findall(content or "")
        if specifier and not specifier.startswith((".", "/"))
    ]


def extract_dependencies(files: Sequence[ProjectFile]) -> List[str]:
    """
    提取外部依赖

    Declared package.json/requirements.txt dependencies plus bare import
    specifiers, deduplicated in first-seen order and capped at fifteen.
    """
    found: List[str] = []
    for file in files or []:
        if not file or not file.content:
            continue
        found.extend(_manifest_dependencies(file))
        found.extend(_bare_imports(file.content))
    return list(dict.fromkeys(found))[:MAX_DEPENDENCIES]


def find_entry_points(files: Sequence[ProjectFile]) -> List[str]:
    markers = ("index.", "main.", "app.", "server.", "Server.")
    return [f.path for f in files or [] if f and any(m in basename(f.path) for m in markers)][:MAX_ENTRY_POINTS]


def determine_purpose(path: str, content: str) -> str:
    """按文件名与内容判断用途 / First matching purpose label wins."""
    name = path.lower()
    text = (content or "").lower()

    if "test" in name or _TEST_CALL.search(text):
        return "Testing"
    if "component" in name or "react" in text or "vue" in text:
        return "UI Component"
    if "util" in name or "helper" in name:
        return "Utility functions"
    if "api" in name or "route" in name or "app.get(" in text:
        return "API routes"
    if "config" in name or "setting" in name:
        return "Configuration"
    if "style" in name or name.endswith(".css"):
        return "Styling"
    if "class " in text or "interface " in text:
        return "Class/Interface definition"
    if "function " in text or "const " in text or "def " in text:
        return "Function definitions"
    return "General code file"


def summarize_file(file: ProjectFile) -> FileSummary:
    """
    生成单文件摘要

    Complexity is by size: medium above 1000 characters, high above 5000.
    """
    content = file.content or ""
    size = len(content)
    if size > 5000:
        complexity = "high"
    elif size > 1000:
        complexity = "medium"
    else:
        complexity = "low"

    return FileSummary(
        path=file.path,
        purpose=determine_purpose(file.path, content),
        key_functions=_KEY_FUNCTION.findall(content)[:MAX_KEY_FUNCTIONS],
        dependencies=list(dict.fromkeys(_bare_imports(content))),
        complexity=complexity,
    )


def render_summary(
    structure: Dict[str, Any],
    key_files: Sequence[ProjectFile],
    dependencies: Sequence[str],
    entry_points: Sequence[str],
) -> str:
    lines = [
        f"{structure['architecture'].upper()} project with {structure['total_files']} files.",
        f"Key technologies: {', '.join(list(structure['file_types'])[:5])}",
        f"Main entry points: {', '.join(entry_points)}",
        f"Key configuration: {', '.join(f.path for f in key_files)}",
    ]
    if dependencies:
        lines.append(f"Dependencies: {', '.join(list(dependencies)[:8])}")
    else:
        lines.append("No external dependencies detected")
    return "\n".join(lines)


def build_project_summary(
    project_id: str,
    files: Sequence[ProjectFile],
    template: Optional[FrameworkTemplate] = None,
) -> ProjectSummary:
    """
    构建项目摘要

    Args:
        project_id: 项目ID / Project id
        files: 项目文件 / Project files
        template: 已识别的框架模板 / Detected template, if any

    Returns:
        ProjectSummary
    """
    files = list(files or [])
    structure = analyze_structure(files)
    key_files = identify_key_files(files)
    dependencies = extract_dependencies(files)
    entry_points = find_entry_points(files)

    summary = render_summary(structure, key_files, dependencies, entry_points)
    if template is not None:
        summary += f"\nFramework: {template.name}"

    return ProjectSummary(
        project_id=project_id,
        summary=summary,
        architecture=structure["architecture"],
        key_files=[f.path for f in key_files],
        dependencies=dependencies,
        entry_points=entry_points,
        file_types=structure["file_types"],
        files=[summarize_file(f) for f in files],
        template=template,
    )
