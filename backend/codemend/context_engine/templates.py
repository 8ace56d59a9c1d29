# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  框架模板分类器 - 声明式模板目录 + 命名谓词注册表
  Framework/Template Classifier - Declarative template catalog evaluated through a named-predicate registry.
  Catalog order matters: the first satisfied detector wins, so specific
  templates precede general ones.
"""

from typing import Callable, Dict, List, Optional, Sequence

from .models import DetectorClause, DetectorSpec, FrameworkTemplate
from codemend.exceptions import ContextEngineError
from codemend.schemas.project import ProjectFile
from codemend.utils.text import basename

Predicate = Callable[[Sequence[ProjectFile], Sequence[str]], bool]

# ========================================================================
# 谓词注册表 / Predicate registry
# ========================================================================

PREDICATES: Dict[str, Predicate] = {}


def register_predicate(name: str) -> Callable[[Predicate], Predicate]:
    def decorator(func: Predicate) -> Predicate:
        PREDICATES[name] = func
        return func
    return decorator


@register_predicate("file_named")
def _file_named(files: Sequence[ProjectFile], args: Sequence[str]) -> bool:
    """Any file whose path equals one of ``args``."""
    wanted = set(args)
    return any(f.path in wanted for f in files)


@register_predicate("file_named_containing")
def _file_named_containing(files: Sequence[ProjectFile], args: Sequence[str]) -> bool:
    """``args = (path, needle)``: that file exists and contains the needle."""
    path, needle = args[0], args[1]
    return any(f.path == path and needle in (f.content or "") for f in files)


@register_predicate("path_suffix")
def _path_suffix(files: Sequence[ProjectFile], args: Sequence[str]) -> bool:
    return any(f.path.endswith(tuple(args)) for f in files)


@register_predicate("basename_named")
def _basename_named(files: Sequence[ProjectFile], args: Sequence[str]) -> bool:
    wanted = set(args)
    return any(basename(f.path) in wanted for f in files)


@register_predicate("any_content_contains")
def _any_content_contains(files: Sequence[ProjectFile], args: Sequence[str]) -> bool:
    return any(any(needle in (f.content or "") for needle in args) for f in files)


def _clause(predicate: str, *args: str) -> DetectorClause:
    return DetectorClause(predicate=predicate, args=tuple(args))


def evaluate_detector(detector: DetectorSpec, files: Sequence[ProjectFile]) -> bool:
    """
    评估声明式检测器

    Raises:
        ContextEngineError: 谓词未注册 / Unknown predicate name
    """
    results = []
    for clause in detector.clauses:
        predicate = PREDICATES.get(clause.predicate)
        if predicate is None:
            raise ContextEngineError(f"Unknown detector predicate: {clause.predicate}")
        results.append(predicate(files, clause.args))
    if detector.combine == "all":
        return bool(results) and all(results)
    return any(results)


# ========================================================================
# 模板目录 / Template catalog
# ========================================================================

FRAMEWORK_TEMPLATES: List[FrameworkTemplate] = [
    FrameworkTemplate(
        name="React + Vite",
        detector=DetectorSpec(clauses=(
            _clause("file_named_containing", "vite.config.ts", "react"),
            _clause("file_named_containing", "vite.config.js", "react"),
        )),
        key_files=("vite.config.ts", "index.html", "src/main.tsx", "src/App.tsx", "package.json"),
        priority_dirs=("src/components/", "src/hooks/", "src/services/", "src/utils/", "src/"),
        patterns=(
            "Component-based architecture",
            "React hooks for state management",
            "Fast HMR with Vite",
            "TypeScript for type safety",
        ),
        practices=(
            "Keep components small and focused",
            "Use custom hooks for reusable logic",
            "Organize by feature, not file type",
            "Use absolute imports with path aliases",
        ),
    ),
    FrameworkTemplate(
        name="Next.js",
        detector=DetectorSpec(clauses=(
            _clause("file_named", "next.config.js", "next.config.mjs", "next.config.ts"),
        )),
        key_files=("next.config.js", "package.json", "app/", "pages/", "public/"),
        priority_dirs=("app/", "pages/", "components/", "lib/", "api/"),
        patterns=(
            "File-based routing",
            "Server and Client Components",
            "API routes",
            "Automatic code splitting",
        ),
        practices=(
            "Use Server Components by default",
            'Mark client components with "use client"',
            "Leverage parallel routes and intercepting routes",
            "Use Next.js Image for optimization",
        ),
    ),
    FrameworkTemplate(
        name="React + TypeScript",
        detector=DetectorSpec(combine="all", clauses=(
            _clause("file_named", "tsconfig.json"),
            _clause("any_content_contains", "import React", 'from "react"', "from 'react'"),
        )),
        key_files=("tsconfig.json", "package.json", "src/index.tsx", "src/App.tsx"),
        priority_dirs=("src/components/", "src/hooks/", "src/types/", "src/"),
        patterns=(
            "TypeScript for type safety",
            "React functional components",
            "Props interfaces",
            "Generic components",
        ),
        practices=(
            "Define prop interfaces",
            "Use TypeScript generics for reusable components",
            "Leverage discriminated unions",
            'Avoid "any" types',
        ),
    ),
    FrameworkTemplate(
        name="Vue.js",
        detector=DetectorSpec(clauses=(
            _clause("path_suffix", ".vue"),
            _clause("file_named_containing", "package.json", '"vue"'),
        )),
        key_files=("vite.config.js", "src/main.js", "src/App.vue", "package.json"),
        priority_dirs=("src/components/", "src/views/", "src/composables/", "src/"),
        patterns=(
            "Single File Components (SFC)",
            "Composition API",
            "Reactive state",
            "Template syntax",
        ),
        practices=(
            "Use Composition API over Options API",
            "Extract logic into composables",
            "Use <script setup> syntax",
            "Leverage TypeScript with Vue 3",
        ),
    ),
    FrameworkTemplate(
        name="Express.js",
        detector=DetectorSpec(clauses=(
            _clause("any_content_contains", "express()", 'require("express")', "require('express')",
                    'from "express"', "from 'express'"),
        )),
        key_files=("server.js", "app.js", "index.js", "package.json", "routes/"),
        priority_dirs=("routes/", "controllers/", "middleware/", "models/"),
        patterns=(
            "RESTful API routes",
            "Middleware chain",
            "MVC pattern",
            "Error handling middleware",
        ),
        practices=(
            "Organize routes by resource",
            "Use async/await in route handlers",
            "Implement centralized error handling",
            "Validate input with middleware",
        ),
    ),
    FrameworkTemplate(
        name="Python Flask",
        detector=DetectorSpec(clauses=(
            _clause("any_content_contains", "from flask import", "import flask"),
        )),
        key_files=("app.py", "main.py", "requirements.txt", "templates/", "static/"),
        priority_dirs=("routes/", "models/", "templates/", "static/"),
        patterns=(
            "Flask blueprints",
            "Route decorators",
            "Jinja2 templates",
            "Request/Response handling",
        ),
        practices=(
            "Use blueprints for modular apps",
            "Implement application factory pattern",
            "Use Flask-SQLAlchemy for database",
            "Validate with Flask-WTF",
        ),
    ),
    FrameworkTemplate(
        name="Python Django",
        detector=DetectorSpec(clauses=(
            _clause("basename_named", "manage.py", "settings.py"),
            _clause("any_content_contains", "django."),
        )),
        key_files=("manage.py", "settings.py", "urls.py", "models.py", "views.py"),
        priority_dirs=("models.py", "views.py", "urls.py", "templates/", "static/"),
        patterns=(
            "MVT (Model-View-Template) pattern",
            "Django ORM",
            "URL routing",
            "Admin interface",
        ),
        practices=(
            "Use class-based views",
            "Leverage Django ORM efficiently",
            "Organize apps by feature",
            "Use Django forms for validation",
        ),
    ),
]


class TemplateClassifier:
    """
    框架模板分类器

    Runs each catalog detector in declared order; the first satisfied one
    wins. No match is a normal outcome (``None``).
    """

    def __init__(self, catalog: Optional[Sequence[FrameworkTemplate]] = None):
        self.catalog = list(catalog if catalog is not None else FRAMEWORK_TEMPLATES)

    def classify(self, files: Sequence[ProjectFile]) -> Optional[FrameworkTemplate]:
        files = list(files or [])
        for template in self.catalog:
            if evaluate_detector(template.detector, files):
                return template
        return None

    def get(self, name: str) -> Optional[FrameworkTemplate]:
        return next((t for t in self.catalog if t.name == name), None)


def _is_entry_point(path: str) -> bool:
    return any(marker in path for marker in ("index.", "main.", "App."))


def prioritize_files(files: Sequence[ProjectFile], template: FrameworkTemplate) -> List[ProjectFile]:
    """
    按模板重要性排序文件

    Key files +100, first matching priority directory +50, entry points +75.
    Stable, so equal scores keep input order.
    """
    def score(file: ProjectFile) -> int:
        value = 0
        if any(key in file.path for key in template.key_files):
            value += 100
        if any(area in file.path for area in template.priority_dirs):
            value += 50
        if _is_entry_point(file.path):
            value += 75
        return value

    return sorted(files, key=score, reverse=True)


def build_framework_context(
    files: Sequence[ProjectFile],
    template: FrameworkTemplate,
    task: Optional[str] = None,
) -> str:
    """
    生成框架感知的上下文说明

    Render a template's conventions for the model, listing only key files
    that are actually present in the project.
    """
    present_keys = [k for k in template.key_files if any(k in f.path for f in files)]
    lines = [f"FRAMEWORK CONTEXT: {template.name}", "", "KEY ARCHITECTURAL PATTERNS:"]
    lines.extend(f"  - {p}" for p in template.patterns)
    lines.extend(["", "BEST PRACTICES FOR THIS FRAMEWORK:"])
    lines.extend(f"  - {p}" for p in template.practices)
    lines.extend(["", "IMPORTANT FILES TO FOCUS ON:"])
    lines.extend(f"  - {k}" for k in present_keys)
    lines.extend(["", "PRIORITY FILE AREAS:"])
    lines.extend(f"  - {d}" for d in template.priority_dirs[:5])
    lines.append("")
    if task:
        lines.append(f"CURRENT TASK: {task}")
    lines.append(f"When working on this {template.name} project, follow the patterns and best practices above.")
    return "\n".join(lines)
