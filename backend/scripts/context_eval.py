#!/usr/bin/env python3
"""
Regression evaluation script for the CodeMend context engine.
Runs fixed task cases against a project directory and outputs payload metrics + checks.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List


DEFAULT_CASES: List[Dict[str, str]] = [
    {"task": "fix the login form validation"},
    {"task": "fix the login form validation"},
    {"task": "add an API endpoint for user settings"},
    {"task": "change the theme colors in the header"},
    {"task": "refactor the store state management"},
]

SKIP_DIRS = {".git", "node_modules", "__pycache__", ".venv", "venv", "dist", "build"}
SOURCE_SUFFIXES = {
    ".ts", ".tsx", ".js", ".jsx", ".mjs", ".vue", ".py", ".json", ".css", ".scss",
    ".html", ".md", ".txt", ".toml", ".yaml", ".yml",
}


def _resolve_backend_dir() -> Path:
    return Path(__file__).resolve().parents[1]


def _ensure_sys_path(backend_dir: Path) -> None:
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


def _load_cases_from_file(path: Path) -> List[Dict[str, str]]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(raw, list):
        cases: List[Dict[str, str]] = []
        for item in raw:
            if isinstance(item, str):
                cases.append({"task": item})
            elif isinstance(item, dict) and item.get("task"):
                cases.append({"task": str(item["task"])})
        return cases
    return []


def _load_project_files(root: Path, max_bytes: int) -> List[Dict[str, str]]:
    files: List[Dict[str, str]] = []
    for path in sorted(root.rglob("*")):
        if not path.is_file() or any(part in SKIP_DIRS for part in path.relative_to(root).parts):
            continue
        if path.suffix.lower() not in SOURCE_SUFFIXES and path.name not in {".env", "requirements.txt"}:
            continue
        if path.stat().st_size > max_bytes:
            continue
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue
        files.append({"path": path.relative_to(root).as_posix(), "content": content})
    return files


def _build_metrics(payload: Dict[str, Any]) -> Dict[str, Any]:
    files = payload.get("files") or []
    return {
        "is_full_context": payload.get("is_full_context"),
        "template": payload.get("template_name"),
        "file_count": len(files),
        "chunked_files": sum(1 for f in files if f.get("chunks")),
        "total_tokens": payload.get("total_tokens", 0),
        "top_files": [f.get("path") for f in files[:5]],
        "degraded": payload.get("degraded", False),
    }


def _build_checks(index: int, previous_task: str, task: str, metrics: Dict[str, Any]) -> Dict[str, Any]:
    checks = {
        "not_degraded": not metrics["degraded"],
        "first_turn_full": metrics["is_full_context"] if index == 1 else True,
        "repeat_task_incremental": (not metrics["is_full_context"]) if task == previous_task else True,
    }
    failed = [key for key, ok in checks.items() if not ok]
    return {
        "pass": not failed,
        "failed": failed,
        "checks": checks,
    }


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="CodeMend context engine evaluation runner")
    parser.add_argument("--project-dir", required=True, help="Project directory to load files from")
    parser.add_argument("--project-id", default="", help="Project ID (defaults to directory name)")
    parser.add_argument("--task", default="", help="Single task")
    parser.add_argument("--cases-file", default="", help="JSON file with task list")
    parser.add_argument("--top-k", type=int, default=0, help="Files per turn (optional)")
    parser.add_argument("--max-tokens", type=int, default=0, help="Token budget per turn (optional)")
    parser.add_argument("--max-file-bytes", type=int, default=512_000, help="Skip files larger than this")
    parser.add_argument("--output", default="", help="Output JSON file (optional)")
    return parser.parse_args()


def _build_cases(args: argparse.Namespace) -> List[Dict[str, str]]:
    if args.task:
        return [{"task": args.task}]
    if args.cases_file:
        cases = _load_cases_from_file(Path(args.cases_file))
        if cases:
            return cases
    return list(DEFAULT_CASES)


def main() -> int:
    args = _parse_args()
    _ensure_sys_path(_resolve_backend_dir())

    from codemend.context_engine import ContextPreparationEngine, load_encoding
    from codemend.schemas import PrepareOptions, Project

    root = Path(args.project_dir).resolve()
    project = Project(
        id=args.project_id or root.name,
        name=root.name,
        files=_load_project_files(root, args.max_file_bytes),
    )
    options = PrepareOptions(
        top_k=args.top_k or None,
        max_tokens=args.max_tokens or None,
        include_content=False,
    )
    load_encoding()
    engine = ContextPreparationEngine()

    results: List[Dict[str, Any]] = []
    previous_task = ""
    for idx, case in enumerate(_build_cases(args), start=1):
        task = case.get("task", "").strip()
        if not task:
            continue
        payload = engine.prepare_context(project, task, options).model_dump()
        metrics = _build_metrics(payload)
        results.append({
            "case_id": idx,
            "task": task,
            "metrics": metrics,
            "checks": _build_checks(idx, previous_task, task, metrics),
            "continuity_note": payload.get("continuity_note"),
        })
        previous_task = task

    output = {
        "project_id": project.id,
        "file_count": len(project.files),
        "case_count": len(results),
        "cases": results,
        "cache": engine.cache_stats(),
    }
    failed = [case for case in results if not case["checks"]["pass"]]
    output["summary"] = {
        "pass_count": len(results) - len(failed),
        "fail_count": len(failed),
        "failed_cases": [
            {"case_id": case["case_id"], "task": case["task"], "failed": case["checks"]["failed"]}
            for case in failed
        ],
    }

    if args.output:
        Path(args.output).write_text(json.dumps(output, ensure_ascii=False, indent=2), encoding="utf-8")
        print(f"已写入: {args.output}")
    else:
        print(json.dumps(output, ensure_ascii=False, indent=2))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
