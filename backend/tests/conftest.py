"""Pytest configuration for CodeMend backend tests."""
import sys
from pathlib import Path

import pytest

# Ensure the backend package is importable
backend_root = Path(__file__).resolve().parent.parent
if str(backend_root) not in sys.path:
    sys.path.insert(0, str(backend_root))

from codemend.config import DEFAULT_CONFIG  # noqa: E402
from codemend.context_engine import ContextPreparationEngine  # noqa: E402
from codemend.schemas import Project, ProjectFile  # noqa: E402


def make_file(path: str, content: str = "") -> ProjectFile:
    return ProjectFile(path=path, content=content)


def make_project(project_id: str, files) -> Project:
    return Project(id=project_id, files=[make_file(p, c) for p, c in files])


@pytest.fixture
def engine():
    """Fresh engine on built-in defaults, independent of config.yaml."""
    return ContextPreparationEngine(settings=DEFAULT_CONFIG)
