"""Tests for framework template detection and rendering."""
import pytest
from codemend.context_engine.models import DetectorClause, DetectorSpec
from codemend.context_engine.templates import (
    FRAMEWORK_TEMPLATES,
    TemplateClassifier,
    build_framework_context,
    evaluate_detector,
    prioritize_files,
)
from codemend.exceptions import ContextEngineError
from conftest import make_file


def _classify(*files):
    template = TemplateClassifier().classify([make_file(p, c) for p, c in files])
    return template.name if template else None


class TestTemplateClassifier:
    def test_react_vite(self):
        assert _classify(
            ("vite.config.ts", "import react from '@vitejs/plugin-react'"),
            ("src/App.tsx", "import React from 'react'"),
        ) == "React + Vite"

    def test_nextjs(self):
        assert _classify(("next.config.js", "module.exports = {}"), ("app/page.tsx", "")) == "Next.js"

    def test_react_typescript_requires_both(self):
        assert _classify(("tsconfig.json", "{}"), ("src/App.tsx", "import React from 'react'")) == "React + TypeScript"
        assert _classify(("tsconfig.json", "{}"), ("src/index.ts", "export {}")) is None

    def test_vue_by_sfc(self):
        assert _classify(("src/App.vue", "<template></template>")) == "Vue.js"

    def test_vite_without_react_is_vue(self):
        assert _classify(
            ("vite.config.js", "import vue from '@vitejs/plugin-vue'"),
            ("src/App.vue", "<template></template>"),
        ) == "Vue.js"

    def test_express(self):
        assert _classify(("server.js", "const express = require('express');\nconst app = express();")) == "Express.js"

    def test_flask(self):
        assert _classify(("app.py", "from flask import Flask\napp = Flask(__name__)")) == "Python Flask"

    def test_django(self):
        assert _classify(("mysite/manage.py", "import os")) == "Python Django"

    def test_no_match(self):
        assert _classify(("package.json", "{}"), ("src/utils.ts", "export const x = 1;")) is None

    def test_empty_project(self):
        assert TemplateClassifier().classify([]) is None

    def test_catalog_order_first_match_wins(self):
        names = [t.name for t in FRAMEWORK_TEMPLATES]
        assert names.index("React + Vite") < names.index("React + TypeScript")
        assert _classify(
            ("vite.config.ts", "react()"),
            ("tsconfig.json", "{}"),
            ("src/App.tsx", "import React from 'react'"),
        ) == "React + Vite"

    def test_get_by_name(self):
        assert TemplateClassifier().get("Next.js").name == "Next.js"
        assert TemplateClassifier().get("Rails") is None


class TestDetectorEvaluation:
    def test_unknown_predicate_raises(self):
        detector = DetectorSpec(clauses=(DetectorClause(predicate="no_such_predicate"),))
        with pytest.raises(ContextEngineError):
            evaluate_detector(detector, [])

    def test_all_with_no_clauses_is_false(self):
        assert evaluate_detector(DetectorSpec(clauses=(), combine="all"), [make_file("a.ts")]) is False

    def test_template_serializes(self):
        data = TemplateClassifier().get("Vue.js").to_dict()
        assert data["detector"]["clauses"][0] == {"predicate": "path_suffix", "args": [".vue"]}


class TestTemplateRendering:
    def test_prioritize_files(self):
        template = TemplateClassifier().get("React + Vite")
        files = [
            make_file("README.md"),
            make_file("src/components/Button.tsx"),
            make_file("src/main.tsx"),
            make_file("package.json"),
        ]
        ordered = [f.path for f in prioritize_files(files, template)]
        assert ordered == ["src/main.tsx", "package.json", "src/components/Button.tsx", "README.md"]

    def test_framework_context_lists_present_key_files(self):
        template = TemplateClassifier().get("React + Vite")
        files = [make_file("package.json"), make_file("src/App.tsx")]
        text = build_framework_context(files, template, task="add a navbar")
        assert text.startswith("FRAMEWORK CONTEXT: React + Vite")
        assert "  - package.json" in text
        assert "  - index.html" not in text
        assert "CURRENT TASK: add a navbar" in text
