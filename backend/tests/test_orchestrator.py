"""Tests for the context preparation engine."""
import pytest
from codemend.config import DEFAULT_CONFIG
from codemend.context_engine import (
    ContextPreparationEngine,
    DependencyGraphBuilder,
    ExpiringCache,
    SessionContextTracker,
    TemplateClassifier,
)
from codemend.context_engine.relevance import RelevanceScorer
from codemend.context_engine.session_tracker import FULL_CONTEXT_NOTE
from codemend.exceptions import ValidationError
from codemend.schemas import PrepareOptions
from conftest import make_project

PACKAGE_JSON = '{"name": "demo", "dependencies": {"react": "^18.2.0"}}'
APP_TSX = (
    "import React from 'react';\n"
    "import { formatDate } from './utils';\n\n"
    "export default function App() {\n"
    "  return (<main>{formatDate(new Date())}</main>);\n"
    "}\n"
)
UTILS_TS = "export function formatDate(d: Date): string {\n  return d.toISOString();\n}\n"


def _demo_project(project_id="demo"):
    return make_project(project_id, [
        ("package.json", PACKAGE_JSON),
        ("src/App.tsx", APP_TSX),
        ("src/utils.ts", UTILS_TS),
    ])


class CountingClassifier(TemplateClassifier):
    def __init__(self):
        super().__init__()
        self.calls = 0

    def classify(self, files):
        self.calls += 1
        return super().classify(files)


class CountingGraphBuilder(DependencyGraphBuilder):
    def __init__(self):
        super().__init__()
        self.calls = 0

    def build(self, files):
        self.calls += 1
        return super().build(files)


class FailingScorer(RelevanceScorer):
    def rank(self, task, files, top_k=10):
        raise RuntimeError("scorer exploded")


class FailingClassifier(TemplateClassifier):
    def classify(self, files):
        raise RuntimeError("classifier exploded")


# --- end-to-end ---

class TestPrepareContext:
    def test_first_turn_end_to_end(self, engine):
        payload = engine.prepare_context(_demo_project(), "add a helper function to utils")
        assert payload.is_full_context
        assert payload.continuity_note == FULL_CONTEXT_NOTE
        assert payload.template_name == "none"
        assert payload.framework_context == ""
        assert not payload.degraded
        paths = [f.path for f in payload.files]
        assert paths[0] == "src/utils.ts"
        assert paths.index("src/utils.ts") < paths.index("package.json")
        assert payload.files[0].content == UTILS_TS
        assert payload.total_tokens == sum(f.token_count for f in payload.files)

    def test_repeat_turn_is_incremental(self, engine):
        project = _demo_project()
        engine.prepare_context(project, "add a helper function to utils")
        payload = engine.prepare_context(project, "add a helper function to utils")
        assert not payload.is_full_context
        assert payload.files == []
        assert payload.continuity_note.startswith("You have already seen 3 files in this project")

    def test_new_file_shows_up_incrementally(self, engine):
        engine.prepare_context(_demo_project(), "add a helper function to utils")
        grown = make_project("demo", [
            ("package.json", PACKAGE_JSON),
            ("src/App.tsx", APP_TSX),
            ("src/utils.ts", UTILS_TS),
            ("src/helpers.ts", "export const noop = () => {};"),
        ])
        payload = engine.prepare_context(grown, "add a helper function to utils")
        assert [f.path for f in payload.files] == ["src/helpers.ts"]

    def test_template_detected(self, engine):
        project = make_project("vite", [
            ("vite.config.ts", "import react from '@vitejs/plugin-react'"),
            ("src/main.tsx", "import React from 'react'"),
        ])
        payload = engine.prepare_context(project, "add a navbar")
        assert payload.template_name == "React + Vite"
        assert payload.framework_context.startswith("FRAMEWORK CONTEXT: React + Vite")

    def test_empty_project(self, engine):
        payload = engine.prepare_context(make_project("empty", []), "")
        assert payload.is_full_context
        assert payload.files == []
        assert payload.template_name == "none"

    def test_top_k_option(self, engine):
        payload = engine.prepare_context(_demo_project(), "add a helper function to utils", PrepareOptions(top_k=1))
        assert [f.path for f in payload.files] == ["src/utils.ts"]

    def test_token_budget_admits_top_file(self, engine):
        payload = engine.prepare_context(_demo_project(), "add a helper function to utils", PrepareOptions(max_tokens=1))
        assert [f.path for f in payload.files] == ["src/utils.ts"]

    def test_include_content_false(self, engine):
        payload = engine.prepare_context(
            _demo_project(), "add a helper function to utils", PrepareOptions(include_content=False)
        )
        assert all(f.content is None for f in payload.files)
        assert all(f.token_count > 0 for f in payload.files)

    def test_large_file_is_chunked(self, engine):
        big = "\n".join(f"value = value + {i}" for i in range(30))
        project = make_project("big", [("src/big.py", big), ("src/small.py", "x = 1")])
        payload = engine.prepare_context(project, "tune big values", PrepareOptions(chunk_threshold=10))
        chunked = next(f for f in payload.files if f.path == "src/big.py")
        assert chunked.content is None
        assert [(c.start_line, c.end_line) for c in chunked.chunks] == [(1, 10), (11, 20), (21, 30)]
        small = next(f for f in payload.files if f.path == "src/small.py")
        assert small.chunks is None


# --- failure handling ---

class TestDegradedTurns:
    def test_scorer_failure_falls_back_to_unranked_candidates(self):
        engine = ContextPreparationEngine(scorer=FailingScorer(), settings=DEFAULT_CONFIG)
        payload = engine.prepare_context(_demo_project(), "add a helper function to utils")
        assert payload.degraded
        assert [f.path for f in payload.files] == ["package.json", "src/App.tsx", "src/utils.ts"]
        assert all(f.score == 0.0 for f in payload.files)

    def test_classifier_failure_only_drops_template(self):
        engine = ContextPreparationEngine(classifier=FailingClassifier(), settings=DEFAULT_CONFIG)
        payload = engine.prepare_context(_demo_project(), "add a helper function to utils")
        assert payload.template_name == "none"
        assert not payload.degraded
        assert payload.files[0].path == "src/utils.ts"

    def test_fallback_respects_budget(self):
        engine = ContextPreparationEngine(scorer=FailingScorer(), settings=DEFAULT_CONFIG)
        payload = engine.prepare_context(_demo_project(), "anything", PrepareOptions(max_tokens=1))
        assert [f.path for f in payload.files] == ["package.json"]


# --- caching ---

class TestCaching:
    def test_classifier_result_is_cached(self):
        classifier = CountingClassifier()
        engine = ContextPreparationEngine(classifier=classifier, settings=DEFAULT_CONFIG)
        project = _demo_project()
        first = engine.detect_template(project)
        second = engine.detect_template(project)
        assert first is second is None
        assert classifier.calls == 1

    def test_graph_is_cached_until_invalidated(self):
        builder = CountingGraphBuilder()
        engine = ContextPreparationEngine(graph_builder=builder, settings=DEFAULT_CONFIG)
        project = _demo_project()
        graph = engine.get_dependency_graph(project)
        assert engine.get_dependency_graph(project) is graph
        assert builder.calls == 1
        assert engine.invalidate("demo") >= 1
        engine.get_dependency_graph(project)
        assert builder.calls == 2

    def test_changed_content_misses_cache(self):
        builder = CountingGraphBuilder()
        engine = ContextPreparationEngine(graph_builder=builder, settings=DEFAULT_CONFIG)
        engine.get_dependency_graph(_demo_project())
        edited = make_project("demo", [
            ("package.json", PACKAGE_JSON),
            ("src/App.tsx", "export default function App() { return null; }"),
            ("src/utils.ts", UTILS_TS),
        ])
        graph = engine.get_dependency_graph(edited)
        assert builder.calls == 2
        assert graph["src/App.tsx"].imports == []

    def test_repeated_turns_are_stable(self, engine):
        project = _demo_project()
        first = engine.prepare_context(project, "add a helper function to utils")
        engine.reset_session("demo")
        second = engine.prepare_context(project, "add a helper function to utils")
        assert [f.path for f in first.files] == [f.path for f in second.files]
        assert [f.score for f in first.files] == [f.score for f in second.files]

    def test_cache_stats(self, engine):
        engine.prepare_context(_demo_project(), "add a helper function to utils")
        stats = engine.cache_stats()
        assert stats["entries"] >= 2
        assert stats["tracked_projects"] == 1


# --- project-level views ---

class TestProjectViews:
    def test_related_files(self, engine):
        related = engine.get_related_files(_demo_project(), "src/utils.ts")
        assert [f.path for f in related] == ["src/App.tsx"]

    def test_related_files_unknown_path(self, engine):
        with pytest.raises(ValidationError):
            engine.get_related_files(_demo_project(), "src/missing.ts")

    def test_summarize_project_is_cached(self, engine):
        project = _demo_project()
        summary = engine.summarize_project(project)
        assert summary.project_id == "demo"
        assert summary.dependencies[0] == "react"
        assert engine.summarize_project(project) is summary

    def test_reset_session(self, engine):
        project = _demo_project()
        engine.prepare_context(project, "add a helper function to utils")
        assert engine.reset_session("demo") is True
        assert engine.prepare_context(project, "add a helper function to utils").is_full_context
        assert engine.reset_session("unknown") is False


# --- construction ---

class TestInjectedCollaborators:
    def test_empty_cache_and_tracker_are_kept(self):
        cache = ExpiringCache(ttl_seconds=1)
        tracker = SessionContextTracker(threshold=0.0)
        engine = ContextPreparationEngine(cache=cache, tracker=tracker, settings=DEFAULT_CONFIG)
        assert engine.cache is cache
        assert engine.tracker is tracker

    def test_injected_tracker_threshold_applies(self):
        tracker = SessionContextTracker(threshold=0.0)
        engine = ContextPreparationEngine(tracker=tracker, settings=DEFAULT_CONFIG)
        project = _demo_project()
        engine.prepare_context(project, "add a helper function to utils")
        payload = engine.prepare_context(project, "rewrite the login page styles")
        assert not payload.is_full_context

    def test_cache_shared_between_engines(self):
        cache = ExpiringCache()
        first = ContextPreparationEngine(cache=cache, settings=DEFAULT_CONFIG)
        second = ContextPreparationEngine(cache=cache, settings=DEFAULT_CONFIG)
        graph = first.get_dependency_graph(_demo_project())
        assert second.get_dependency_graph(_demo_project()) is graph


class TestIdempotentTurns:
    def test_consecutive_turns_reuse_classifier_result(self):
        classifier = CountingClassifier()
        engine = ContextPreparationEngine(classifier=classifier, settings=DEFAULT_CONFIG)
        project = make_project("vite", [
            ("vite.config.ts", "import react from '@vitejs/plugin-react'"),
            ("src/main.tsx", "import React from 'react'"),
        ])
        first = engine.prepare_context(project, "add a navbar")
        second = engine.prepare_context(project, "add a navbar")
        assert classifier.calls == 1
        assert first.template_name == second.template_name == "React + Vite"


class TestProjectScopedInvalidation:
    def test_invalidate_leaves_projects_sharing_an_id_prefix(self):
        classifier = CountingClassifier()
        engine = ContextPreparationEngine(classifier=classifier, settings=DEFAULT_CONFIG)
        other = _demo_project("a:b")
        engine.detect_template(other)
        engine.detect_template(_demo_project("a"))
        assert classifier.calls == 2

        assert engine.invalidate("a") == 1
        engine.detect_template(other)
        assert classifier.calls == 2
