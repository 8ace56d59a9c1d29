"""Tests for the session context tracker and task keyword helpers."""
from codemend.context_engine.session_tracker import (
    FIRST_INTERACTION_NOTE,
    FULL_CONTEXT_NOTE,
    SessionContextTracker,
)
from codemend.context_engine.text_tokenizer import (
    extract_context_keywords,
    extract_task_keywords,
    jaccard_similarity,
)
from conftest import make_file

TASK = "fix the login form validation"


def _files(*paths):
    return [make_file(p, f"// {p}") for p in paths]


class TestTaskKeywords:
    def test_short_and_stop_words_dropped(self):
        assert extract_task_keywords("Fix the login form which breaks") == {"login", "form", "breaks"}

    def test_jaccard(self):
        assert jaccard_similarity({"a", "b"}, {"b", "c"}) == 1 / 3

    def test_jaccard_empty_sets(self):
        assert jaccard_similarity(set(), set()) == 0.0

    def test_context_keywords(self):
        keywords = extract_context_keywords('fix the "LoginForm" hook in userService')
        assert keywords[0] == "LoginForm"
        assert "userService" in keywords
        assert "hook" in keywords
        assert "service" in keywords

    def test_context_keywords_dedupe_case_insensitive(self):
        keywords = extract_context_keywords("update the Component component")
        assert [k.lower() for k in keywords].count("component") == 1


class TestSessionContextTracker:
    def test_first_call_is_full(self):
        tracker = SessionContextTracker()
        files = _files("a.ts", "b.ts")
        decision = tracker.decide("p1", files, TASK)
        assert decision.is_full_context
        assert [f.path for f in decision.candidates] == ["a.ts", "b.ts"]
        assert decision.continuity_note == FULL_CONTEXT_NOTE
        assert tracker.get_state("p1").seen_paths == {"a.ts", "b.ts"}

    def test_same_task_is_incremental(self):
        tracker = SessionContextTracker()
        files = _files("a.ts", "b.ts")
        tracker.decide("p1", files, TASK)
        decision = tracker.decide("p1", files, TASK)
        assert not decision.is_full_context
        assert decision.candidates == []
        assert decision.similarity == 1.0
        assert decision.continuity_note.startswith("You have already seen 2 files in this project, including:")
        assert "a.ts" in decision.continuity_note

    def test_incremental_returns_only_new_files(self):
        tracker = SessionContextTracker()
        tracker.decide("p1", _files("a.ts", "b.ts"), TASK)
        decision = tracker.decide("p1", _files("a.ts", "b.ts", "c.ts"), TASK)
        assert not decision.is_full_context
        assert [f.path for f in decision.candidates] == ["c.ts"]
        assert tracker.get_state("p1").seen_paths == {"a.ts", "b.ts", "c.ts"}

    def test_different_task_is_full(self):
        tracker = SessionContextTracker()
        files = _files("a.ts")
        tracker.decide("p1", files, TASK)
        decision = tracker.decide("p1", files, "add dark theme toggle")
        assert decision.is_full_context
        assert len(decision.candidates) == 1

    def test_empty_task_never_counts_as_unchanged(self):
        tracker = SessionContextTracker()
        files = _files("a.ts")
        tracker.decide("p1", files, "")
        assert tracker.decide("p1", files, "").is_full_context

    def test_projects_are_independent(self):
        tracker = SessionContextTracker()
        tracker.decide("p1", _files("a.ts"), TASK)
        assert tracker.decide("p2", _files("a.ts"), TASK).is_full_context

    def test_preview_limit_and_remainder(self):
        tracker = SessionContextTracker(preview_limit=2)
        files = _files("a.ts", "b.ts", "c.ts")
        tracker.decide("p1", files, TASK)
        note = tracker.decide("p1", files, TASK).continuity_note
        assert note.split("\n") == [
            "You have already seen 3 files in this project, including:",
            "a.ts",
            "b.ts",
            "...and 1 more",
        ]

    def test_describe_unknown_project(self):
        assert SessionContextTracker().describe_seen("nope") == FIRST_INTERACTION_NOTE

    def test_history_is_bounded(self):
        tracker = SessionContextTracker(history_limit=2)
        for task in ("first task here", "second task here", "third task here"):
            tracker.decide("p1", _files("a.ts"), task)
        assert list(tracker.get_state("p1").task_history) == ["second task here", "third task here"]

    def test_threshold_is_configurable(self):
        tracker = SessionContextTracker(threshold=0.2)
        files = _files("a.ts")
        tracker.decide("p1", files, "login form validation")
        # {login, form, validation} vs {login, form, styling}: 2/4
        assert not tracker.decide("p1", files, "login form styling").is_full_context

    def test_reset(self):
        tracker = SessionContextTracker()
        files = _files("a.ts")
        tracker.decide("p1", files, TASK)
        assert tracker.reset("p1") is True
        assert not tracker.is_initialized("p1")
        assert tracker.reset("p1") is False
        assert tracker.decide("p1", files, TASK).is_full_context
