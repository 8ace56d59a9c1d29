"""Tests for the relevance scorer."""
from codemend.context_engine.models import TaskIntent
from codemend.context_engine.relevance import (
    RelevanceScorer,
    RelevanceWeights,
    detect_intents,
    is_api_file,
    is_bootstrap_file,
    is_state_file,
    is_style_file,
    is_ui_file,
)
from conftest import make_file

BUTTON_SOURCE = (
    "import React from 'react';\n\n"
    "export function Button({ label, onClick }) {\n"
    "  return (<button className=\"btn\" onClick={onClick}>{label}</button>);\n"
    "}\n"
)


class TestIntents:
    def test_ui_intent(self):
        assert TaskIntent.UI in detect_intents("fix the Button component")

    def test_word_start_matching(self):
        assert TaskIntent.UI not in detect_intents("build the project")

    def test_multiple_intents(self):
        intents = detect_intents("fetch data from the endpoint and update the store")
        assert {TaskIntent.API, TaskIntent.STATE} <= intents

    def test_no_intent(self):
        assert detect_intents("") == set()


class TestFileRoles:
    def test_ui(self):
        assert is_ui_file(make_file("src/pages/Home.js"))
        assert is_ui_file(make_file("src/Widget.js", "return (<div/>)"))
        assert not is_ui_file(make_file("src/math.js", "return a + b"))

    def test_api(self):
        assert is_api_file(make_file("server.js", "app.get('/users', handler)"))
        assert is_api_file(make_file("src/api/client.ts"))

    def test_state(self):
        assert is_state_file(make_file("src/hooks/useCart.ts", "const [x, setX] = useState(0)"))

    def test_style(self):
        assert is_style_file(make_file("src/index.css"))
        assert is_style_file(make_file("src/theme.ts"))

    def test_bootstrap(self):
        assert is_bootstrap_file("package.json")
        assert is_bootstrap_file("src/main.tsx")
        assert is_bootstrap_file("docs/readme.md")
        assert not is_bootstrap_file("src/utils.ts")


class TestRelevanceScorer:
    def test_button_outranks_math(self):
        files = [
            make_file("utils/math.js", "export function add(a, b) { return a + b; }"),
            make_file("src/components/Button.tsx", BUTTON_SOURCE),
        ]
        ranked = RelevanceScorer().rank("fix the Button component", files, top_k=10)
        assert [s.file.path for s in ranked] == ["src/components/Button.tsx", "utils/math.js"]
        assert ranked[0].score > ranked[1].score

    def test_reasons_recorded(self):
        score = RelevanceScorer().score_file("fix the Button component", make_file("src/components/Button.tsx", BUTTON_SOURCE))
        assert "path:button" in score.reasons
        assert "role:ui" in score.reasons
        assert "keyword:Button" in score.reasons

    def test_path_match_weight(self):
        scorer = RelevanceScorer()
        content = "x" * 200
        with_match = scorer.score_file("update invoice totals", make_file("src/invoice.ts", content))
        without = scorer.score_file("update invoice totals", make_file("src/other.ts", content))
        assert with_match.score - without.score == 50

    def test_content_score_is_capped(self):
        weights = RelevanceWeights()
        task = " ".join(f"token{i}" for i in range(20))
        file = make_file("src/x.ts", " ".join(f"token{i}" for i in range(20)) + " " * 100)
        score = RelevanceScorer(weights).score_file(task, file)
        assert "content:20" in score.reasons
        # 20 hits * 5 would be 100; capped at 50
        assert score.score == 50

    def test_size_penalty(self):
        scorer = RelevanceScorer()
        assert scorer.score_file("", make_file("tiny.ts", "x")).score == -10
        assert scorer.score_file("", make_file("huge.ts", "x" * 50001)).score == -10
        assert scorer.score_file("", make_file("ok.ts", "x" * 500)).score == 0

    def test_bootstrap_bonus(self):
        score = RelevanceScorer().score_file("", make_file("package.json", "{" + " " * 200 + "}"))
        assert score.score == 20

    def test_custom_weights(self):
        weights = RelevanceWeights.from_config({"bootstrap_file": 5, "unknown_key": 1})
        assert weights.bootstrap_file == 5
        assert RelevanceScorer(weights).score_file("", make_file("package.json", "{" + " " * 200 + "}")).score == 5

    def test_ties_keep_input_order(self):
        files = [make_file(f"src/f{i}.ts", "y" * 200) for i in range(4)]
        ranked = RelevanceScorer().rank("nothing matches here", files, top_k=10)
        assert [s.file.path for s in ranked] == [f.path for f in files]

    def test_top_k(self):
        files = [make_file(f"src/f{i}.ts", "y" * 200) for i in range(4)]
        assert len(RelevanceScorer().rank("task", files, top_k=2)) == 2
        assert RelevanceScorer().rank("task", files, top_k=0) == []

    def test_empty_inputs(self):
        assert RelevanceScorer().rank("anything", [], top_k=5) == []
