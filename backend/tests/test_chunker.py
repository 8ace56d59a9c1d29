"""Tests for the large-file chunker."""
from codemend.context_engine.chunker import LargeFileChunker, summarize_section
from conftest import make_file


def _assert_full_coverage(chunks, total_lines):
    assert chunks[0].start_line == 1
    assert chunks[-1].end_line == total_lines
    for previous, current in zip(chunks, chunks[1:]):
        assert current.start_line == previous.end_line + 1


class TestLargeFileChunker:
    def test_empty_file_has_no_chunks(self):
        assert LargeFileChunker().chunk(make_file("a.ts", "")) == []

    def test_small_file_is_one_chunk(self):
        chunks = LargeFileChunker().chunk(make_file("a.ts", "const a = 1;\nconst b = 2;\nconst c = 3;"))
        assert len(chunks) == 1
        assert (chunks[0].start_line, chunks[0].end_line) == (1, 3)
        assert chunks[0].summary == "3 definitions"

    def test_1200_lines_cover_everything(self):
        content = "\n".join(f"value = value + {i}" for i in range(1200))
        chunks = LargeFileChunker(threshold=500).chunk(make_file("big.py", content))
        assert len(chunks) >= 2
        _assert_full_coverage(chunks, 1200)
        assert all(c.line_count <= 500 for c in chunks)
        assert sum(c.line_count for c in chunks) == 1200
        assert "\n".join(c.content for c in chunks) == content

    def test_splits_on_closed_definitions(self):
        lines = []
        for i in range(60):
            lines.append(f"function f{i}() {{")
            lines.extend(["  return 1;"] * 8)
            lines.append("}")
        chunks = LargeFileChunker(threshold=500, min_lines=50).chunk(make_file("funcs.js", "\n".join(lines)))
        _assert_full_coverage(chunks, 600)
        assert len(chunks) == 10
        assert chunks[0].end_line == 60
        assert all(c.content.endswith("}") for c in chunks)
        assert chunks[0].summary == "6 definitions"

    def test_unbalanced_braces_fall_back_to_line_cap(self):
        content = "\n".join("}" for _ in range(600))
        chunks = LargeFileChunker(threshold=500).chunk(make_file("broken.js", content))
        assert [(c.start_line, c.end_line) for c in chunks] == [(1, 500), (501, 600)]

    def test_python_definitions_keep_their_bodies(self):
        lines = []
        for i in range(60):
            lines.append(f"def f{i}(value):")
            lines.extend(["    value = value + 1"] * 8)
            lines.append("    return value")
        chunks = LargeFileChunker(threshold=500, min_lines=50).chunk(make_file("funcs.py", "\n".join(lines)))
        _assert_full_coverage(chunks, 600)
        assert chunks[0].end_line == 60
        assert all(c.content.startswith("def ") for c in chunks)
        assert not any(c.content.split("\n")[-1].startswith("def ") for c in chunks)

    def test_decorator_stays_with_its_definition(self):
        lines = ["x = 1"] * 55 + ["def a():"] + ["    pass"] * 5 + ["@route", "def b():"] + ["    pass"] * 500
        chunks = LargeFileChunker(threshold=500, min_lines=50).chunk(make_file("app.py", "\n".join(lines)))
        _assert_full_coverage(chunks, len(lines))
        assert chunks[0].end_line == 61
        assert chunks[1].content.startswith("@route\ndef b():")

    def test_needs_chunking(self):
        chunker = LargeFileChunker(threshold=2)
        assert not chunker.needs_chunking(make_file("a.ts", "a\nb"))
        assert chunker.needs_chunking(make_file("a.ts", "a\nb\nc"))


class TestSummarizeSection:
    def test_counts(self):
        assert summarize_section("import a from 'a'\nexport function f() {}") == "1 imports, 1 definitions, 1 exports"

    def test_plain_code(self):
        assert summarize_section("x = 1") == "Code section"

    def test_blank(self):
        assert summarize_section("   \n\n") == "Empty section"
