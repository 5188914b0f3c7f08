"""Tests for the shared line-scanning helpers in scanning/base.py."""

import pytest

from fnregistry.exceptions import FileAccessError
from fnregistry.scanning.base import (
    ContextStack,
    Frame,
    brace_span,
    find_closing,
    normalize_type,
    read_source,
    split_top_level,
    strip_literals,
)
from fnregistry.scanning.c_family import CExtractor


class TestStripLiterals:
    """Test the code view built by strip_literals()."""

    def test_string_contents_collapse(self):
        """String literals become an empty pair of quotes."""
        out = strip_literals(['int x = "a{b}";'])
        assert out == ['int x = "";']

    def test_line_comment_removed(self):
        """Everything after the line comment marker is dropped."""
        out = strip_literals(["call(); // not_a_call() {"])
        assert out == ["call(); "]

    def test_block_comment_spans_lines(self):
        """A block comment blanks text across several lines."""
        out = strip_literals(["a /* start {", "still } inside", "end */ b"])
        assert out[0].strip() == "a"
        assert out[1].strip() == ""
        assert out[2].strip() == "b"

    def test_one_output_line_per_input_line(self):
        """Line numbering is preserved."""
        lines = ["x", "/* a", "b */", "", "y"]
        assert len(strip_literals(lines)) == len(lines)

    def test_escaped_quote_inside_string(self):
        """An escaped quote does not end the string."""
        out = strip_literals(['s = "say \\"hi\\" {";'])
        assert out == ['s = "";']

    def test_char_literal_blanked(self):
        """A brace inside a character literal is hidden."""
        out = strip_literals(["char c = '{';"])
        assert "{" not in out[0]

    def test_single_quote_strings(self):
        """Single quotes are strings when the language says so."""
        out = strip_literals(["x = 'a(b)'"], line_comment="#", single_quote_strings=True)
        assert out == ['x = ""']

    def test_rust_lifetime_left_alone(self):
        """An apostrophe that is not a char literal is kept."""
        out = strip_literals(["fn f<'a>(x: &'a str) {"])
        assert out == ["fn f<'a>(x: &'a str) {"]


class TestBracketHelpers:
    """Test find_closing(), split_top_level() and brace_span()."""

    def test_find_closing_paren(self):
        """Nested parens are skipped."""
        text = "f(a, (b), c) x"
        assert find_closing(text, 1) == 11

    def test_find_closing_angle_ignores_arrow(self):
        """The > of -> does not close a generic list."""
        text = "<T, F: Fn() -> i32>"
        assert find_closing(text, 0) == len(text) - 1

    def test_find_closing_unbalanced(self):
        """An unclosed bracket returns -1."""
        assert find_closing("f(a, b", 1) == -1

    def test_split_top_level_nested(self):
        """Commas inside brackets do not split."""
        parts = split_top_level("a: Vec<(i32, u8)>, b: HashMap<K, V>")
        assert parts == ["a: Vec<(i32, u8)>", "b: HashMap<K, V>"]

    def test_split_top_level_arrow(self):
        """An arrow inside a parameter type does not unbalance the split."""
        parts = split_top_level("f: impl Fn(i32) -> i32, g: u8")
        assert parts == ["f: impl Fn(i32) -> i32", "g: u8"]

    def test_split_top_level_empty(self):
        """Empty input yields no parts."""
        assert split_top_level("") == []
        assert split_top_level("  ") == []

    def test_brace_span_balanced(self):
        """The closing line of a nested block is found."""
        code = ["int f() {", "  if (x) {", "  }", "}", "int g;"]
        assert brace_span(code, 0) == (3, True)

    def test_brace_span_same_line(self):
        """A one-line body closes on its own line."""
        assert brace_span(["fn f() { 1 }"], 0) == (0, True)

    def test_brace_span_unbalanced(self):
        """An unclosed body runs to the last line."""
        assert brace_span(["f() {", "x"], 0) == (1, False)

    def test_brace_span_start_col(self):
        """Braces before the start column are not counted."""
        code = ["} f() {", "}"]
        assert brace_span(code, 0, 6) == (1, True)


class TestNormalizeType:
    """Test normalize_type()."""

    def test_pointer_attaches_to_type(self):
        assert normalize_type("char  *") == "char*"

    def test_reference_and_const(self):
        assert normalize_type("const std::string &") == "const std::string&"


class TestContextStack:
    """Test brace-driven scope tracking."""

    def test_frame_committed_by_brace(self):
        """A pending frame becomes active at the next brace."""
        ctx = ContextStack()
        ctx.open(Frame("A", "class"))
        ctx.feed("class A {")
        assert [f.name for f in ctx.frames] == ["A"]
        ctx.feed("};")
        assert ctx.frames == []

    def test_pending_frame_dropped_by_semicolon(self):
        """A forward declaration never opens a scope."""
        ctx = ContextStack()
        ctx.open(Frame("B", "class"))
        ctx.feed("class B;")
        ctx.feed("{")
        assert ctx.frames == []
        assert ctx.depth == 1

    def test_qualifier_skips_functions(self):
        """Function frames do not contribute to qualified names."""
        ctx = ContextStack()
        ctx.open(Frame("ns", "namespace"))
        ctx.feed("{")
        ctx.open(Frame("f", "function"))
        ctx.feed("{")
        assert ctx.qualifier("::") == "ns"
        assert ctx.in_function

    def test_depth_never_negative(self):
        """Stray closing braces are tolerated."""
        ctx = ContextStack()
        ctx.feed("}}")
        assert ctx.depth == 0


class TestPrecedingComments:
    """Test comment collection above a declaration."""

    def test_line_comments_joined(self):
        """Consecutive line comments are joined in source order."""
        lines = ["// First line.", "// Second line.", "int f(void);"]
        assert CExtractor().preceding_comments(lines, 2) == "First line. Second line."

    def test_block_comment(self):
        """Block comment markers are stripped."""
        lines = ["/*", " * Compute things.", " */", "int f(void);"]
        assert CExtractor().preceding_comments(lines, 3) == "Compute things."

    def test_blank_lines_skipped(self):
        """Blank lines between comment and declaration are allowed."""
        lines = ["// Doc.", "", "int f(void);"]
        assert CExtractor().preceding_comments(lines, 2) == "Doc."

    def test_code_stops_walk(self):
        """A code line ends the comment block."""
        lines = ["// Old.", "int x;", "int f(void);"]
        assert CExtractor().preceding_comments(lines, 2) == ""

    def test_marker_override(self):
        """A different marker can be supplied per call."""
        lines = ["# Hash doc.", "def f():"]
        assert CExtractor().preceding_comments(lines, 1, "#") == "Hash doc."


class TestReadSource:
    """Test read_source()."""

    def test_reads_utf8(self, tmp_path):
        path = tmp_path / "a.c"
        path.write_text("int f(void);\n", encoding="utf-8")
        assert read_source(path) == "int f(void);\n"

    def test_invalid_bytes_replaced(self, tmp_path):
        """Undecodable bytes do not fail the read."""
        path = tmp_path / "latin1.c"
        path.write_bytes(b"/* caf\xe9 */\nint f(void);\n")
        assert "int f(void);" in read_source(path)

    def test_missing_file_raises(self, tmp_path):
        """A missing file is a FileAccessError."""
        with pytest.raises(FileAccessError):
            read_source(tmp_path / "missing.c")
