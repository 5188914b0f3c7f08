"""Tests for the generic per-extension extractor."""

import pytest

from fnregistry.models import Visibility
from fnregistry.scanning.fallback import GenericExtractor

JAVA_SOURCE = """\
public class Calculator {
    // Adds two numbers.
    public int add(int a, int b) {
        return a + b;
    }

    private static void log(String msg) {
        System.out.println(msg);
    }

    @Test
    public void testAdd() {
        assertEquals(3, add(1, 2));
    }
}
"""


@pytest.fixture
def extractor():
    return GenericExtractor()


class TestGenericExtractor:
    """Test GenericExtractor across language families."""

    def test_java_methods(self, extractor):
        fns = {fn.name: fn for fn in extractor.extract(JAVA_SOURCE, "Calculator.java").functions}
        assert set(fns) == {"add", "log", "testAdd"}

        add = fns["add"]
        assert add.language == "java"
        assert add.return_type == "int"
        assert add.parameters == ["a", "b"]
        assert add.size == 3
        assert add.visibility == Visibility.PUBLIC
        assert add.comments == "Adds two numbers."

        log = fns["log"]
        assert log.visibility == Visibility.PRIVATE
        assert log.return_type == "void"
        assert log.parameters == ["msg"]

    def test_annotation_marks_test(self, extractor):
        fns = {fn.name: fn for fn in extractor.extract(JAVA_SOURCE, "Calculator.java").functions}
        assert fns["testAdd"].is_test
        assert not fns["add"].is_test

    def test_java_call_sites(self, extractor):
        result = extractor.extract(JAVA_SOURCE, "Calculator.java")
        assert result.call_sites["add"] == 1
        assert "println" not in result.call_sites
        assert "log" not in result.call_sites

    def test_python_by_extension(self, extractor):
        source = "def helper(x, y=2):\n    return x\n\n\ndef _hidden():\n    pass\n"
        fns = extractor.extract(source, "mod.py").functions
        assert [fn.name for fn in fns] == ["helper", "_hidden"]
        assert fns[0].language == "python"
        assert fns[0].parameters == ["x", "y"]
        assert fns[0].size == 2
        assert fns[1].visibility == Visibility.PRIVATE

    def test_rust_by_extension(self, extractor):
        source = "pub fn area(w: u32, h: u32) -> u32 {\n    w * h\n}\nfn local() {}\n"
        fns = extractor.extract(source, "lib.rs").functions
        assert fns[0].name == "area"
        assert fns[0].return_type == "u32"
        assert fns[0].parameters == ["w", "h"]
        assert fns[0].visibility == Visibility.PUBLIC
        assert fns[1].visibility == Visibility.PRIVATE

    def test_rust_public_keyword(self, extractor):
        fn = extractor.extract("public fn add(a: i32, b: i32) -> i32 { a + b }\n", "a.rs").functions[0]
        assert fn.name == "add"
        assert fn.visibility == Visibility.PUBLIC
        assert fn.parameters == ["a", "b"]
        assert fn.return_type == "i32"
        assert fn.size == 1

    def test_rust_restricted_pub(self, extractor):
        fn = extractor.extract("pub(crate) fn scoped() {}\n", "a.rs").functions[0]
        assert fn.visibility == Visibility.PUBLIC

    def test_go_by_extension(self, extractor):
        source = "func (s *Srv) Run(ctx context.Context) error {\n\treturn nil\n}\n"
        fn = extractor.extract(source, "srv.go").functions[0]
        assert fn.name == "Run"
        assert fn.parameters == ["ctx"]
        assert fn.return_type == "error"
        assert fn.visibility == Visibility.PUBLIC

    def test_javascript(self, extractor):
        source = "export async function fetchData(url, options = {}) {\n  return url;\n}\n"
        fn = extractor.extract(source, "api.js").functions[0]
        assert fn.name == "fetchData"
        assert fn.language == "javascript"
        assert fn.parameters == ["url", "options"]
        assert fn.size == 3

    def test_typescript_return_type(self, extractor):
        source = "function parse(input: string): number {\n  return 1;\n}\n"
        fn = extractor.extract(source, "p.ts").functions[0]
        assert fn.return_type == "number"
        assert fn.parameters == ["input"]

    def test_kotlin(self, extractor):
        source = "private fun greet(name: String): String {\n    return name\n}\n"
        fn = extractor.extract(source, "G.kt").functions[0]
        assert fn.name == "greet"
        assert fn.return_type == "String"
        assert fn.visibility == Visibility.PRIVATE

    def test_rust_test_attribute(self, extractor):
        source = "#[test]\nfn checks() {\n}\n"
        fn = extractor.extract(source, "t.rs").functions[0]
        assert fn.is_test

    def test_c_prototype(self, extractor):
        fn = extractor.extract("int compute(int a);\n", "x.h").functions[0]
        assert fn.is_declaration
        assert fn.size == 1
        assert fn.language == "c"

    def test_control_flow_ignored(self, extractor):
        source = "void f() {\n    return g(1);\n    else if (x) {\n    }\n}\n"
        names = [fn.name for fn in extractor.extract(source, "x.c").functions]
        assert names == ["f"]

    def test_assignment_ignored(self, extractor):
        assert extractor.extract("int x = compute(1);\n", "x.c").functions == []

    def test_no_complexity(self, extractor):
        """The generic extractor leaves complexity unset."""
        fn = extractor.extract("void f() {\n    if (x) {}\n}\n", "x.c").functions[0]
        assert fn.complexity is None

    def test_name_heuristic_for_tests(self, extractor):
        source = "void test_sum() {\n}\nvoid sum_TEST() {\n}\nvoid summary() {\n}\n"
        fns = {fn.name: fn for fn in extractor.extract(source, "t.c").functions}
        assert fns["test_sum"].is_test
        assert fns["sum_TEST"].is_test
        assert not fns["summary"].is_test
