"""Tests for the Python extractor."""

import pytest

from fnregistry.models import Visibility
from fnregistry.scanning.python import PythonExtractor

PY_SOURCE = '''\
import os


class Greeter:
    """Says hello."""

    def __init__(self, name):
        self.name = name

    @property
    def name_upper(self) -> str:
        return self.name.upper()

    def _private(self):
        pass


async def fetch(url: str, *, timeout: float = 1.0) -> "Response":
    """Fetch a URL.

    More text.
    """
    if timeout > 0 and url:
        return await get(url)
    return None


# Entry point.
def main():
    greeter = Greeter("x")
    fetch("y")


def test_fetch():
    assert fetch("z")
'''


@pytest.fixture
def functions():
    result = PythonExtractor().extract(PY_SOURCE, "app.py")
    return {fn.name: fn for fn in result.functions}


class TestPythonDeclarations:
    """Test def recognition, bodies and docstrings."""

    def test_all_found(self, functions):
        assert list(functions) == [
            "Greeter.__init__",
            "Greeter.name_upper",
            "Greeter._private",
            "fetch",
            "main",
            "test_fetch",
        ]

    def test_method(self, functions):
        fn = functions["Greeter.__init__"]
        assert fn.parameters == ["self", "name"]
        assert fn.return_type == "None"
        assert fn.size == 2
        assert fn.visibility == Visibility.PUBLIC
        assert fn.metadata["dunder"] == "true"
        assert fn.metadata["context"] == "Greeter"
        assert fn.line == 7

    def test_decorator_and_annotation(self, functions):
        fn = functions["Greeter.name_upper"]
        assert fn.return_type == "str"
        assert fn.metadata["decorators"] == "property"
        assert fn.metadata["property"] == "true"

    def test_private_method(self, functions):
        assert functions["Greeter._private"].visibility == Visibility.PRIVATE

    def test_async_function(self, functions):
        fn = functions["fetch"]
        assert fn.metadata["async"] == "true"
        assert fn.parameters == ["url", "timeout"]
        assert fn.return_type == "Response"
        assert fn.comments == "Fetch a URL. More text."
        assert fn.size == 8
        # if, and
        assert fn.complexity == 3

    def test_comment_above(self, functions):
        fn = functions["main"]
        assert fn.comments == "Entry point."
        assert fn.is_main
        assert fn.size == 3

    def test_test_function(self, functions):
        assert functions["test_fetch"].is_test
        assert not functions["fetch"].is_test

    def test_test_class_methods(self):
        source = "class TestThing:\n    def test_one(self):\n        pass\n\n    def testTwo(self):\n        pass\n"
        fns = PythonExtractor().extract(source, "test_x.py").functions
        assert all(fn.is_test for fn in fns)
        assert [fn.name for fn in fns] == ["TestThing.test_one", "TestThing.testTwo"]

    @pytest.mark.parametrize(
        "decorator",
        ["@pytest.mark.parametrize(\"x\", [1, 2])", "@pytest.fixture", "@unittest.skip(\"later\")", "@integration_test"],
    )
    def test_test_decorators(self, decorator):
        source = f"{decorator}\ndef check(x):\n    assert x\n"
        fn = PythonExtractor().extract(source, "a.py").functions[0]
        assert fn.is_test

    def test_plain_decorator_not_test(self):
        source = "@functools.lru_cache\ndef compute(x):\n    return x\n"
        assert not PythonExtractor().extract(source, "a.py").functions[0].is_test

    def test_star_parameters_kept(self):
        fn = PythonExtractor().extract("def f(a, *args, b=1, **kwargs):\n    pass\n", "a.py").functions[0]
        assert fn.parameters == ["a", "*args", "b", "**kwargs"]

    def test_multiline_signature(self):
        source = "def f(\n    a: int,\n    b: int,\n) -> int:\n    return a + b\n"
        fn = PythonExtractor().extract(source, "a.py").functions[0]
        assert fn.parameters == ["a", "b"]
        assert fn.return_type == "int"
        assert fn.size == 5

    def test_nested_class_qualification(self):
        source = "class Outer:\n    class Inner:\n        def run(self):\n            pass\n"
        fn = PythonExtractor().extract(source, "a.py").functions[0]
        assert fn.name == "Outer.Inner.run"

    def test_class_scope_ends_at_dedent(self):
        source = "class A:\n    def m(self):\n        pass\n\ndef free():\n    pass\n"
        names = [fn.name for fn in PythonExtractor().extract(source, "a.py").functions]
        assert names == ["A.m", "free"]

    def test_nested_def_qualified_by_enclosing_function(self):
        source = (
            "class A:\n"
            "    def m(self):\n"
            "        def helper():\n"
            "            pass\n"
            "        return helper\n"
            "\n"
            "def outer():\n"
            "    def inner():\n"
            "        pass\n"
            "    inner()\n"
        )
        fns = {fn.name: fn for fn in PythonExtractor().extract(source, "a.py").functions}
        assert list(fns) == ["A.m", "A.m.helper", "outer", "outer.inner"]
        assert fns["A.m.helper"].metadata["context"] == "m"
        assert fns["A.m.helper"].metadata["context_kind"] == "function"
        assert fns["A.m"].metadata["context_kind"] == "class"
        assert fns["outer"].size == 4

    def test_main_inside_function_is_not_entry_point(self):
        source = "def run():\n    def main():\n        pass\n"
        fns = PythonExtractor().extract(source, "a.py").functions
        assert [fn.name for fn in fns] == ["run", "run.main"]
        assert not fns[1].is_main

    def test_def_inside_string_ignored(self):
        source = 'TEMPLATE = """\ndef fake():\n    pass\n"""\n\ndef real():\n    pass\n'
        names = [fn.name for fn in PythonExtractor().extract(source, "a.py").functions]
        assert names == ["real"]


class TestPythonCallSites:
    """Test Python call-site collection."""

    def test_calls(self):
        result = PythonExtractor().extract(PY_SOURCE, "app.py")
        assert result.call_sites["fetch"] == 2
        assert result.call_sites["Greeter"] == 1
        assert result.call_sites["get"] == 1
        assert "main" not in result.call_sites
        assert "print" not in result.call_sites
