"""Tests for the public API and the pipeline."""

import pytest

from fnregistry import RegistryConfig, RegistryPipeline, Visibility, extract_registry
from fnregistry.exceptions import InvalidPathError, UnsupportedLanguageError


@pytest.fixture(autouse=True)
def _isolated(isolated_env):
    return isolated_env


class RecordingProgress:
    """Collects pipeline progress callbacks."""

    def __init__(self):
        self.phases = []
        self.updates = []

    def start_phase(self, description, total):
        self.phases.append((description, total))

    def advance(self, completed, total):
        self.updates.append((completed, total))


class TestExtractRegistry:
    """Test extract_registry()."""

    def test_single_root(self, c_project):
        registry = extract_registry(c_project, language="c")
        assert sorted(f.name for f in registry.functions) == ["bar", "main"]
        assert registry.summary.total_files == 2
        assert registry.scripts is None

    def test_string_path(self, c_project):
        registry = extract_registry(str(c_project), language="c")
        assert registry.summary.total_functions == 2

    def test_multiple_roots(self, c_project, write_tree, tmp_path):
        other = write_tree({"x.c": "int extra(void) {\n}\n"}, tmp_path / "other")
        registry = extract_registry([c_project, other], language="c")
        assert sorted(f.name for f in registry.functions) == ["bar", "extra", "main"]

    def test_relations_and_dead_code(self, c_project):
        registry = extract_registry(c_project, language="c", add_relations=True, only_dead_code=True)
        assert [f.name for f in registry.functions] == ["main"]

    def test_by_script(self, c_project):
        registry = extract_registry(c_project, language="c", by_script=True)
        assert len(registry.scripts) == 2

    def test_missing_root(self, tmp_path):
        with pytest.raises(InvalidPathError):
            extract_registry(tmp_path / "missing", language="c")

    def test_unsupported_language(self, c_project):
        with pytest.raises(UnsupportedLanguageError):
            extract_registry(c_project, language="cobol")

    def test_no_matching_files(self, write_tree, tmp_path):
        root = write_tree({"notes.txt": "nothing here\n"}, tmp_path / "empty")
        registry = extract_registry(root, language="rust")
        assert registry.functions == []
        assert registry.summary.total_functions == 0

    def test_files_without_functions_counted(self, write_tree, tmp_path):
        root = write_tree(
            {
                "a.c": "int helper(void) {\n    return 1;\n}\n",
                "b.c": "#include <stdio.h>\n",
            },
            tmp_path / "tree",
        )
        registry = extract_registry(root, language="c")
        assert registry.summary.total_functions == 1
        assert registry.summary.total_files == 2

    def test_dead_filter_keeps_analysed_file_count(self, c_project):
        registry = extract_registry(c_project, language="c", add_relations=True, only_dead_code=True)
        assert registry.summary.total_functions == 1
        assert registry.summary.total_files == 2
        assert registry.relations_built is True


class TestDefaultLanguage:
    """Test runs that leave the language at its generic default."""

    def test_public_rust_function(self, write_tree, tmp_path):
        root = write_tree({"lib.rs": "public fn add(a: i32, b: i32) -> i32 { a + b }\n"}, tmp_path / "rs")
        registry = extract_registry(root)
        assert len(registry.functions) == 1
        fn = registry.functions[0]
        assert fn.name == "add"
        assert fn.visibility == Visibility.PUBLIC
        assert fn.parameters == ["a", "b"]
        assert fn.return_type == "i32"
        assert fn.size == 1

    def test_c_helper(self, write_tree, tmp_path):
        root = write_tree({"h.c": "int helper(void) {\n  return 1;\n}\n"}, tmp_path / "c")
        fn = extract_registry(root).functions[0]
        assert fn.name == "helper"
        assert fn.visibility == Visibility.PUBLIC
        assert fn.parameters == []
        assert fn.size == 3

    def test_preprocessor_only_file(self, write_tree, tmp_path):
        root = write_tree({"only.c": "#include <stdio.h>\n"}, tmp_path / "pp")
        registry = extract_registry(root)
        assert registry.functions == []
        assert registry.summary.total_files == 1

    def test_relations_not_built_by_default(self, c_project):
        registry = extract_registry(c_project)
        assert registry.relations_built is False
        assert registry.summary.dead_functions == registry.summary.total_functions


class TestRegistryPipeline:
    """Test RegistryPipeline.run()."""

    def test_reports_phases(self, c_project):
        progress = RecordingProgress()
        config = RegistryConfig(paths=[str(c_project)], language="c", add_relations=True)
        pipeline = RegistryPipeline(config, progress=progress)

        pipeline.run()

        assert progress.phases == [("Extracting functions", 2), ("Building call graph", 2)]
        assert progress.updates[-1] == (2, 2)
        assert len(pipeline.files) == 2

    def test_no_relations_phase_by_default(self, c_project):
        progress = RecordingProgress()
        config = RegistryConfig(paths=[str(c_project)], language="c")
        RegistryPipeline(config, progress=progress).run()
        assert [name for name, _ in progress.phases] == ["Extracting functions"]

    def test_call_counts_filled(self, c_project):
        config = RegistryConfig(paths=[str(c_project)], language="c", add_relations=True, jobs=4)
        registry = RegistryPipeline(config).run()
        counts = {f.name: f.call_count for f in registry.functions}
        assert counts == {"bar": 3, "main": 0}
        assert registry.summary.dead_functions == 1

    def test_mixed_tree_generic(self, write_tree, tmp_path):
        root = write_tree(
            {
                "a.py": "def alpha():\n    pass\n",
                "b.go": "package b\n\nfunc Beta() {\n}\n",
            },
            tmp_path / "mixed",
        )
        registry = RegistryPipeline(RegistryConfig(paths=[str(root)])).run()
        assert sorted(f.name for f in registry.functions) == ["Beta", "alpha"]
