"""Tests for configuration loading and validation."""

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from fnregistry.config import RegistryConfig, load_config
from fnregistry.exceptions import (
    ConfigurationError,
    InvalidConfigError,
    UnsupportedLanguageError,
)


@pytest.fixture(autouse=True)
def _isolated(isolated_env):
    return isolated_env


class TestRegistryConfig:
    """Test RegistryConfig defaults and validation."""

    def test_defaults(self):
        config = RegistryConfig()
        assert config.paths == ["."]
        assert config.include == []
        assert config.exclude == []
        assert config.recursive is True
        assert config.depth == 0
        assert config.language == "generic"
        assert config.jobs >= 1
        assert config.timeout_seconds is None
        assert not config.by_script
        assert not config.add_relations
        assert not config.only_dead_code
        assert config.output_file is None
        assert config.verbosity == "normal"

    def test_language_canonicalised(self):
        assert RegistryConfig(language="rs").language == "rust"
        assert RegistryConfig(language="C++").language == "cpp"
        assert RegistryConfig(language="java").language == "generic"

    def test_unsupported_language(self):
        with pytest.raises(UnsupportedLanguageError):
            RegistryConfig(language="cobol")

    @pytest.mark.parametrize(
        "kwargs,key",
        [
            ({"jobs": 0}, "jobs"),
            ({"depth": -1}, "depth"),
            ({"timeout_seconds": 0}, "timeout_seconds"),
            ({"verbosity": "loud"}, "verbosity"),
            ({"paths": []}, "paths"),
        ],
    )
    def test_invalid_values(self, kwargs, key):
        with pytest.raises(InvalidConfigError) as exc_info:
            RegistryConfig(**kwargs)
        assert exc_info.value.key == key

    def test_frozen(self):
        config = RegistryConfig()
        with pytest.raises(FrozenInstanceError):
            config.jobs = 4

    def test_verbosity_properties(self):
        assert RegistryConfig(verbosity="verbose").is_verbose
        assert RegistryConfig(verbosity="quiet").is_quiet
        assert not RegistryConfig().is_quiet


class TestLoadConfig:
    """Test load_config() source merging."""

    def test_no_sources(self):
        config = load_config()
        assert config == RegistryConfig()

    def test_overrides(self):
        config = load_config(language="go", jobs=3, exclude=["vendor"])
        assert config.language == "go"
        assert config.jobs == 3
        assert config.exclude == ["vendor"]

    def test_verbose_and_quiet_flags(self):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"
        assert load_config(verbose=False, quiet=False).verbosity == "normal"

    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("FNREGISTRY_JOBS", "3")
        monkeypatch.setenv("FNREGISTRY_ADD_RELATIONS", "yes")
        monkeypatch.setenv("FNREGISTRY_LANGUAGE", "py")
        monkeypatch.setenv("FNREGISTRY_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("FNREGISTRY_OUTPUT_FILE", "out.json")
        config = load_config()
        assert config.jobs == 3
        assert config.add_relations is True
        assert config.language == "python"
        assert config.timeout_seconds == 2.5
        assert config.output_file == "out.json"

    def test_list_env_vars_ignored(self, monkeypatch):
        monkeypatch.setenv("FNREGISTRY_EXCLUDE", "tests")
        assert load_config().exclude == []

    def test_bad_env_bool(self, monkeypatch):
        monkeypatch.setenv("FNREGISTRY_RECURSIVE", "maybe")
        with pytest.raises(InvalidConfigError) as exc_info:
            load_config()
        assert exc_info.value.key == "FNREGISTRY_RECURSIVE"

    def test_bad_env_int(self, monkeypatch):
        monkeypatch.setenv("FNREGISTRY_JOBS", "many")
        with pytest.raises(InvalidConfigError):
            load_config()

    def test_overrides_beat_env(self, monkeypatch):
        monkeypatch.setenv("FNREGISTRY_JOBS", "3")
        assert load_config(jobs=5).jobs == 5

    def test_project_config(self, isolated_env):
        (isolated_env / "fnregistry.toml").write_text('language = "c"\nexclude = ["third_party"]\n')
        config = load_config()
        assert config.language == "c"
        assert config.exclude == ["third_party"]

    def test_global_config(self):
        (Path.home() / ".fnregistry.toml").write_text("by_script = true\n")
        assert load_config().by_script is True

    def test_precedence(self, isolated_env, tmp_path, monkeypatch):
        """Global < project < explicit file < environment < overrides."""
        (Path.home() / ".fnregistry.toml").write_text("depth = 1\njobs = 1\nlanguage = \"go\"\n")
        (isolated_env / "fnregistry.toml").write_text("depth = 2\njobs = 2\n")
        explicit = tmp_path / "explicit.toml"
        explicit.write_text("depth = 3\n")
        monkeypatch.setenv("FNREGISTRY_JOBS", "4")

        config = load_config(config_file=explicit, by_script=True)
        assert config.language == "go"
        assert config.depth == 3
        assert config.jobs == 4
        assert config.by_script is True

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(config_file=tmp_path / "nope.toml")

    def test_malformed_toml(self, tmp_path):
        bad = tmp_path / "bad.toml"
        bad.write_text("language = \n")
        with pytest.raises(ConfigurationError):
            load_config(config_file=bad)

    def test_unknown_key(self, tmp_path):
        cfg = tmp_path / "extra.toml"
        cfg.write_text("colour = \"blue\"\n")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(config_file=cfg)

    def test_language_from_file_validated(self, tmp_path):
        cfg = tmp_path / "lang.toml"
        cfg.write_text('language = "cobol"\n')
        with pytest.raises(UnsupportedLanguageError):
            load_config(config_file=cfg)
