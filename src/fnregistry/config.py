"""Configuration loading and management for fnregistry.

Configuration sources are merged in priority order:
    1. Defaults (defined in RegistryConfig)
    2. Global config (~/.fnregistry.toml)
    3. Project config (./fnregistry.toml)
    4. Explicit config file
    5. Environment variables (FNREGISTRY_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(language="rs", add_relations=True)
    >>> config.language
    'rust'
    >>> config.add_relations
    True
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError
from .scanning.languages import resolve_language

Verbosity = Literal["quiet", "normal", "verbose"]

_VERBOSITY_LEVELS = ("quiet", "normal", "verbose")


def _default_jobs() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class RegistryConfig:
    """Settings for one extraction run.

    Attributes:
        File selection:
            paths: Root files or directories to scan
            include: Glob patterns; when set, only their matches are scanned
            exclude: Glob patterns pruning directories and files
            recursive: Descend into subdirectories
            depth: Maximum directory depth below a root (0 = unlimited)
            only_header_files: Keep only files the extractor treats as headers

        Extraction:
            language: Language tag or alias, resolved to a canonical name
            jobs: Maximum number of files processed concurrently
            timeout_seconds: Deadline for each dispatched batch (None = no limit)

        Registry shaping:
            by_script: Group functions by file in the output
            add_relations: Build the call graph and fill call counts
            only_dead_code: Keep only functions with no recorded call

        Output:
            output_file: Destination; format follows the extension (None = stdout)
            verbosity: Logging verbosity level
    """

    # File selection
    paths: list[str] = field(default_factory=lambda: ["."])
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    recursive: bool = True
    depth: int = 0
    only_header_files: bool = False

    # Extraction
    language: str = "generic"
    jobs: int = field(default_factory=_default_jobs)
    timeout_seconds: Optional[float] = None

    # Registry shaping
    by_script: bool = False
    add_relations: bool = False
    only_dead_code: bool = False

    # Output
    output_file: Optional[str] = None
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate settings and canonicalise the language tag."""
        if self.jobs < 1:
            raise InvalidConfigError("jobs", self.jobs, "must be at least 1")
        if self.depth < 0:
            raise InvalidConfigError("depth", self.depth, "must be non-negative")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise InvalidConfigError("timeout_seconds", self.timeout_seconds, "must be positive")
        if self.verbosity not in _VERBOSITY_LEVELS:
            raise InvalidConfigError(
                "verbosity", self.verbosity, f"must be one of {', '.join(_VERBOSITY_LEVELS)}"
            )
        if not self.paths:
            raise InvalidConfigError("paths", self.paths, "at least one path is required")

        # Raises UnsupportedLanguageError before any file is touched
        object.__setattr__(self, "language", resolve_language(self.language))

    @property
    def is_verbose(self) -> bool:
        return self.verbosity == "verbose"

    @property
    def is_quiet(self) -> bool:
        return self.verbosity == "quiet"


def load_config(config_file: Optional[Path] = None, **overrides) -> RegistryConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated RegistryConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing, or a
            value fails validation
        UnsupportedLanguageError: If the language tag is not recognised
    """
    merged: dict = {}

    # 1. Global config
    global_config = Path.home() / ".fnregistry.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    # 2. Project config
    project_config = Path.cwd() / "fnregistry.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    # 3. Explicit config file (highest priority from files)
    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    # 4. Environment variables
    merged.update(_load_env_vars())

    # 5. CLI overrides; verbosity flags become the verbosity literal
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update(overrides)

    try:
        return RegistryConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from FNREGISTRY_* environment variables.

    Supported environment variables:
        FNREGISTRY_LANGUAGE: str
        FNREGISTRY_JOBS: int
        FNREGISTRY_DEPTH: int
        FNREGISTRY_RECURSIVE: bool (true/false/1/0)
        FNREGISTRY_BY_SCRIPT: bool
        FNREGISTRY_ONLY_HEADER_FILES: bool
        FNREGISTRY_ADD_RELATIONS: bool
        FNREGISTRY_ONLY_DEAD_CODE: bool
        FNREGISTRY_TIMEOUT_SECONDS: float
        FNREGISTRY_OUTPUT_FILE: str
        FNREGISTRY_VERBOSITY: quiet/normal/verbose

    List fields (paths, include, exclude) are not read from the environment.

    Returns:
        Dict of field_name -> parsed_value for any FNREGISTRY_* vars found.
    """
    type_hints = get_type_hints(RegistryConfig)

    result: dict[str, Any] = {}

    for field_name in RegistryConfig.__dataclass_fields__:
        env_key = f"FNREGISTRY_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Returns:
        Parsed value, or None for types not settable from the environment

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    # Optional[X] is Union[X, None]; parse as X
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]

    origin = getattr(type_hint, "__origin__", None)

    if origin is list or type_hint is list:
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    # String, including Literal types like Verbosity
    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load a TOML file and return the parsed dict.

    Raises:
        ConfigurationError: If neither tomllib nor tomli is available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or the 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
