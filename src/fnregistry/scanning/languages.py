"""Language table: tags, aliases, extensions and header rules.

Adding a language:
  1. Add a LanguageSpec entry to LANGUAGES below.
  2. Register its extractor class in ``scanning.factory``.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from ..exceptions import UnsupportedLanguageError


@dataclass(frozen=True)
class LanguageSpec:
    """Everything the selector and factory need to know about a language."""

    name: str
    extensions: Tuple[str, ...]
    header_extensions: Tuple[str, ...] = ()
    aliases: Tuple[str, ...] = ()


LANGUAGES: Dict[str, LanguageSpec] = {
    "c": LanguageSpec(
        name="c",
        extensions=(".c", ".h"),
        header_extensions=(".h",),
    ),
    "cpp": LanguageSpec(
        name="cpp",
        extensions=(".cpp", ".cxx", ".cc", ".c++", ".hpp", ".hxx", ".hh", ".h++", ".h"),
        header_extensions=(".h", ".hpp", ".hxx", ".hh", ".h++"),
        aliases=("c++", "cxx"),
    ),
    "rust": LanguageSpec(
        name="rust",
        extensions=(".rs",),
        aliases=("rs",),
    ),
    "go": LanguageSpec(
        name="go",
        extensions=(".go",),
        aliases=("golang",),
    ),
    "python": LanguageSpec(
        name="python",
        extensions=(".py", ".pyi"),
        header_extensions=(".pyi",),
        aliases=("py",),
    ),
    "generic": LanguageSpec(
        name="generic",
        extensions=(
            ".py", ".rs", ".go",
            ".c", ".h", ".cpp", ".cxx", ".cc", ".hpp", ".hxx", ".hh",
            ".java", ".js", ".ts", ".kt", ".swift", ".cs", ".scala", ".php",
        ),
        header_extensions=(".h", ".hpp", ".hxx", ".hh"),
        aliases=("auto", "all", ""),
    ),
}

# Tags with no dedicated extractor that the generic patterns still cover.
GENERIC_FAMILY = frozenset(
    {"java", "javascript", "js", "typescript", "ts", "kotlin", "swift", "csharp", "cs", "scala", "php"}
)

# File extension -> language reported by the generic extractor.
EXTENSION_LANGUAGE: Dict[str, str] = {
    ".py": "python",
    ".pyi": "python",
    ".rs": "rust",
    ".go": "go",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cxx": "cpp",
    ".cc": "cpp",
    ".c++": "cpp",
    ".hpp": "cpp",
    ".hxx": "cpp",
    ".hh": "cpp",
    ".h++": "cpp",
    ".java": "java",
    ".js": "javascript",
    ".ts": "typescript",
    ".kt": "kotlin",
    ".swift": "swift",
    ".cs": "csharp",
    ".scala": "scala",
    ".php": "php",
}

# Directories never worth descending into.
SKIP_DIRS: Tuple[str, ...] = (
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".tox",
    "venv",
    ".venv",
    ".eggs",
    "target",
    "build",
    "dist",
    "vendor",
)


def _alias_table() -> Dict[str, str]:
    table: Dict[str, str] = {}
    for spec in LANGUAGES.values():
        table[spec.name] = spec.name
        for alias in spec.aliases:
            table[alias] = spec.name
    return table


_ALIASES = _alias_table()


def resolve_language(tag: Optional[str]) -> str:
    """Map a user-supplied tag to a canonical language name.

    ``None``, the empty string, ``auto`` and the languages the generic
    patterns cover resolve to ``"generic"``.

    Raises:
        UnsupportedLanguageError: if the tag matches nothing.
    """
    key = (tag or "").strip().lower()
    if key in _ALIASES:
        return _ALIASES[key]
    if key in GENERIC_FAMILY:
        return "generic"
    raise UnsupportedLanguageError(key, supported_languages())


def supported_languages() -> list:
    """Sorted canonical tags plus the generic-covered family."""
    return sorted(set(LANGUAGES) | GENERIC_FAMILY)


def get_language_spec(tag: Optional[str]) -> LanguageSpec:
    return LANGUAGES[resolve_language(tag)]


def detect_language(path: Union[str, Path]) -> str:
    """Best-effort language for a file, from its extension."""
    suffix = Path(path).suffix.lower()
    return EXTENSION_LANGUAGE.get(suffix, "unknown")
