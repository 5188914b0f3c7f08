"""Per-language function extractors and file selection."""

from .base import BaseExtractor, BracedExtractor, read_source, strip_literals
from .c_family import CExtractor, CppExtractor
from .factory import get_extractor
from .fallback import GenericExtractor
from .go import GoExtractor
from .languages import (
    LANGUAGES,
    LanguageSpec,
    detect_language,
    resolve_language,
    supported_languages,
)
from .python import PythonExtractor
from .rust import RustExtractor
from .selector import collect_files

__all__ = [
    "BaseExtractor",
    "BracedExtractor",
    "CExtractor",
    "CppExtractor",
    "RustExtractor",
    "GoExtractor",
    "PythonExtractor",
    "GenericExtractor",
    "LANGUAGES",
    "LanguageSpec",
    "collect_files",
    "detect_language",
    "get_extractor",
    "read_source",
    "resolve_language",
    "strip_literals",
    "supported_languages",
]
