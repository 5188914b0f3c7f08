"""Analysis-related exceptions: file access and language selection."""

from pathlib import Path
from typing import Sequence

from .base import FnRegistryError


class AnalysisError(FnRegistryError):
    """Base class for analysis-related errors."""


class FileAccessError(AnalysisError):
    """Raised when a source file cannot be opened or read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class UnsupportedLanguageError(AnalysisError):
    """Raised when a language tag has no extractor."""

    def __init__(self, language: str, supported_languages: Sequence[str]):
        super().__init__(
            f"Unsupported language: {language}",
            details={"language": language, "supported": ", ".join(supported_languages)},
        )
        self.language = language
        self.supported_languages = list(supported_languages)
