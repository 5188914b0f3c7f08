"""Exception hierarchy for fnregistry."""

from .analysis import (
    AnalysisError,
    FileAccessError,
    UnsupportedLanguageError,
)
from .base import FnRegistryError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)
from .output import OutputError, OutputWriteError

__all__ = [
    "FnRegistryError",
    "AnalysisError",
    "FileAccessError",
    "UnsupportedLanguageError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
    "OutputError",
    "OutputWriteError",
]
