"""Output exceptions raised while writing a rendered registry."""

from pathlib import Path

from .base import FnRegistryError


class OutputError(FnRegistryError):
    """Base class for output-related errors."""


class OutputWriteError(OutputError):
    """Raised when the rendered registry cannot be written."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Cannot write output: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason
