"""Output formatters for fnregistry."""

from pathlib import Path
from typing import Optional, Union

from ..exceptions import OutputWriteError
from ..logging_config import get_logger
from ..models import Registry
from .base import BaseFormatter
from .csv_formatter import CsvFormatter
from .json_formatter import JsonFormatter
from .text_formatter import TextFormatter
from .yaml_formatter import YamlFormatter

logger = get_logger(__name__)

_FORMATTERS = {
    "text": TextFormatter,
    "json": JsonFormatter,
    "yaml": YamlFormatter,
    "csv": CsvFormatter,
}

_EXTENSIONS = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".csv": "csv",
}


def get_formatter(name: str) -> BaseFormatter:
    """Get a formatter instance by name.

    Args:
        name: One of "text", "json", "yaml", "csv"

    Returns:
        Formatter instance

    Raises:
        ValueError: If name is not recognized
    """
    cls = _FORMATTERS.get(name)
    if cls is None:
        raise ValueError(f"Unknown formatter: {name!r}. Choose from: {', '.join(sorted(_FORMATTERS))}")
    return cls()


def formatter_for_path(path: Optional[Union[str, Path]]) -> BaseFormatter:
    """Pick the formatter from an output file's extension; Markdown text otherwise."""
    if path is None:
        return TextFormatter()
    return get_formatter(_EXTENSIONS.get(Path(path).suffix.lower(), "text"))


def write_registry(registry: Registry, path: Optional[Union[str, Path]] = None) -> None:
    """Render ``registry`` in the format implied by ``path`` and write it.

    Without a path the Markdown report goes to stdout.

    Raises:
        OutputWriteError: if the destination cannot be written.
    """
    formatter = formatter_for_path(path)
    if path is None:
        formatter.render(registry)
        return

    target = Path(path)
    content = formatter.format(registry)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(target, e.strerror or str(e)) from e
    logger.info(f"Wrote {registry.summary.total_functions} functions to {target}")


__all__ = [
    "BaseFormatter",
    "TextFormatter",
    "JsonFormatter",
    "YamlFormatter",
    "CsvFormatter",
    "formatter_for_path",
    "get_formatter",
    "write_registry",
]
