"""Shared CLI helpers."""

from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console

from ..config import RegistryConfig, load_config

# Registry output owns stdout; status and progress go to stderr
console = Console(stderr=True)


def resolve_config(config: Optional[Path] = None, **options: Any) -> RegistryConfig:
    """Build the configuration from CLI options.

    Options left at ``None`` (or an empty list) were not given on the
    command line and do not override file or environment settings.
    """
    overrides: Dict[str, Any] = {}
    for key, value in options.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            value = [str(v) for v in value]
        overrides[key] = value
    return load_config(config_file=config, **overrides)


def plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def describe_paths(paths: List[str]) -> str:
    return ", ".join(paths) if len(paths) <= 3 else f"{', '.join(paths[:3])}, ..."
