"""Public API for fnregistry.

Example:
    >>> from fnregistry import extract_registry
    >>>
    >>> registry = extract_registry("src", language="rust")
    >>> registry.summary.total_functions
    42
    >>>
    >>> # With the call graph and dead-code filter
    >>> registry = extract_registry(
    ...     "src",
    ...     language="c",
    ...     add_relations=True,
    ...     only_dead_code=True,
    ... )
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, Union

from .config import load_config
from .logging_config import get_logger
from .models import Registry
from .pipeline import RegistryPipeline

logger = get_logger(__name__)


def extract_registry(
    paths: Union[str, Path, Sequence[Union[str, Path]]] = ".",
    config_file: Optional[Path] = None,
    **overrides,
) -> Registry:
    """Build a function registry for one or more source roots.

    Args:
        paths: A root file or directory, or several
        config_file: Optional explicit config file path
        **overrides: Configuration overrides (e.g. language="go", jobs=4)

    Returns:
        The Registry, with its summary computed

    Raises:
        ConfigurationError: If configuration is invalid
        UnsupportedLanguageError: If the language tag is not recognised
        InvalidPathError: If a root does not exist
    """
    if isinstance(paths, (str, Path)):
        paths = [paths]
    config = load_config(config_file=config_file, paths=[str(p) for p in paths], **overrides)
    logger.debug(f"Extracting {config.language} functions from {', '.join(config.paths)}")
    return RegistryPipeline(config).run()
