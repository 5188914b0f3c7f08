"""File selection: turns configured roots and patterns into a file list."""

from __future__ import annotations

import glob
import os
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, List, Sequence, Set

from ..exceptions import InvalidPathError
from ..logging_config import get_logger
from .base import BaseExtractor
from .languages import SKIP_DIRS

if TYPE_CHECKING:
    from ..config import RegistryConfig

logger = get_logger(__name__)


def collect_files(config: "RegistryConfig", extractor: BaseExtractor) -> List[Path]:
    """Candidate source files for one run, de-duplicated and sorted.

    With ``config.include`` set, only the glob matches are considered and
    no directory is walked. Otherwise every root in ``config.paths`` is
    walked, honouring ``recursive``, ``depth`` and the exclude patterns.

    Raises:
        InvalidPathError: if a root does not exist.
    """
    found: Set[Path] = set()

    if config.include:
        for pattern in config.include:
            matches = glob.glob(pattern, recursive=True)
            if not matches:
                logger.debug(f"Include pattern matched nothing: {pattern}")
            for match in matches:
                path = Path(match)
                if path.is_file() and _is_candidate(path, config, extractor, Path()):
                    found.add(path)
    else:
        for root in config.paths:
            root_path = Path(root)
            if not root_path.exists():
                raise InvalidPathError(root_path, "does not exist")
            if root_path.is_file():
                if _is_candidate(root_path, config, extractor, root_path.parent):
                    found.add(root_path)
                else:
                    logger.debug(f"Skipped (not a {extractor.language} file): {root_path}")
                continue
            found.update(_walk(root_path, config, extractor))

    files = sorted(found)
    logger.info(f"Selected {len(files)} {extractor.language} files")
    return files


def _walk(root: Path, config: "RegistryConfig", extractor: BaseExtractor) -> Iterator[Path]:
    root_depth = len(root.parts)
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        level = len(current.parts) - root_depth

        if not config.recursive or (config.depth and level >= config.depth):
            dirnames[:] = []
        else:
            # Prune in place so os.walk never descends into skipped trees
            dirnames[:] = sorted(
                d
                for d in dirnames
                if d not in SKIP_DIRS and not _is_excluded(current / d, config.exclude, root)
            )

        for name in filenames:
            path = current / name
            if _is_candidate(path, config, extractor, root):
                yield path


def _is_candidate(
    path: Path, config: "RegistryConfig", extractor: BaseExtractor, root: Path
) -> bool:
    if not extractor.accepts(path):
        return False
    if config.only_header_files and not extractor.is_header_file(path):
        return False
    if _is_excluded(path, config.exclude, root):
        logger.debug(f"Skipped (excluded): {path}")
        return False
    return True


def _is_excluded(path: Path, patterns: Sequence[str], root: Path) -> bool:
    """True when the path below ``root``, or any of its components, matches a pattern."""
    if not patterns:
        return False
    try:
        path = path.relative_to(root)
    except ValueError:
        pass
    text = path.as_posix()
    for pattern in patterns:
        if not pattern:
            continue
        if path.match(pattern) or fnmatch(text, pattern):
            return True
        if any(fnmatch(part, pattern) for part in path.parts):
            return True
    return False
