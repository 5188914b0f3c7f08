"""Registry aggregation: merges per-file results and derives the summary."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .logging_config import get_logger
from .models import ExtractionResult, Function, Registry, Summary

logger = get_logger(__name__)


def merge_results(results: Sequence[Optional[ExtractionResult]]) -> List[Function]:
    """Concatenate per-file function lists in slot order, skipping empty slots."""
    functions: List[Function] = []
    for result in results:
        if result is not None:
            functions.extend(result.functions)
    return functions


def group_by_file(functions: Sequence[Function]) -> Dict[str, List[Function]]:
    scripts: Dict[str, List[Function]] = {}
    for fn in functions:
        scripts.setdefault(fn.file, []).append(fn)
    return scripts


def build_registry(
    functions: Sequence[Function],
    by_script: bool = False,
    only_dead_code: bool = False,
    relations_built: bool = False,
    total_files: Optional[int] = None,
) -> Registry:
    """Apply the dead-code filter, group if asked, and compute the summary once.

    Args:
        functions: Functions in file-then-line order
        by_script: Also group the functions by file
        only_dead_code: Keep only functions no call site refers to
        relations_built: Whether call counts were filled in beforehand
        total_files: Number of files analysed, including files with no
            functions; defaults to the files the kept functions come from
    """
    kept = list(functions)
    if not relations_built:
        logger.info("Call graph not built; every function counts as dead")
    if only_dead_code:
        kept = [fn for fn in kept if fn.is_dead]
        logger.debug(f"Dead-code filter kept {len(kept)}/{len(functions)} functions")

    return Registry(
        functions=kept,
        scripts=group_by_file(kept) if by_script else None,
        summary=Summary.from_functions(kept, total_files),
        relations_built=relations_built,
    )
