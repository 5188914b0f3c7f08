"""Call-graph builder.

Resolution is by exact name only: a call site ``foo(`` counts toward every
function named ``foo``, wherever it is declared.
"""

from __future__ import annotations

from pathlib import Path
from threading import Lock
from typing import Dict, List, Sequence

from .dispatcher import BoundedDispatcher
from .logging_config import get_logger
from .models import Function
from .scanning.base import BaseExtractor

logger = get_logger(__name__)


class CallGraphBuilder:
    """Fills ``call_count`` on functions by rescanning the source files."""

    def __init__(self, extractor: BaseExtractor, dispatcher: BoundedDispatcher) -> None:
        self.extractor = extractor
        self.dispatcher = dispatcher
        self._lock = Lock()

    def build(self, functions: Sequence[Function], files: Sequence[Path]) -> int:
        """Increment call counters from every file's call sites.

        Returns:
            Number of call occurrences that resolved to a known function
        """
        index = build_name_index(functions)
        if not index:
            logger.debug("No functions to resolve calls against")
            return 0

        def scan(path: Path) -> int:
            sites = self.extractor.parse_file(path).call_sites
            resolved = 0
            with self._lock:
                for name, count in sites.items():
                    targets = index.get(name)
                    if not targets:
                        continue
                    for fn in targets:
                        fn.call_count += count
                    resolved += count
            return resolved

        counts = self.dispatcher.run(files, scan)
        total = sum(c for c in counts if c)
        called = sum(1 for fn in functions if fn.call_count)
        logger.info(f"Resolved {total} calls; {called}/{len(functions)} functions are called")
        return total


def build_name_index(functions: Sequence[Function]) -> Dict[str, List[Function]]:
    """Map each function name to every function declared under it."""
    index: Dict[str, List[Function]] = {}
    for fn in functions:
        index.setdefault(fn.name, []).append(fn)
    return index
