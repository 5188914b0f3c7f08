"""Registry pipeline: select files, extract, relate, aggregate."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol

from .callgraph import CallGraphBuilder
from .config import RegistryConfig
from .dispatcher import BoundedDispatcher
from .logging_config import get_logger
from .models import Registry
from .registry import build_registry, merge_results
from .scanning import collect_files, get_extractor

logger = get_logger(__name__)


class ProgressReporter(Protocol):
    """What the pipeline needs from a progress display."""

    def start_phase(self, description: str, total: int) -> None: ...

    def advance(self, completed: int, total: int) -> None: ...


class RegistryPipeline:
    """Runs one extraction from a validated configuration.

    Phases:
        1. Select candidate files for the configured language
        2. Extract functions from every file through the dispatcher
        3. Optionally rescan for call sites and fill call counts
        4. Filter, group and summarise into a Registry
    """

    def __init__(self, config: RegistryConfig, progress: Optional[ProgressReporter] = None):
        self.config = config
        self.progress = progress
        self.extractor = get_extractor(config.language)
        self.files: List[Path] = []

    def run(self) -> Registry:
        config = self.config

        self.files = collect_files(config, self.extractor)
        if not self.files:
            logger.warning(f"No {config.language} files found under {', '.join(config.paths)}")

        self._phase("Extracting functions")
        results = self._dispatcher().run(self.files, self.extractor.parse_file)
        functions = merge_results(results)
        logger.info(f"Extracted {len(functions)} functions from {len(self.files)} files")

        if config.add_relations:
            self._phase("Building call graph")
            CallGraphBuilder(self.extractor, self._dispatcher()).build(functions, self.files)

        return build_registry(
            functions,
            by_script=config.by_script,
            only_dead_code=config.only_dead_code,
            relations_built=config.add_relations,
            total_files=len(self.files),
        )

    def _dispatcher(self) -> BoundedDispatcher:
        callback = self.progress.advance if self.progress is not None else None
        return BoundedDispatcher(
            jobs=self.config.jobs,
            timeout_seconds=self.config.timeout_seconds,
            progress=callback,
        )

    def _phase(self, description: str) -> None:
        if self.progress is not None:
            self.progress.start_phase(description, len(self.files))
