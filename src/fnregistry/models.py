"""Data models for the function registry.

A ``Function`` is created once per matched declaration and only its
``call_count`` changes afterwards. ``Registry`` and ``Summary`` are rebuilt
from scratch on every run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class Visibility(str, Enum):
    """Visibility of a declaration."""

    PUBLIC = "public"
    PRIVATE = "private"

    def __str__(self) -> str:
        return self.value


@dataclass
class Function:
    """One function-like declaration discovered in a source file."""

    name: str
    file: str
    line: int
    visibility: Visibility = Visibility.PUBLIC
    return_type: str = ""
    parameters: List[str] = field(default_factory=list)
    language: str = ""
    signature: str = ""
    is_test: bool = False
    is_main: bool = False
    size: int = 1
    complexity: Optional[int] = None
    comments: str = ""
    call_count: int = 0
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def is_public(self) -> bool:
        return self.visibility == Visibility.PUBLIC

    @property
    def is_dead(self) -> bool:
        """True when no call site referenced this function."""
        return self.call_count == 0

    @property
    def is_declaration(self) -> bool:
        return self.metadata.get("declaration") == "true"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "file": self.file,
            "line": self.line,
            "visibility": self.visibility.value,
            "return_type": self.return_type,
            "parameters": list(self.parameters),
            "language": self.language,
            "call_count": self.call_count,
            "signature": self.signature,
            "is_test": self.is_test,
            "is_main": self.is_main,
            "size": self.size,
        }
        if self.comments:
            data["comments"] = self.comments
        if self.complexity is not None:
            data["complexity"] = self.complexity
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data


@dataclass(frozen=True)
class Summary:
    """Aggregate counters over the emitted functions."""

    total_functions: int = 0
    total_files: int = 0
    public_functions: int = 0
    private_functions: int = 0
    dead_functions: int = 0
    test_functions: int = 0

    @classmethod
    def from_functions(
        cls, functions: Iterable[Function], total_files: Optional[int] = None
    ) -> "Summary":
        """Compute every counter in a single pass.

        ``total_files`` is the number of files analysed. When omitted, the
        distinct files of ``functions`` are counted instead.
        """
        total = public = private = dead = tests = 0
        files = set()
        for fn in functions:
            total += 1
            files.add(fn.file)
            if fn.visibility == Visibility.PUBLIC:
                public += 1
            else:
                private += 1
            if fn.call_count == 0:
                dead += 1
            if fn.is_test:
                tests += 1
        return cls(
            total_functions=total,
            total_files=len(files) if total_files is None else total_files,
            public_functions=public,
            private_functions=private,
            dead_functions=dead,
            test_functions=tests,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_functions": self.total_functions,
            "total_files": self.total_files,
            "public_functions": self.public_functions,
            "private_functions": self.private_functions,
            "dead_functions": self.dead_functions,
            "test_functions": self.test_functions,
        }


@dataclass
class Registry:
    """The result of one extraction run."""

    functions: List[Function] = field(default_factory=list)
    scripts: Optional[Dict[str, List[Function]]] = None
    summary: Summary = field(default_factory=Summary)
    # False means call counts were never computed and every function reads as dead
    relations_built: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "summary": self.summary.to_dict(),
            "relations_built": self.relations_built,
            "functions": [fn.to_dict() for fn in self.functions],
        }
        if self.scripts is not None:
            data["scripts"] = {
                path: [fn.to_dict() for fn in fns] for path, fns in self.scripts.items()
            }
        return data


@dataclass
class ExtractionResult:
    """Per-file extractor output: declarations plus call-site counts."""

    functions: List[Function] = field(default_factory=list)
    call_sites: Dict[str, int] = field(default_factory=dict)
