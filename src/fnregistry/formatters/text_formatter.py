"""Markdown text formatter for fnregistry."""

from typing import List

from .base import BaseFormatter
from ..models import Function, Registry


class TextFormatter(BaseFormatter):
    """Render the registry as a Markdown report.

    Functions are listed under a single ``## Functions`` heading, or under
    one heading per file when the registry carries a per-file grouping.
    """

    def format(self, registry: Registry) -> str:
        s = registry.summary
        dead_note = "" if registry.relations_built else " (not computed: run with --add-relations)"
        parts: List[str] = [
            "# Function Registry\n\n",
            "## Summary\n",
            f"- Total Functions: {s.total_functions}\n",
            f"- Total Files: {s.total_files}\n",
            f"- Public Functions: {s.public_functions}\n",
            f"- Private Functions: {s.private_functions}\n",
            f"- Dead Functions: {s.dead_functions}{dead_note}\n",
            f"- Test Functions: {s.test_functions}\n",
            "\n",
        ]

        if registry.scripts is not None:
            for path, functions in registry.scripts.items():
                parts.append(f"## {path}\n\n")
                for fn in sorted(functions, key=lambda f: f.line):
                    parts.append(format_function(fn))
                parts.append("\n")
        else:
            parts.append("## Functions\n\n")
            for fn in registry.functions:
                parts.append(format_function(fn))

        return "".join(parts)


def format_function(fn: Function) -> str:
    lines = [
        f"### {fn.name}",
        f"- **File**: {fn.file}:{fn.line}",
        f"- **Visibility**: {fn.visibility.value}",
        f"- **Return Type**: {fn.return_type}",
        f"- **Parameters**: {', '.join(fn.parameters)}",
        f"- **Language**: {fn.language}",
        f"- **Call Count**: {fn.call_count}",
        f"- **Size**: {fn.size} lines",
    ]
    if fn.is_test:
        lines.append("- **Type**: Test Function")
    if fn.is_main:
        lines.append("- **Type**: Main Function")
    if fn.complexity:
        lines.append(f"- **Complexity**: {fn.complexity}")
    if fn.comments:
        lines.append(f"- **Comments**: {fn.comments}")
    lines.append(f"- **Signature**: `{fn.signature}`")
    return "\n".join(lines) + "\n\n"
