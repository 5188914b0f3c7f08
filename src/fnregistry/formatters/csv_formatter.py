"""CSV formatter for fnregistry."""

import csv
import io

from .base import BaseFormatter
from ..models import Registry

HEADER = [
    "Name", "File", "Line", "Visibility", "ReturnType", "Parameters",
    "Language", "CallCount", "Size", "IsTest", "IsMain", "Comments", "Signature",
]


class CsvFormatter(BaseFormatter):
    """Render the registry as CSV, one row per function."""

    def format(self, registry: Registry) -> str:
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(HEADER)
        for fn in registry.functions:
            writer.writerow([
                fn.name,
                fn.file,
                fn.line,
                fn.visibility.value,
                fn.return_type,
                ";".join(fn.parameters),
                fn.language,
                fn.call_count,
                fn.size,
                str(fn.is_test).lower(),
                str(fn.is_main).lower(),
                fn.comments.replace("\n", " "),
                fn.signature.replace("\n", " "),
            ])
        return output.getvalue()
