"""JSON formatter for fnregistry."""

import json

from .base import BaseFormatter
from ..models import Registry


class JsonFormatter(BaseFormatter):
    """Render the registry as JSON."""

    def format(self, registry: Registry) -> str:
        return json.dumps(registry.to_dict(), indent=2) + "\n"
