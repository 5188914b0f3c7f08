"""YAML formatter for fnregistry."""

import yaml

from .base import BaseFormatter
from ..models import Registry


class YamlFormatter(BaseFormatter):
    """Render the registry as YAML, keys in declaration order."""

    def format(self, registry: Registry) -> str:
        return yaml.safe_dump(
            registry.to_dict(), sort_keys=False, default_flow_style=False, allow_unicode=True
        )
