"""Base formatter interface for registry output rendering."""

from abc import ABC, abstractmethod

from ..models import Registry


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def format(self, registry: Registry) -> str:
        """Return formatted string representation of the registry."""

    def render(self, registry: Registry) -> None:
        """Print the registry to stdout."""
        print(self.format(registry), end="")
