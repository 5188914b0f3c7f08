"""
fnregistry - Heuristic multi-language function registry

Scans a source tree with line-oriented pattern matching, records every
function-like declaration it recognises, and optionally counts the call
sites that refer to each one.
"""

__version__ = "0.1.0"

from .api import extract_registry
from .config import RegistryConfig, load_config
from .models import ExtractionResult, Function, Registry, Summary, Visibility
from .pipeline import RegistryPipeline

__all__ = [
    "extract_registry",  # Main entry point
    "RegistryPipeline",
    "RegistryConfig",
    "load_config",
    "Function",
    "Registry",
    "Summary",
    "ExtractionResult",
    "Visibility",
]
