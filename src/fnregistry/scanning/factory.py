"""Extractor factory: resolves a language tag to an extractor instance."""

from typing import Dict, Optional, Type

from ..logging_config import get_logger
from .base import BaseExtractor
from .c_family import CExtractor, CppExtractor
from .fallback import GenericExtractor
from .go import GoExtractor
from .languages import resolve_language
from .python import PythonExtractor
from .rust import RustExtractor

logger = get_logger(__name__)

_EXTRACTORS: Dict[str, Type[BaseExtractor]] = {
    "c": CExtractor,
    "cpp": CppExtractor,
    "rust": RustExtractor,
    "go": GoExtractor,
    "python": PythonExtractor,
    "generic": GenericExtractor,
}


def get_extractor(language: Optional[str] = None) -> BaseExtractor:
    """Build the extractor for a language tag or alias.

    Raises:
        UnsupportedLanguageError: if the tag matches no extractor.
    """
    name = resolve_language(language)
    logger.debug(f"Using {_EXTRACTORS[name].__name__} for language {language!r}")
    return _EXTRACTORS[name]()
