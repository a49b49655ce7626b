"""Translate Source 1 VMT materials into Source 2 VMAT materials."""

from .config import Config
from .rules import Source2Version
from .translator import TranslationResult, translate_lines

__version__ = "0.1.0"

__all__ = ["Config", "Source2Version", "TranslationResult", "translate_lines", "__version__"]
