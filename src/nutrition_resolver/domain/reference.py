"""Reference food index models."""

from dataclasses import dataclass
from enum import Enum


class IndexLanguage(str, Enum):
    """Language lists of the reference index; English is the display list."""

    ENGLISH = "en"
    FRENCH = "fr"


class IndexState(str, Enum):
    """Load state of the process-wide reference index."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class ReferenceFood:
    """Generic food entry, e.g. ``"Sweets, sugars, granulated"``."""

    code: int
    description: str


@dataclass(frozen=True)
class ReferenceMatch:
    """Accepted fuzzy match against the reference index."""

    code: int
    display_name: str
    score: float
    language: IndexLanguage
