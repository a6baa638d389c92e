"""Provider outcome sum type."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Hit(Generic[T]):
    """Provider returned usable data."""

    value: T


@dataclass(frozen=True)
class Miss:
    """Provider had nothing usable (not found or malformed payload)."""

    reason: str


@dataclass(frozen=True)
class TransportError:
    """Provider could not be reached (network error, timeout, non-2xx)."""

    error: str
    status_code: str = "n/a"


ProviderOutcome = Hit[T] | Miss | TransportError


def unwrap(outcome: "Hit[T] | Miss | TransportError") -> T | None:
    """Collapse every non-hit variant to ``None``."""
    if isinstance(outcome, Hit):
        return outcome.value
    return None
