"""Base generator interface shared by the sequence producers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar("T")


class BaseGenerator(ABC, Generic[T]):
    """Base class for stateless-per-invocation sequence generators.

    Every call to ``generate`` recomputes the whole output from scratch;
    nothing computed by one call is visible to the next.
    """

    name: str = "generator"

    @abstractmethod
    def generate(self) -> T:
        """Produce a complete, freshly computed result."""
