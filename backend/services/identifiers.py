"""Identifier generators for synthesized tree nodes and graph elements."""

import itertools
import uuid
from typing import Protocol


class IdGenerator(Protocol):
    """Supplies identifiers that are unique within one document."""

    def __call__(self) -> str: ...


class UuidIdGenerator:
    """Random UUID4 identifiers (the default)."""

    def __call__(self) -> str:
        return str(uuid.uuid4())


class SequentialIdGenerator:
    """Deterministic ``<prefix><n>`` identifiers, mainly for tests."""

    def __init__(self, prefix: str = "id_", start: int = 1) -> None:
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}{next(self._counter)}"
