# src/universal_block/ids.py
import itertools
import uuid
from typing import Callable

IdFactory = Callable[[], str]


def uuid_ids() -> str:
    """Default id factory: a random UUID4, the format the block editor uses for client ids."""
    return str(uuid.uuid4())


class SequentialIds:
    """
    Deterministic id factory ("block-1", "block-2", ...).
    Each instance keeps its own counter, so trees built in tests are reproducible.
    """

    def __init__(self, prefix: str = "block-", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}{next(self._counter)}"
