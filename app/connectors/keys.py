"""API key pool with pluggable selection policy."""

import itertools
import random
import threading
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from app.errors import ConfigError


class KeySelector(ABC):
    """Picks one key from a non-empty pool."""

    name: str = "base"

    @abstractmethod
    def select(self, keys: Sequence[str]) -> str:
        pass


class RandomKeySelector(KeySelector):
    """Uniform random draw per call."""

    name = "random"

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def select(self, keys: Sequence[str]) -> str:
        return self._rng.choice(keys)


class RoundRobinKeySelector(KeySelector):
    """Cycle through the pool in order."""

    name = "round_robin"

    def __init__(self):
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def select(self, keys: Sequence[str]) -> str:
        with self._lock:
            index = next(self._counter)
        return keys[index % len(keys)]


SELECTORS = {
    RandomKeySelector.name: RandomKeySelector,
    RoundRobinKeySelector.name: RoundRobinKeySelector,
}


def make_selector(name: str) -> KeySelector:
    """Build a selector from its config name."""
    try:
        return SELECTORS[name]()
    except KeyError:
        raise ConfigError(
            f"Unknown key selection policy: {name}",
            details=f"expected one of {sorted(SELECTORS)}",
        ) from None


class KeyPool:
    """Read-only set of credentials for one upstream service."""

    def __init__(
        self,
        keys: Sequence[str],
        selector: Optional[KeySelector] = None,
        service: str = "Exa",
    ):
        self.service = service
        self.keys = tuple(k for k in keys if k)
        self.selector = selector or RandomKeySelector()

    def pick(self) -> str:
        if not self.keys:
            raise ConfigError(f"No {self.service} API keys configured")
        return self.selector.select(self.keys)
