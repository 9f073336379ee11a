"""
Ordered fallback tiers.

A chain runs its tiers in order and returns the first result that does not
raise a ``TierFailure``. Adding or removing a tier is a change to the list
handed to the chain.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, List, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TierFailure(Exception):
    """Recoverable failure of a single tier"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class FallbackExhausted(Exception):
    """Raised when every tier of a chain failed"""
    def __init__(self, component: str, failures: List[Tuple[str, TierFailure]]):
        self.component = component
        self.failures = failures
        detail = "; ".join(f"{name}: {error.message}" for name, error in failures)
        self.message = f"All {component} tiers failed ({detail})"
        super().__init__(self.message)

    @property
    def last_error(self) -> TierFailure:
        return self.failures[-1][1]


class FallbackTier(ABC, Generic[T]):
    """One strategy in a fallback chain"""

    name: str = "tier"

    @abstractmethod
    async def attempt(self, *args: Any, **kwargs: Any) -> T:
        """Produce a result or raise TierFailure"""


class FallbackChain(Generic[T]):
    def __init__(self, component: str, tiers: Sequence[FallbackTier[T]]):
        if not tiers:
            raise ValueError(f"{component} chain needs at least one tier")
        self.component = component
        self.tiers = list(tiers)

    @property
    def tier_names(self) -> List[str]:
        return [tier.name for tier in self.tiers]

    async def run(self, *args: Any, **kwargs: Any) -> Tuple[str, T]:
        """Return ``(tier name, result)`` of the first tier that succeeds."""
        failures: List[Tuple[str, TierFailure]] = []
        for tier in self.tiers:
            try:
                result = await tier.attempt(*args, **kwargs)
            except TierFailure as e:
                logger.warning(f"{self.component}: {tier.name} failed, falling back ({e.message})")
                failures.append((tier.name, e))
                continue
            logger.info(f"{self.component}: served by {tier.name}")
            return tier.name, result
        raise FallbackExhausted(self.component, failures)
