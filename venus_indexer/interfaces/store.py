"""Market store protocol: entity persistence abstraction."""
from typing import Protocol

from ..models import Market


class MarketStore(Protocol):
    """Abstract interface for persisting markets keyed by lowercase address."""

    def load(self, market_id: str) -> Market | None: ...

    def save(self, market: Market) -> None: ...

    def all(self) -> list[Market]: ...
