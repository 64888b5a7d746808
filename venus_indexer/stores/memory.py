"""Dict-backed market store."""
from __future__ import annotations

from ..models import Market


class InMemoryMarketStore:
    """Keeps markets in a dict keyed by lowercase address."""

    def __init__(self) -> None:
        self._markets: dict[str, Market] = {}

    def load(self, market_id: str) -> Market | None:
        return self._markets.get(market_id.lower())

    def save(self, market: Market) -> None:
        self._markets[market.id] = market

    def all(self) -> list[Market]:
        return sorted(self._markets.values(), key=lambda m: m.id)
