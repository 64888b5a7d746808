"""JSON file market store."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from ..models import Market, market_from_dict, market_to_dict
from .memory import InMemoryMarketStore

logger = logging.getLogger(__name__)


class JsonFileMarketStore(InMemoryMarketStore):
    """In-memory store mirrored to a single JSON file.

    Every save rewrites the file atomically (temp file + rename).
    """

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            with open(self.path) as f:
                raw = json.load(f)
            for entry in raw.get("markets", []):
                market = market_from_dict(entry)
                self._markets[market.id] = market
            logger.info("Loaded %d markets from %s", len(self._markets), self.path)

    def save(self, market: Market) -> None:
        super().save(market)
        self._write()

    def _write(self) -> None:
        payload = {"markets": [market_to_dict(m) for m in self.all()]}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump(payload, f, indent=2)
        os.replace(tmp_path, self.path)
