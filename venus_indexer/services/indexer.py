"""Block-polling driver: refreshes every market once per new block."""
from __future__ import annotations

import asyncio
import logging

from ..chains.evm import EvmClient
from ..config import AppConfig
from ..contracts import Comptroller
from ..interfaces.store import MarketStore
from ..markets import MarketNormalizer
from ..models import Market
from ..stores import JsonFileMarketStore

logger = logging.getLogger(__name__)


class Indexer:
    """Orchestrates market discovery and per-block refreshes."""

    def __init__(
        self,
        config: AppConfig,
        client: EvmClient | None = None,
        store: MarketStore | None = None,
    ) -> None:
        self._config = config
        self._client = client or EvmClient(config.chain)
        self._store: MarketStore = store or JsonFileMarketStore(
            config.indexer.store_path
        )
        self._comptroller = Comptroller(self._client, config.protocol.comptroller)
        self._normalizer: MarketNormalizer | None = None
        self._last_block: int | None = None

    @property
    def store(self) -> MarketStore:
        return self._store

    async def _get_normalizer(self) -> MarketNormalizer:
        """Build the normalizer, resolving the oracle address on first use."""
        if self._normalizer is None:
            oracle_address = self._config.protocol.price_oracle
            if not oracle_address:
                oracle_address = await self._comptroller.oracle()
                logger.info("Resolved price oracle from comptroller: %s", oracle_address)
            self._normalizer = MarketNormalizer(
                self._client, self._store, self._config.protocol, oracle_address
            )
        return self._normalizer

    async def discover_markets(self) -> list[str]:
        """Configured markets, or every market listed by the comptroller."""
        if self._config.protocol.markets:
            return list(self._config.protocol.markets)
        markets = await self._comptroller.get_all_markets()
        logger.info("Comptroller lists %d markets", len(markets))
        return markets

    async def sync_block(self, block_number: int, block_timestamp: int) -> list[Market]:
        """Refresh every market at the given block."""
        normalizer = await self._get_normalizer()
        markets = await self.discover_markets()

        refreshed: list[Market] = []
        for address in markets:
            market = await normalizer.refresh_market(
                address, block_number, block_timestamp
            )
            cf = await Comptroller(
                self._client, self._config.protocol.comptroller, block_number
            ).try_collateral_factor_mantissa(market.id)
            if cf.reverted:
                logger.error(
                    "Contract call reverted! call_name: %s, market_name: %s",
                    "try_markets",
                    market.name,
                )
            else:
                market = await normalizer.update_collateral_factor(market.id, cf.value)
            refreshed.append(market)

            logger.info(
                "Market %s · price %s BNB / $%s · supply %s · borrows %s",
                market.symbol,
                market.underlying_price,
                market.underlying_price_usd,
                market.total_supply,
                market.total_borrows,
            )

        self._last_block = block_number
        return refreshed

    async def sync_once(self) -> list[Market]:
        """Refresh every market at the latest block."""
        block = await self._client.get_block("latest")
        block_number = int(block["number"], 16)
        block_timestamp = int(block["timestamp"], 16)
        logger.info("Syncing markets at block %d", block_number)
        return await self.sync_block(block_number, block_timestamp)

    async def run_continuous(self, poll_interval_seconds: int | None = None) -> None:
        """Poll for new blocks and refresh markets on each one."""
        interval = poll_interval_seconds or self._config.indexer.poll_interval_seconds
        logger.info("Starting continuous indexing (polling every %d seconds)", interval)

        while True:
            try:
                latest = await self._client.block_number()
                if latest != self._last_block:
                    await self.sync_once()
                else:
                    logger.debug("No new block since %d", latest)
                await asyncio.sleep(interval)
            except Exception as e:
                logger.error("Error in indexing loop: %s", e)
                await asyncio.sleep(60)
