"""Market normalizer: projects vToken contract state onto Market records."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Callable

from ..config import ProtocolConfig
from ..contracts import BEP20, PriceOracle, VToken
from ..interfaces.contract import BlockTag, ContractCaller
from ..interfaces.store import MarketStore
from ..models import ZERO_ADDRESS, Market, MarketKind
from . import scaling

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _GuardedField:
    """A revertible ``uint256`` accessor and how its value lands on a Market.

    On revert the field keeps its previous value.
    """

    accessor: str
    field: str
    convert: Callable[[int, int], Decimal]


# (raw value, underlying decimals) -> stored decimal
_REFRESH_FIELDS: tuple[_GuardedField, ...] = (
    _GuardedField("totalSupply", "total_supply", lambda raw, d: scaling.vtoken_amount(raw)),
    _GuardedField("exchangeRateStored", "exchange_rate", scaling.exchange_rate),
    _GuardedField("borrowIndex", "borrow_index", lambda raw, d: scaling.mantissa(raw)),
    _GuardedField("totalReserves", "reserves", scaling.underlying_amount),
    _GuardedField("totalBorrows", "total_borrows", scaling.underlying_amount),
    _GuardedField("getCash", "cash", scaling.underlying_amount),
    _GuardedField("borrowRatePerBlock", "borrow_rate", lambda raw, d: scaling.mantissa(raw)),
    _GuardedField("supplyRatePerBlock", "supply_rate", lambda raw, d: scaling.mantissa(raw)),
)


def _log_revert(call_name: str, market_name: str) -> None:
    logger.error(
        "Contract call reverted! call_name: %s, market_name: %s",
        call_name,
        market_name,
    )


class MarketNormalizer:
    """Create and refresh markets from on-chain state.

    Args:
        caller: Read-only contract caller.
        store: Market entity store.
        config: Protocol addresses and native asset descriptors.
        oracle_address: Price oracle to quote underlying prices from.
    """

    def __init__(
        self,
        caller: ContractCaller,
        store: MarketStore,
        config: ProtocolConfig,
        oracle_address: str,
    ) -> None:
        self._caller = caller
        self._store = store
        self._config = config
        self._oracle_address = oracle_address.lower()

    def market_kind(self, market_address: str) -> MarketKind:
        address = market_address.lower()
        if address == self._config.native_market:
            return MarketKind.NATIVE
        if self._config.stablecoin_market and address == self._config.stablecoin_market:
            return MarketKind.STABLECOIN
        return MarketKind.STANDARD

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    async def create_market(
        self, market_address: str, block: BlockTag = "latest"
    ) -> Market:
        """Build a new Market from contract metadata. The caller saves it."""
        market_id = market_address.lower()
        kind = self.market_kind(market_id)
        contract = VToken(self._caller, market_id, block)

        if kind is MarketKind.NATIVE:
            # The native market has no BEP20 underlying
            underlying_address = ZERO_ADDRESS
            underlying_decimals = 18
            underlying_name = self._config.native_name
            underlying_symbol = self._config.native_symbol
            underlying_price = Decimal(1)
        else:
            underlying_address = await contract.underlying()
            token = BEP20(self._caller, underlying_address, block)
            underlying_decimals = await token.decimals()
            underlying_name = await token.name()
            underlying_symbol = await token.symbol()
            underlying_price = Decimal(0)

        underlying_price_usd = (
            Decimal(1) if kind is MarketKind.STABLECOIN else Decimal(0)
        )

        name = await self._try_string(contract, "name")
        symbol = await self._try_string(contract, "symbol")
        interest_rate_model = await contract.try_interest_rate_model()
        reserve_factor = await contract.try_reserve_factor_mantissa()

        market = Market(
            id=market_id,
            kind=kind,
            name=name,
            symbol=symbol,
            underlying_address=underlying_address,
            underlying_name=underlying_name,
            underlying_symbol=underlying_symbol,
            underlying_decimals=underlying_decimals,
            interest_rate_model_address=interest_rate_model.value_or(ZERO_ADDRESS),
            reserve_factor=int(reserve_factor.value_or(0)),
            underlying_price=underlying_price,
            underlying_price_usd=underlying_price_usd,
        )
        logger.info(
            "Created %s market %s (%s, underlying %s, %d decimals)",
            kind.value,
            market_id,
            symbol,
            underlying_symbol,
            underlying_decimals,
        )
        return market

    async def _try_string(self, contract: VToken, accessor: str) -> str:
        result = await contract.try_string(accessor)
        if result.reverted:
            _log_revert(f"try_{accessor}", contract.address)
            return ""
        return result.value

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------

    def _oracle(self, block: BlockTag) -> PriceOracle:
        return PriceOracle(self._caller, self._oracle_address, block)

    async def get_native_token_price_in_usd(self, block: BlockTag = "latest") -> Decimal:
        """USD price of one native token (BNB)."""
        raw = await self._oracle(block).get_underlying_price(self._config.native_market)
        return scaling.scale(raw, scaling.MANTISSA_DECIMALS)

    async def get_token_price_in_native(
        self,
        market_address: str,
        underlying_decimals: int,
        block: BlockTag = "latest",
    ) -> Decimal:
        """Oracle quote for one whole underlying token of a market.

        The oracle scales every quote as if the underlying had 18 decimals,
        so the raw value is divided by ``10^(36 - underlying_decimals)``.
        """
        raw = await self._oracle(block).get_underlying_price(market_address)
        return scaling.oracle_token_price(raw, underlying_decimals)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def _load_or_create(self, market_address: str, block: BlockTag) -> Market:
        market_id = market_address.lower()
        market = self._store.load(market_id)
        if market is None:
            market = await self.create_market(market_id, block)
        return market

    async def refresh_market(
        self, market_address: str, block_number: int, block_timestamp: int
    ) -> Market:
        """Synchronize a market's numeric fields with on-chain state.

        Runs at most once per block: if the stored accrual block already
        equals ``block_number`` the stored record is returned untouched.
        """
        market = await self._load_or_create(market_address, block_number)
        if market.accrual_block_number == block_number:
            logger.debug("Market %s already updated at block %d", market.id, block_number)
            return market

        decimals = market.underlying_decimals
        contract = VToken(self._caller, market.id, block_number)
        native_price_usd = await self.get_native_token_price_in_usd(block_number)

        updates: dict[str, Any] = {}
        if market.kind is MarketKind.NATIVE:
            updates["underlying_price_usd"] = scaling.truncate(native_price_usd, decimals)
        else:
            token_price = await self.get_token_price_in_native(
                market.id, decimals, block_number
            )
            price = scaling.price_in_native(token_price, native_price_usd, decimals)
            if price is None:
                logger.warning(
                    "Native token price is zero at block %d; keeping %s price",
                    block_number,
                    market.symbol,
                )
            else:
                updates["underlying_price"] = price
            if market.kind is MarketKind.STANDARD:
                updates["underlying_price_usd"] = scaling.truncate(token_price, decimals)

        updates["accrual_block_number"] = await contract.accrual_block_number()
        updates["block_timestamp"] = block_timestamp

        for guarded in _REFRESH_FIELDS:
            result = await contract.try_uint(guarded.accessor)
            if result.reverted:
                _log_revert(f"try_{guarded.accessor}", market.name)
                continue
            updates[guarded.field] = guarded.convert(int(result.value), decimals)

        market = replace(market, **updates)
        self._store.save(market)
        logger.debug(
            "Refreshed %s at block %d: price %s BNB / $%s",
            market.symbol,
            block_number,
            market.underlying_price,
            market.underlying_price_usd,
        )
        return market

    async def update_collateral_factor(
        self, market_address: str, collateral_factor_mantissa: int
    ) -> Market:
        """Store a new collateral factor (an 18-decimal mantissa)."""
        market = await self._load_or_create(market_address, "latest")
        market = replace(
            market, collateral_factor=scaling.mantissa(collateral_factor_mantissa)
        )
        self._store.save(market)
        return market
