"""Data models: all frozen (immutable)."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Generic, TypeVar

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

T = TypeVar("T")


class MarketKind(str, enum.Enum):
    """How a market is priced, resolved once when the market is created."""

    NATIVE = "native"
    STABLECOIN = "stablecoin"
    STANDARD = "standard"


@dataclass(frozen=True)
class CallResult(Generic[T]):
    """Outcome of a contract call that is allowed to revert."""

    value: T | None = None
    reverted: bool = False

    @classmethod
    def ok(cls, value: T) -> CallResult[T]:
        return cls(value=value, reverted=False)

    @classmethod
    def revert(cls) -> CallResult[T]:
        return cls(value=None, reverted=True)

    def value_or(self, default: T) -> T:
        if self.reverted or self.value is None:
            return default
        return self.value


@dataclass(frozen=True)
class Market:
    """One lending market (vToken) and its normalized on-chain state."""

    id: str
    kind: MarketKind
    name: str
    symbol: str
    underlying_address: str
    underlying_name: str
    underlying_symbol: str
    underlying_decimals: int
    interest_rate_model_address: str = ZERO_ADDRESS
    reserve_factor: int = 0

    underlying_price: Decimal = Decimal(0)
    underlying_price_usd: Decimal = Decimal(0)
    exchange_rate: Decimal = Decimal(0)
    borrow_index: Decimal = Decimal(0)
    total_borrows: Decimal = Decimal(0)
    total_supply: Decimal = Decimal(0)
    cash: Decimal = Decimal(0)
    reserves: Decimal = Decimal(0)
    borrow_rate: Decimal = Decimal(0)
    supply_rate: Decimal = Decimal(0)
    collateral_factor: Decimal = Decimal(0)

    accrual_block_number: int = 0
    block_timestamp: int = 0


_DECIMAL_FIELDS = (
    "underlying_price",
    "underlying_price_usd",
    "exchange_rate",
    "borrow_index",
    "total_borrows",
    "total_supply",
    "cash",
    "reserves",
    "borrow_rate",
    "supply_rate",
    "collateral_factor",
)


def market_to_dict(market: Market) -> dict[str, Any]:
    """Serialize a market to JSON-safe primitives (decimals as strings)."""
    return {
        "id": market.id,
        "kind": market.kind.value,
        "name": market.name,
        "symbol": market.symbol,
        "underlying_address": market.underlying_address,
        "underlying_name": market.underlying_name,
        "underlying_symbol": market.underlying_symbol,
        "underlying_decimals": market.underlying_decimals,
        "interest_rate_model_address": market.interest_rate_model_address,
        # uint256 mantissas can exceed what JSON readers handle as numbers
        "reserve_factor": str(market.reserve_factor),
        **{name: str(getattr(market, name)) for name in _DECIMAL_FIELDS},
        "accrual_block_number": market.accrual_block_number,
        "block_timestamp": market.block_timestamp,
    }


def market_from_dict(raw: dict[str, Any]) -> Market:
    """Inverse of :func:`market_to_dict`."""
    return Market(
        id=raw["id"],
        kind=MarketKind(raw.get("kind", MarketKind.STANDARD.value)),
        name=raw.get("name", ""),
        symbol=raw.get("symbol", ""),
        underlying_address=raw.get("underlying_address", ZERO_ADDRESS),
        underlying_name=raw.get("underlying_name", ""),
        underlying_symbol=raw.get("underlying_symbol", ""),
        underlying_decimals=int(raw.get("underlying_decimals", 18)),
        interest_rate_model_address=raw.get(
            "interest_rate_model_address", ZERO_ADDRESS
        ),
        reserve_factor=int(raw.get("reserve_factor", 0)),
        **{name: Decimal(raw.get(name, "0")) for name in _DECIMAL_FIELDS},
        accrual_block_number=int(raw.get("accrual_block_number", 0)),
        block_timestamp=int(raw.get("block_timestamp", 0)),
    )
