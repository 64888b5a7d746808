"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any, Sequence

import pytest

from venus_indexer.config import (
    AppConfig,
    ChainConfig,
    IndexerConfig,
    ProtocolConfig,
)
from venus_indexer.errors import ContractCallReverted
from venus_indexer.models import CallResult, Market
from venus_indexer.stores import InMemoryMarketStore

COMPTROLLER = "0xfd36e2c2a6789db23113685031d7f16329158384"
ORACLE = "0x" + "11" * 20
VBNB = "0xa07c5b74c9b40447a954e1466938b865b6bbea36"
VUSDC = "0xeca88125a5adbe82614ffc12d0db554e2e2867c8"
VDAI = "0x" + "d1" * 20
VBTC = "0x" + "b1" * 20
DAI = "0x" + "d2" * 20
USDC = "0x" + "c2" * 20
BTCB = "0x" + "b2" * 20
IRM = "0x" + "99" * 20

# Sentinel for a call that must revert
REVERT = object()


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


def _key(address: str, signature: str, args: Sequence[Any]) -> tuple:
    norm = tuple(a.lower() if isinstance(a, str) else a for a in args)
    return (address.lower(), signature, norm)


class FakeContractCaller:
    """In-memory ContractCaller; unknown calls revert."""

    def __init__(self) -> None:
        self.responses: dict[tuple, Any] = {}
        self.calls: list[tuple] = []

    def set(self, address: str, signature: str, value: Any, *args: Any) -> None:
        self.responses[_key(address, signature, args)] = value

    async def call(
        self,
        address: str,
        signature: str,
        output_types: Sequence[str],
        args: Sequence[Any] = (),
        block: int | str = "latest",
    ) -> Any:
        key = _key(address, signature, args)
        self.calls.append(key)
        value = self.responses.get(key, REVERT)
        if value is REVERT:
            raise ContractCallReverted(signature)
        return value

    async def try_call(
        self,
        address: str,
        signature: str,
        output_types: Sequence[str],
        args: Sequence[Any] = (),
        block: int | str = "latest",
    ) -> CallResult[Any]:
        try:
            return CallResult.ok(
                await self.call(address, signature, output_types, args, block)
            )
        except ContractCallReverted:
            return CallResult.revert()


class FakeChainClient(FakeContractCaller):
    """FakeContractCaller that also serves block headers."""

    def __init__(self, block_number: int = 100, timestamp: int = 1_700_000_000) -> None:
        super().__init__()
        self.block = {"number": hex(block_number), "timestamp": hex(timestamp)}

    async def get_block(self, block: int | str = "latest") -> dict[str, Any]:
        return self.block

    async def block_number(self) -> int:
        return int(self.block["number"], 16)


class CountingStore(InMemoryMarketStore):
    """InMemoryMarketStore that counts writes."""

    def __init__(self) -> None:
        super().__init__()
        self.saves = 0

    def save(self, market: Market) -> None:
        self.saves += 1
        super().save(market)


def set_vtoken_state(
    caller: FakeContractCaller,
    market: str,
    *,
    accrual_block: int,
    total_supply: Any = 1_234_567_890_123,
    exchange_rate: Any = 2 * 10**26,
    borrow_index: Any = 1_050_000_000_000_000_000,
    reserves: Any = 10 * 10**18,
    borrows: Any = 1000 * 10**18 + 123,
    cash: Any = 5000 * 10**18,
    borrow_rate: Any = 951_293_759,
    supply_rate: Any = 500_000_000,
) -> None:
    caller.set(market, "accrualBlockNumber()", accrual_block)
    caller.set(market, "totalSupply()", total_supply)
    caller.set(market, "exchangeRateStored()", exchange_rate)
    caller.set(market, "borrowIndex()", borrow_index)
    caller.set(market, "totalReserves()", reserves)
    caller.set(market, "totalBorrows()", borrows)
    caller.set(market, "getCash()", cash)
    caller.set(market, "borrowRatePerBlock()", borrow_rate)
    caller.set(market, "supplyRatePerBlock()", supply_rate)


def populate_venus(caller: FakeContractCaller, accrual_block: int = 100) -> None:
    """Wire up vBNB, vUSDC, vDAI and vBTC with BNB at $300."""
    caller.set(ORACLE, "getUnderlyingPrice(address)", 300 * 10**18, VBNB)
    caller.set(ORACLE, "getUnderlyingPrice(address)", 10**18, VDAI)
    caller.set(ORACLE, "getUnderlyingPrice(address)", 1_010_000_000_000_000_000, VUSDC)
    caller.set(ORACLE, "getUnderlyingPrice(address)", 60_000 * 10**28, VBTC)

    caller.set(VBNB, "name()", "Venus BNB")
    caller.set(VBNB, "symbol()", "vBNB")

    for market, token, name, symbol, decimals in (
        (VDAI, DAI, "Dai Token", "DAI", 18),
        (VUSDC, USDC, "USD Coin", "USDC", 18),
        (VBTC, BTCB, "BTCB Token", "BTCB", 8),
    ):
        caller.set(market, "underlying()", token)
        caller.set(market, "name()", f"Venus {symbol}")
        caller.set(market, "symbol()", f"v{symbol}")
        caller.set(token, "decimals()", decimals)
        caller.set(token, "name()", name)
        caller.set(token, "symbol()", symbol)

    for market in (VBNB, VDAI, VUSDC, VBTC):
        caller.set(market, "interestRateModel()", IRM)
        caller.set(market, "reserveFactorMantissa()", 2 * 10**17)
        set_vtoken_state(caller, market, accrual_block=accrual_block)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_chain_config() -> ChainConfig:
    return ChainConfig(
        rpc_endpoints=("https://rpc1.example.com", "https://rpc2.example.com"),
        rpc_timeout=10,
    )


@pytest.fixture()
def sample_protocol_config() -> ProtocolConfig:
    return ProtocolConfig(
        comptroller=COMPTROLLER,
        price_oracle=ORACLE,
        native_market=VBNB,
        stablecoin_market=VUSDC,
        native_symbol="BNB",
        native_name="Binance Coin",
        markets=(VBNB, VUSDC, VDAI),
    )


@pytest.fixture()
def sample_app_config(
    tmp_path: Path,
    sample_chain_config: ChainConfig,
    sample_protocol_config: ProtocolConfig,
) -> AppConfig:
    return AppConfig(
        indexer=IndexerConfig(
            poll_interval_seconds=5, store_path=str(tmp_path / "markets.json")
        ),
        chain=sample_chain_config,
        protocol=sample_protocol_config,
    )


# ---------------------------------------------------------------------------
# Contract fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def caller() -> FakeContractCaller:
    fake = FakeContractCaller()
    populate_venus(fake)
    return fake


@pytest.fixture()
def store() -> CountingStore:
    return CountingStore()


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    indexer:
      poll_interval_seconds: 5
      store_path: /tmp/markets.json
    chain:
      rpc_endpoints: ["https://rpc.example.com"]
      rpc_timeout: 10
    protocol:
      comptroller: "0xfD36E2c2a6789Db23113685031d7F16329158384"
      price_oracle: ""
      native_market: "0xA07c5b74C9B40447a954e1466938b865b6BBea36"
      stablecoin_market: "0xecA88125a5ADbe82614ffC12D0DB554E2e2867C8"
      markets: []
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
