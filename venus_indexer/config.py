"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IndexerConfig:
    poll_interval_seconds: int = 15
    store_path: str = "markets.json"


@dataclass(frozen=True)
class ChainConfig:
    rpc_endpoints: tuple[str, ...] = ()
    rpc_timeout: int = 30


@dataclass(frozen=True)
class ProtocolConfig:
    comptroller: str = ""
    price_oracle: str = ""
    native_market: str = ""
    stablecoin_market: str = ""
    native_symbol: str = "BNB"
    native_name: str = "Binance Coin"
    markets: tuple[str, ...] = ()


@dataclass(frozen=True)
class AppConfig:
    indexer: IndexerConfig = field(default_factory=IndexerConfig)
    chain: ChainConfig = field(default_factory=ChainConfig)
    protocol: ProtocolConfig = field(default_factory=ProtocolConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")
_ADDRESS_RE = re.compile(r"^0x[0-9a-f]{40}$")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _normalize_address(value: Any) -> str:
    return str(value or "").strip().lower()


def _build_indexer(raw: dict[str, Any]) -> IndexerConfig:
    return IndexerConfig(
        poll_interval_seconds=int(raw.get("poll_interval_seconds", 15)),
        store_path=str(raw.get("store_path", "markets.json")),
    )


def _build_chain(raw: dict[str, Any]) -> ChainConfig:
    # Unset ${VAR} endpoints interpolate to "" and are dropped
    endpoints = [e for e in raw.get("rpc_endpoints", []) if e]
    return ChainConfig(
        rpc_endpoints=tuple(endpoints),
        rpc_timeout=int(raw.get("rpc_timeout", 30)),
    )


def _build_protocol(raw: dict[str, Any]) -> ProtocolConfig:
    return ProtocolConfig(
        comptroller=_normalize_address(raw.get("comptroller")),
        price_oracle=_normalize_address(raw.get("price_oracle")),
        native_market=_normalize_address(raw.get("native_market")),
        stablecoin_market=_normalize_address(raw.get("stablecoin_market")),
        native_symbol=raw.get("native_symbol", "BNB"),
        native_name=raw.get("native_name", "Binance Coin"),
        markets=tuple(_normalize_address(m) for m in raw.get("markets", []) or []),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (two levels up from this file).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        indexer=_build_indexer(raw.get("indexer", {})),
        chain=_build_chain(raw.get("chain", {})),
        protocol=_build_protocol(raw.get("protocol", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.chain.rpc_endpoints:
        raise ValueError("At least one RPC endpoint must be configured")

    proto = cfg.protocol
    if not proto.comptroller:
        raise ValueError("Protocol has no comptroller address")
    if not proto.native_market:
        raise ValueError("Protocol has no native market address")

    named = {
        "comptroller": proto.comptroller,
        "price_oracle": proto.price_oracle,
        "native_market": proto.native_market,
        "stablecoin_market": proto.stablecoin_market,
    }
    for name, address in named.items():
        if address and not _ADDRESS_RE.match(address):
            raise ValueError(f"Invalid {name} address '{address}'")
    for address in proto.markets:
        if not _ADDRESS_RE.match(address):
            raise ValueError(f"Invalid market address '{address}'")

    if cfg.indexer.poll_interval_seconds <= 0:
        raise ValueError("poll_interval_seconds must be positive")
