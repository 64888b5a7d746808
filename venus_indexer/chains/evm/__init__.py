"""EVM (BNB Chain) client."""
from .client import EvmClient

__all__ = ["EvmClient"]
