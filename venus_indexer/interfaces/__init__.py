"""Protocol interfaces for the market indexer."""
from .contract import ContractCaller
from .store import MarketStore

__all__ = ["ContractCaller", "MarketStore"]
