"""Market entity stores."""
from .json_file import JsonFileMarketStore
from .memory import InMemoryMarketStore

__all__ = ["InMemoryMarketStore", "JsonFileMarketStore"]
