"""Market construction, pricing and refresh."""
from .normalizer import MarketNormalizer

__all__ = ["MarketNormalizer"]
