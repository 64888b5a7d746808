"""Typed bindings for the Venus contracts the indexer reads."""
from .bep20 import BEP20
from .comptroller import Comptroller
from .oracle import PriceOracle
from .vtoken import VToken

__all__ = ["BEP20", "Comptroller", "PriceOracle", "VToken"]
