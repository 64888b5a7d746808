"""Venus price oracle binding."""
from __future__ import annotations

from .base import ContractBinding


class PriceOracle(ContractBinding):
    async def get_underlying_price(self, market_address: str) -> int:
        """Return the oracle mantissa for a market's underlying asset.

        The mantissa is scaled by ``10^(36 - underlying decimals)``.
        """
        return int(
            await self._call(
                "getUnderlyingPrice(address)", ["uint256"], market_address
            )
        )
