"""Venus comptroller (Unitroller) binding."""
from __future__ import annotations

from ..models import CallResult
from .base import ContractBinding


class Comptroller(ContractBinding):
    async def oracle(self) -> str:
        return await self._call("oracle()", ["address"])

    async def get_all_markets(self) -> list[str]:
        markets = await self._call("getAllMarkets()", ["address[]"])
        return [m.lower() for m in markets]

    async def try_collateral_factor_mantissa(self, market_address: str) -> CallResult[int]:
        """Read ``markets(address)`` and keep the collateral factor mantissa."""
        result = await self._try_call(
            "markets(address)", ["bool", "uint256", "bool"], market_address
        )
        if result.reverted:
            return CallResult.revert()
        _is_listed, collateral_factor_mantissa, _is_venus = result.value
        return CallResult.ok(int(collateral_factor_mantissa))
