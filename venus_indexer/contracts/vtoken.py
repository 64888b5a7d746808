"""vToken (market contract) binding."""
from __future__ import annotations

from ..models import CallResult
from .base import ContractBinding


class VToken(ContractBinding):
    """Read accessors of a Venus vToken market.

    ``try_*`` accessors return a :class:`CallResult` instead of raising on a
    revert.
    """

    async def underlying(self) -> str:
        return await self._call("underlying()", ["address"])

    async def name(self) -> str:
        return await self._call("name()", ["string"])

    async def symbol(self) -> str:
        return await self._call("symbol()", ["string"])

    async def accrual_block_number(self) -> int:
        return int(await self._call("accrualBlockNumber()", ["uint256"]))

    async def try_interest_rate_model(self) -> CallResult[str]:
        return await self._try_call("interestRateModel()", ["address"])

    async def try_reserve_factor_mantissa(self) -> CallResult[int]:
        return await self._try_call("reserveFactorMantissa()", ["uint256"])

    async def try_uint(self, accessor: str) -> CallResult[int]:
        """Call a no-argument ``uint256`` accessor such as ``totalSupply``."""
        return await self._try_call(f"{accessor}()", ["uint256"])

    async def try_string(self, accessor: str) -> CallResult[str]:
        """Call a no-argument ``string`` accessor such as ``name``."""
        return await self._try_call(f"{accessor}()", ["string"])
