"""BEP20 token binding."""
from __future__ import annotations

from .base import ContractBinding


class BEP20(ContractBinding):
    async def decimals(self) -> int:
        return int(await self._call("decimals()", ["uint8"]))

    async def name(self) -> str:
        return await self._call("name()", ["string"])

    async def symbol(self) -> str:
        return await self._call("symbol()", ["string"])
