"""Shared plumbing for contract bindings."""
from __future__ import annotations

from typing import Any, Sequence

from ..interfaces.contract import BlockTag, ContractCaller
from ..models import CallResult


class ContractBinding:
    """A contract address bound to a caller, optionally pinned to a block."""

    def __init__(
        self, caller: ContractCaller, address: str, block: BlockTag = "latest"
    ) -> None:
        self._caller = caller
        self.address = address.lower()
        self.block = block

    async def _call(
        self, signature: str, output_types: Sequence[str], *args: Any
    ) -> Any:
        return await self._caller.call(
            self.address, signature, output_types, args, self.block
        )

    async def _try_call(
        self, signature: str, output_types: Sequence[str], *args: Any
    ) -> CallResult[Any]:
        return await self._caller.try_call(
            self.address, signature, output_types, args, self.block
        )
