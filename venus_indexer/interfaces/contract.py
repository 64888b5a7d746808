"""Contract caller protocol: read-only contract call abstraction."""
from typing import Any, Protocol, Sequence

from ..models import CallResult

BlockTag = int | str


class ContractCaller(Protocol):
    """Abstract interface for read-only (view) contract calls.

    ``call`` raises :class:`~venus_indexer.errors.ContractCallReverted` when
    the call reverts; ``try_call`` reports the revert in its result instead.
    """

    async def call(
        self,
        address: str,
        signature: str,
        output_types: Sequence[str],
        args: Sequence[Any] = (),
        block: BlockTag = "latest",
    ) -> Any: ...

    async def try_call(
        self,
        address: str,
        signature: str,
        output_types: Sequence[str],
        args: Sequence[Any] = (),
        block: BlockTag = "latest",
    ) -> CallResult[Any]: ...
