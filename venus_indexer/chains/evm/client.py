"""EVM JSON-RPC client with fallback support."""
import logging
import ssl
from typing import Any, Sequence

import aiohttp
import certifi

from ...config import ChainConfig
from ...errors import ContractCallReverted
from ...models import CallResult
from . import abi

logger = logging.getLogger(__name__)

# JSON-RPC error code geth/erigon use for "execution reverted"
_REVERT_ERROR_CODE = 3


def _is_revert(error: Any) -> bool:
    if not isinstance(error, dict):
        return False
    if error.get("code") == _REVERT_ERROR_CODE:
        return True
    return "revert" in str(error.get("message", "")).lower()


def _block_param(block: int | str) -> str:
    return hex(block) if isinstance(block, int) else block


class EvmClient:
    """EVM blockchain RPC client with automatic endpoint fallback."""

    def __init__(self, config: ChainConfig) -> None:
        self.endpoints = list(config.rpc_endpoints)
        self.timeout = config.rpc_timeout
        self.current_rpc_index = 0

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make RPC call with fallback to alternative endpoints.

        A revert reported by a node is deterministic, so it is raised as
        :class:`ContractCallReverted` without trying the remaining endpoints.
        """
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        ssl_context = ssl.create_default_context(cafile=certifi.where())

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            rpc_index = (self.current_rpc_index + attempt) % len(self.endpoints)
            rpc_url = self.endpoints[rpc_index]

            try:
                connector = aiohttp.TCPConnector(ssl=ssl_context)
                async with aiohttp.ClientSession(connector=connector) as session:
                    async with session.post(
                        rpc_url,
                        json=payload,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                    ) as response:
                        result = await response.json()
                        error = result.get("error")
                        if error is not None:
                            if _is_revert(error):
                                raise ContractCallReverted(
                                    method, str(error.get("message", ""))
                                )
                            raise RuntimeError(f"RPC Error: {error}")

                        if rpc_index != self.current_rpc_index:
                            logger.info("Switched to RPC endpoint: %s", rpc_url)
                            self.current_rpc_index = rpc_index

                        return result.get("result")
            except ContractCallReverted:
                raise
            except Exception as e:
                last_error = e
                logger.warning("RPC endpoint %s failed: %s", rpc_url, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next endpoint...")
                continue

        raise RuntimeError(f"All RPC endpoints failed. Last error: {last_error}")

    async def block_number(self) -> int:
        """Get the latest block number."""
        return int(await self.rpc_call("eth_blockNumber", []), 16)

    async def get_block(self, block: int | str = "latest") -> dict[str, Any]:
        """Get a block header (without transaction bodies)."""
        result = await self.rpc_call(
            "eth_getBlockByNumber", [_block_param(block), False]
        )
        if not result:
            raise RuntimeError(f"Block not found: {block}")
        return result

    async def eth_call(self, to: str, data: str, block: int | str = "latest") -> str:
        """Execute a read-only call and return the raw hex result."""
        return await self.rpc_call(
            "eth_call", [{"to": to, "data": data}, _block_param(block)]
        )

    async def call(
        self,
        address: str,
        signature: str,
        output_types: Sequence[str],
        args: Sequence[Any] = (),
        block: int | str = "latest",
    ) -> Any:
        """Call a view function and decode its result."""
        data = abi.encode_call(signature, args)
        try:
            raw = await self.eth_call(address, data, block)
        except ContractCallReverted as e:
            raise ContractCallReverted(signature, e.reason) from e
        return abi.decode_result(signature, output_types, raw or "0x")

    async def try_call(
        self,
        address: str,
        signature: str,
        output_types: Sequence[str],
        args: Sequence[Any] = (),
        block: int | str = "latest",
    ) -> CallResult[Any]:
        """Like :meth:`call`, but report a revert instead of raising it."""
        try:
            value = await self.call(address, signature, output_types, args, block)
        except ContractCallReverted as e:
            logger.debug("%s on %s reverted: %s", signature, address, e.reason)
            return CallResult.revert()
        return CallResult.ok(value)
