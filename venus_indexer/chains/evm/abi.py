"""Pure ABI helpers for view calls: no I/O."""
from __future__ import annotations

from typing import Any, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from web3 import Web3

from ...errors import ContractCallReverted


def function_selector(signature: str) -> bytes:
    """Return the 4-byte selector for a signature like ``balanceOf(address)``."""
    return bytes(Web3.keccak(text=signature))[:4]


def input_types(signature: str) -> list[str]:
    """Extract the argument types from a function signature.

    Examples:
        "totalSupply()" → []
        "getUnderlyingPrice(address)" → ["address"]
    """
    start = signature.find("(")
    if start < 0 or not signature.endswith(")"):
        raise ValueError(f"Malformed function signature: {signature!r}")
    inner = signature[start + 1 : -1].strip()
    return [t.strip() for t in inner.split(",")] if inner else []


def encode_call(signature: str, args: Sequence[Any] = ()) -> str:
    """Build hex calldata for ``eth_call``."""
    types = input_types(signature)
    if len(types) != len(args):
        raise ValueError(
            f"{signature} takes {len(types)} argument(s), got {len(args)}"
        )
    data = function_selector(signature)
    if types:
        data += encode(types, list(args))
    return "0x" + data.hex()


def decode_result(signature: str, output_types: Sequence[str], data: str) -> Any:
    """Decode ``eth_call`` return data.

    A single output type yields a bare value, several yield a tuple. Empty or
    short return data (e.g. a call to a non-contract address) is treated as a
    revert. Decoded addresses are lowercased.
    """
    raw = bytes.fromhex(data[2:] if data.startswith("0x") else data)
    if not raw and output_types:
        raise ContractCallReverted(signature, "empty return data")
    try:
        values = decode(list(output_types), raw)
    except DecodingError as e:
        raise ContractCallReverted(signature, str(e)) from e

    values = tuple(
        v.lower() if t == "address" else v for t, v in zip(output_types, values)
    )
    if len(values) == 1:
        return values[0]
    return values
