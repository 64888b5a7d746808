"""Exceptions raised by contract calls."""
from __future__ import annotations


class ContractCallReverted(Exception):
    """A read-only contract call reverted or returned no usable data."""

    def __init__(self, call_name: str, reason: str = "") -> None:
        self.call_name = call_name
        self.reason = reason
        message = f"Contract call reverted: {call_name}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
