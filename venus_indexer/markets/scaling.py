"""Pure fixed-point scaling functions, no I/O.

Contracts return unsigned integers scaled by a power of ten (mantissas). These
helpers turn them into :class:`~decimal.Decimal` values and truncate (round
toward zero) to a fixed number of decimal places.
"""
from __future__ import annotations

from decimal import ROUND_DOWN, Context, Decimal

# Wide enough for any uint256 plus 18 fractional digits
DECIMAL_CONTEXT = Context(prec=100, rounding=ROUND_DOWN)

MANTISSA_DECIMALS = 18
VTOKEN_DECIMALS = 8


def exponent_to_decimal(decimals: int) -> Decimal:
    """Return ``10^decimals`` as an exact Decimal."""
    return Decimal(1).scaleb(decimals, context=DECIMAL_CONTEXT)


def truncate(value: Decimal, decimals: int) -> Decimal:
    """Drop every digit past ``decimals`` fractional places."""
    return value.quantize(
        exponent_to_decimal(-decimals), rounding=ROUND_DOWN, context=DECIMAL_CONTEXT
    )


def scale(raw: int, decimals: int) -> Decimal:
    """Divide a raw integer by ``10^decimals``."""
    return DECIMAL_CONTEXT.divide(Decimal(raw), exponent_to_decimal(decimals))


def token_price_divisor(underlying_decimals: int) -> Decimal:
    """Divisor for oracle prices: ``10^(18 - underlying_decimals + 18)``.

    The oracle quotes every underlying as if it had 18 decimals, so the
    mantissa carries ``18 - d`` extra digits on top of the 18-digit scale.
    """
    exponent = MANTISSA_DECIMALS - underlying_decimals + MANTISSA_DECIMALS
    return exponent_to_decimal(exponent)


def oracle_token_price(raw_price: int, underlying_decimals: int) -> Decimal:
    """Price of one whole underlying token from an oracle mantissa."""
    return DECIMAL_CONTEXT.divide(
        Decimal(raw_price), token_price_divisor(underlying_decimals)
    )


def price_in_native(
    token_price: Decimal, native_price: Decimal, underlying_decimals: int
) -> Decimal | None:
    """Express ``token_price`` in native-token units.

    Returns ``None`` when the native price is zero (no oracle quote yet).
    """
    if native_price == 0:
        return None
    return truncate(
        DECIMAL_CONTEXT.divide(token_price, native_price), underlying_decimals
    )


def exchange_rate(raw: int, underlying_decimals: int) -> Decimal:
    """Underlying per vToken from ``exchangeRateStored``.

    The stored rate is a mantissa offset by the decimal difference between
    the underlying and the 8-decimal vToken:
    ``raw / 10^d * 10^8 / 10^18``, truncated to 18 places.
    """
    value = DECIMAL_CONTEXT.divide(Decimal(raw), exponent_to_decimal(underlying_decimals))
    value = DECIMAL_CONTEXT.multiply(value, exponent_to_decimal(VTOKEN_DECIMALS))
    value = DECIMAL_CONTEXT.divide(value, exponent_to_decimal(MANTISSA_DECIMALS))
    return truncate(value, MANTISSA_DECIMALS)


def mantissa(raw: int) -> Decimal:
    """An 18-decimal mantissa (rates, indexes, factors), truncated to 18 places."""
    return truncate(scale(raw, MANTISSA_DECIMALS), MANTISSA_DECIMALS)


def underlying_amount(raw: int, underlying_decimals: int) -> Decimal:
    """An amount of underlying tokens, truncated to the token's decimals."""
    return truncate(scale(raw, underlying_decimals), underlying_decimals)


def vtoken_amount(raw: int) -> Decimal:
    """An amount of vTokens (fixed 8 decimals)."""
    return scale(raw, VTOKEN_DECIMALS)
