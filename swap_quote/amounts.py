"""
Exact conversion between human-readable token amounts and integer base units.

All arithmetic is done with decimal.Decimal in a local context sized to the
operand, never with binary floats. Floats are accepted only as a convenience
and go through their shortest repr, so 0.1 is Decimal("0.1").

Rounding policy (both directions): ROUND_HALF_UP at the target precision.
"""
from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, Overflow, localcontext
from typing import Any, Optional, Union

from .core.errors import AmountError, ParseError
from .tokens.registry import TokenRegistry

HumanAmount = Union[str, int, float, Decimal]

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_MIN_PRECISION = 28


def _to_decimal(amount: Any) -> Decimal:
    if isinstance(amount, bool):
        raise AmountError(f"Amount must be numeric, got {amount!r}")
    if isinstance(amount, Decimal):
        value = amount
    elif isinstance(amount, int):
        value = Decimal(amount)
    elif isinstance(amount, float):
        value = Decimal(repr(amount))
    elif isinstance(amount, str):
        try:
            value = Decimal(amount.strip())
        except InvalidOperation:
            raise AmountError(f"Amount is not a decimal number: {amount!r}") from None
    else:
        raise AmountError(f"Unsupported amount type: {type(amount).__name__}")
    if not value.is_finite():
        raise AmountError(f"Amount must be finite, got {amount!r}")
    if value < 0:
        raise AmountError(f"Amount must be non-negative, got {amount!r}")
    return value


def _canonical(value: Decimal) -> str:
    """Plain decimal string: no exponent, no trailing fractional zeros, '0' for zero."""
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


def to_base_units(amount: HumanAmount, decimals: int) -> str:
    """
    Scale a human amount by 10**decimals and render it as an integer string.

    >>> to_base_units("0.1", 18)
    '100000000000000000'
    """
    if decimals < 0:
        raise AmountError(f"decimals must be non-negative, got {decimals}")
    value = _to_decimal(amount)
    digits = len(value.as_tuple().digits)
    with localcontext() as ctx:
        ctx.prec = max(_MIN_PRECISION, digits + decimals + 2)
        ctx.rounding = ROUND_HALF_UP
        try:
            scaled = value.scaleb(decimals).to_integral_value(rounding=ROUND_HALF_UP)
        except (Overflow, InvalidOperation):
            # exponent past the context Emax
            raise AmountError(f"Amount is too large to scale: {amount!r}") from None
    if scaled == 0:
        return "0"
    return format(scaled, "f")


def _parse_base_units(raw: Any) -> int:
    if isinstance(raw, bool):
        raise ParseError(f"Base-unit amount must be an integer, got {raw!r}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if _INTEGER_RE.match(text):
            try:
                return int(text)
            except ValueError:
                # int() digit limit on very long strings
                raise ParseError(f"Base-unit amount too long ({len(text)} digits)") from None
    raise ParseError(f"Base-unit amount is not a valid integer: {raw!r}")


def from_base_units(raw: Union[str, int], decimals: int, places: Optional[int] = None) -> str:
    """
    Inverse of to_base_units. Raises ParseError for non-integer input.
    With `places`, the result is rounded (ROUND_HALF_UP) to that many fractional digits.
    """
    if decimals < 0:
        raise AmountError(f"decimals must be non-negative, got {decimals}")
    units = _parse_base_units(raw)
    with localcontext() as ctx:
        ctx.prec = max(_MIN_PRECISION, len(str(abs(units))) + decimals + (places or 0) + 2)
        ctx.rounding = ROUND_HALF_UP
        value = Decimal(units).scaleb(-decimals)
        if places is not None:
            value = value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
        return _canonical(value)


def _display(value: Decimal, max_fraction_digits: int, shift: int = 0) -> str:
    with localcontext() as ctx:
        # quantize needs room for every integer digit of the shifted value
        ctx.prec = max(
            _MIN_PRECISION,
            len(value.as_tuple().digits) + abs(shift) + max_fraction_digits + 2,
            value.adjusted() + shift + max_fraction_digits + 2,
        )
        rounded = value.scaleb(shift).quantize(Decimal(1).scaleb(-max_fraction_digits), rounding=ROUND_HALF_UP)
        if rounded == 0:
            return "0"
        return format(rounded.normalize(), ",f")


def _loose_decimal(x: Any) -> Optional[Decimal]:
    if x is None or isinstance(x, bool) or x == "":
        return None
    try:
        value = Decimal(repr(x)) if isinstance(x, float) else Decimal(str(x).strip())
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def format_token_amount(raw: Any, decimals: int, max_fraction_digits: int = 6) -> str:
    """Grouped display string for a base-unit amount ('1,234.5'); '0' for empty or non-numeric input."""
    value = _loose_decimal(raw)
    if value is None:
        return "0"
    return _display(value, max_fraction_digits, shift=-decimals)


def format_price(price: Any, max_fraction_digits: int = 6) -> str:
    value = _loose_decimal(price)
    if value is None:
        return "0"
    return _display(value, max_fraction_digits)


class AmountCodec:
    """Token-aware scaling: looks up decimals in the registry, then converts exactly."""

    def __init__(self, registry: TokenRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> TokenRegistry:
        return self._registry

    def decimals_of(self, identifier: str) -> int:
        return self._registry.decimals_of(identifier)

    def scale_up(self, human_amount: HumanAmount, identifier: str) -> str:
        """Human amount -> base-unit integer string (e.g. 1 USDC -> '1000000')."""
        return to_base_units(human_amount, self._registry.decimals_of(identifier))

    def scale_down(self, base_units: Union[str, int], identifier: str, places: Optional[int] = None) -> str:
        """Base-unit integer string -> canonical human decimal string. Raises ParseError."""
        return from_base_units(base_units, self._registry.decimals_of(identifier), places=places)

    def format_amount(self, base_units: Any, identifier: str, max_fraction_digits: int = 6) -> str:
        return format_token_amount(base_units, self._registry.decimals_of(identifier), max_fraction_digits)
