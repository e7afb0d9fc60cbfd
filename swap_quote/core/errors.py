"""
Shared exception types for swap_quote.
Raised by the codec and config layers only; public quote operations translate
them into result values and never let them escape.
"""

from __future__ import annotations


class SwapQuoteError(Exception):
    """Base exception for swap_quote; catch this for any package-raised error."""

    pass


class AmountError(SwapQuoteError, ValueError):
    """A human-readable amount cannot be scaled (negative, NaN, unparseable)."""


class ParseError(SwapQuoteError, ValueError):
    """A base-unit amount is not a valid base-10 integer."""


class ConfigError(SwapQuoteError):
    """Token table or other configuration is structurally invalid."""


__all__ = ["AmountError", "ConfigError", "ParseError", "SwapQuoteError"]
