"""
Stable facade: exception types only.
Do not add exports without updating __all__.
"""

from __future__ import annotations

from .errors import AmountError, ConfigError, ParseError, SwapQuoteError

# Do not add exports without updating __all__.
__all__ = ["AmountError", "ConfigError", "ParseError", "SwapQuoteError"]
