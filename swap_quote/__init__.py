"""
Top-level public API surface. Stable facades only.
Does not import cli or relay (relay pulls in FastAPI).
"""

from __future__ import annotations

from ._version import __version__
from .amounts import AmountCodec, format_price, format_token_amount, from_base_units, to_base_units
from .core.errors import AmountError, ConfigError, ParseError, SwapQuoteError
from .providers.base import AmountQuery, ExecutableQuote, FailureKind, PriceQuote
from .providers.gateway import GatewayClient
from .service import QuoteService, create_quote_service
from .tokens.registry import DEFAULT_DECIMALS, TokenDescriptor, TokenRegistry

# Do not add exports without updating __all__.
__all__ = [
    "__version__",
    "AmountCodec",
    "AmountError",
    "AmountQuery",
    "ConfigError",
    "DEFAULT_DECIMALS",
    "ExecutableQuote",
    "FailureKind",
    "GatewayClient",
    "ParseError",
    "PriceQuote",
    "QuoteService",
    "SwapQuoteError",
    "TokenDescriptor",
    "TokenRegistry",
    "create_quote_service",
    "format_price",
    "format_token_amount",
    "from_base_units",
    "to_base_units",
]
