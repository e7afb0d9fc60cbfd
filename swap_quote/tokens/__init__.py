"""Static token catalog: descriptors, registry, and the built-in table."""
from __future__ import annotations

from .defaults import DEFAULT_TOKENS, NATIVE_TOKEN_ADDRESS, create_default_registry, parse_token_table
from .registry import DEFAULT_DECIMALS, TokenDescriptor, TokenRegistry, normalize_identifier

__all__ = [
    "DEFAULT_DECIMALS",
    "DEFAULT_TOKENS",
    "NATIVE_TOKEN_ADDRESS",
    "TokenDescriptor",
    "TokenRegistry",
    "create_default_registry",
    "normalize_identifier",
    "parse_token_table",
]
