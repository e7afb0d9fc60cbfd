"""
Default token table and registry construction.

The built-in table covers Ethereum mainnet. A `tokens:` section in config.yaml
replaces it entirely:

    tokens:
      1:
        - {address: "0xA0b86991c6218b36c1d19d4a2e9eb0ce3606eb48", symbol: USDC, name: USD Coin, decimals: 6}
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from ..core.errors import ConfigError
from .registry import TokenDescriptor, TokenRegistry

logger = logging.getLogger(__name__)

# Native ETH sentinel used by 0x and most aggregators
NATIVE_TOKEN_ADDRESS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"

DEFAULT_TOKENS: Dict[int, List[TokenDescriptor]] = {
    1: [
        TokenDescriptor(NATIVE_TOKEN_ADDRESS, "ETH", "Ethereum", 18),
        TokenDescriptor("0xA0b86991c6218b36c1d19d4a2e9eb0ce3606eb48", "USDC", "USD Coin", 6),
        TokenDescriptor("0xdAC17F958D2ee523a2206206994597C13D831ec7", "USDT", "Tether", 6),
        TokenDescriptor("0x6B175474E89094C44Da98b954EedeAC495271d0F", "DAI", "Dai", 18),
        TokenDescriptor("0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599", "WBTC", "Wrapped Bitcoin", 8),
    ],
}


def _parse_entry(chain_id: int, entry: Any) -> TokenDescriptor:
    if not isinstance(entry, Mapping):
        raise ConfigError(f"tokens[{chain_id}]: expected a mapping, got {type(entry).__name__}")
    address = entry.get("address")
    if not isinstance(address, str) or not address.strip():
        raise ConfigError(f"tokens[{chain_id}]: entry missing address")
    decimals = entry.get("decimals")
    if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
        raise ConfigError(
            f"tokens[{chain_id}] {address}: decimals must be a non-negative integer, got {decimals!r}"
        )
    logo = entry.get("logoURI") or entry.get("logo_uri")
    return TokenDescriptor(
        address=address.strip(),
        symbol=str(entry.get("symbol") or ""),
        name=str(entry.get("name") or ""),
        decimals=decimals,
        logo_uri=str(logo) if logo else None,
    )


def parse_token_table(raw: Any) -> Dict[int, List[TokenDescriptor]]:
    """Validate a `tokens:` config section. Raises ConfigError on bad structure."""
    if not isinstance(raw, Mapping):
        raise ConfigError(f"tokens: expected a mapping of chain id -> list, got {type(raw).__name__}")
    table: Dict[int, List[TokenDescriptor]] = {}
    for chain_key, entries in raw.items():
        try:
            chain_id = int(chain_key)
        except (TypeError, ValueError, OverflowError):
            raise ConfigError(f"tokens: chain id {chain_key!r} is not an integer") from None
        if not isinstance(entries, list):
            raise ConfigError(f"tokens[{chain_id}]: expected a list of tokens")
        table[chain_id] = [_parse_entry(chain_id, e) for e in entries]
    return table


def load_token_config() -> Dict[int, List[TokenDescriptor]]:
    """Token table from config.yaml, or DEFAULT_TOKENS when none is configured."""
    from swap_quote.config import token_table

    raw = token_table()
    if raw is None:
        return DEFAULT_TOKENS
    table = parse_token_table(raw)
    logger.debug("Loaded token table from config: %d chain(s)", len(table))
    return table


def create_default_registry(
    table: Optional[Mapping[int, List[TokenDescriptor]]] = None,
) -> TokenRegistry:
    """Build the process-wide registry once; callers inject it where needed."""
    return TokenRegistry(table if table is not None else load_token_config())
