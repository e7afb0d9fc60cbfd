"""
Token registry: static catalog of supported tokens per chain.

Built once at startup from a token table and immutable afterwards. There is no
live on-chain decimals lookup; identifiers that are not in the table resolve to
DEFAULT_DECIMALS instead of failing.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_DECIMALS = 18

_EVM_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


@dataclass(frozen=True)
class TokenDescriptor:
    """Immutable token metadata: identifier, display fields, decimal precision."""

    address: str
    symbol: str
    name: str
    decimals: int
    logo_uri: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "address": self.address,
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
        }
        if self.logo_uri:
            out["logoURI"] = self.logo_uri
        return out


def normalize_identifier(identifier: str) -> str:
    """
    Lookup key for a token identifier.

    EVM hex addresses are case-insensitive (mixed case is only a checksum), so
    they are lowercased. Anything else (e.g. base58 mints) is kept verbatim.
    """
    ident = identifier.strip()
    if _EVM_ADDRESS_RE.match(ident):
        return ident.lower()
    return ident


class TokenRegistry:
    """
    Read-only mapping of chain id -> ordered tokens, plus identifier -> decimals.

    Usage:
        registry = TokenRegistry({1: [TokenDescriptor(...), ...]})
        registry.decimals_of("0xA0b8...eb48")   # 6
        registry.tokens_for_chain(1)            # registry order
    """

    def __init__(
        self,
        tokens_by_chain: Mapping[int, Iterable[TokenDescriptor]],
        default_decimals: int = DEFAULT_DECIMALS,
    ) -> None:
        chains: Dict[int, Tuple[TokenDescriptor, ...]] = {}
        by_id: Dict[str, TokenDescriptor] = {}
        for chain_id, tokens in tokens_by_chain.items():
            ordered = tuple(tokens)
            chains[int(chain_id)] = ordered
            for token in ordered:
                key = normalize_identifier(token.address)
                existing = by_id.get(key)
                if existing is not None and existing.decimals != token.decimals:
                    logger.warning(
                        "Token %s registered with conflicting decimals (%d vs %d); keeping first",
                        token.address, existing.decimals, token.decimals,
                    )
                    continue
                by_id.setdefault(key, token)
        self._chains: Mapping[int, Tuple[TokenDescriptor, ...]] = MappingProxyType(chains)
        self._by_id: Mapping[str, TokenDescriptor] = MappingProxyType(by_id)
        self._default_decimals = default_decimals

    @property
    def chain_ids(self) -> List[int]:
        return list(self._chains)

    @property
    def default_decimals(self) -> int:
        return self._default_decimals

    def get(self, identifier: Any) -> Optional[TokenDescriptor]:
        if not isinstance(identifier, str) or not identifier:
            return None
        return self._by_id.get(normalize_identifier(identifier))

    def decimals_of(self, identifier: Any) -> int:
        """Registered precision for the identifier, else the default (18). Never raises."""
        token = self.get(identifier)
        return token.decimals if token is not None else self._default_decimals

    def tokens_for_chain(self, chain_id: Any) -> Tuple[TokenDescriptor, ...]:
        try:
            key = int(chain_id)
        except (TypeError, ValueError, OverflowError):
            return ()
        return self._chains.get(key, ())

    def __contains__(self, identifier: object) -> bool:
        return self.get(identifier) is not None

    def __len__(self) -> int:
        return len(self._by_id)
