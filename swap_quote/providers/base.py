"""
Gateway interfaces and data contracts.

A gateway dispatches one request to the external pricing service and returns
a GatewayResult: either Ok(body) or Failure(kind, message). It never raises.

Quotes are returned via frozen dataclasses that are always structurally
complete: on failure the numeric fields are empty strings and `error` /
`failure_kind` say why.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Protocol, Union, runtime_checkable

_MISSING = object()


class FailureKind(enum.Enum):
    """Why a gateway call or quote produced no data."""

    TRANSPORT_UNAVAILABLE = "TRANSPORT_UNAVAILABLE"
    SERVICE_ERROR = "SERVICE_ERROR"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    INVALID_REQUEST = "INVALID_REQUEST"


@dataclass(frozen=True)
class Ok:
    """Successful gateway call: parsed JSON object from the service."""

    body: Dict[str, Any]
    status_code: int = 200

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Failed gateway call. `message` is the service's own text for SERVICE_ERROR."""

    kind: FailureKind
    message: str

    @property
    def ok(self) -> bool:
        return False

    @property
    def is_unavailable(self) -> bool:
        """Transport and malformed-body failures both mean 'service unavailable'."""
        return self.kind in (FailureKind.TRANSPORT_UNAVAILABLE, FailureKind.MALFORMED_RESPONSE)


GatewayResult = Union[Ok, Failure]


@dataclass(frozen=True)
class RequestSpec:
    """One outbound call: path, query parameters, method, and the caller's credential."""

    path: str
    query: Mapping[str, Any] = field(default_factory=dict)
    method: str = "GET"
    api_key: str = field(default="", repr=False)
    body: Optional[str] = None


@dataclass(frozen=True)
class RelayEnvelope:
    """Exactly what the relay receives; it forwards headers and body verbatim to origin."""

    protocol: str
    origin: str
    path: str
    method: str
    headers: Dict[str, str] = field(repr=False)
    body: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "protocol": self.protocol,
            "origin": self.origin,
            "path": self.path,
            "method": self.method,
            "headers": dict(self.headers),
        }
        if self.body is not None:
            out["body"] = self.body
        return out


@runtime_checkable
class Gateway(Protocol):
    """Protocol for anything QuoteService can dispatch through."""

    def request(self, spec: RequestSpec) -> GatewayResult:
        """Dispatch one request. Must not raise."""
        ...


@dataclass(frozen=True)
class AmountQuery:
    """Inputs for a price or quote call. Tokens are referenced by identifier only."""

    chain_id: int
    buy_token: str
    sell_token: str
    sell_amount: Union[str, int, float, Decimal]
    api_key: str = field(default="", repr=False)
    taker_address: Optional[str] = None

    @classmethod
    def from_mapping(cls, params: Mapping[str, Any]) -> "AmountQuery":
        """Build from the camelCase params used by the presentation layer (snake_case also accepted)."""

        def pick(camel: str, snake: str, default: Any = _MISSING) -> Any:
            if camel in params:
                return params[camel]
            if snake in params:
                return params[snake]
            if default is _MISSING:
                raise KeyError(camel)
            return default

        return cls(
            chain_id=int(pick("chainId", "chain_id")),
            buy_token=str(pick("buyToken", "buy_token")),
            sell_token=str(pick("sellToken", "sell_token")),
            sell_amount=pick("sellAmount", "sell_amount"),
            api_key=str(pick("apiKey", "api_key", "") or ""),
            taker_address=pick("takerAddress", "taker_address", None) or None,
        )


@dataclass(frozen=True)
class PriceQuote:
    """Indicative price. Amounts are base-unit strings, passed through from the service."""

    price: str
    buy_amount: str
    sell_amount: str
    estimated_gas: str
    buy_token: str
    sell_token: str
    error: Optional[str] = None
    failure_kind: Optional[FailureKind] = None

    def is_valid(self) -> bool:
        return self.error is None and bool(self.buy_amount) and bool(self.sell_amount)

    def to_dict(self) -> Dict[str, Any]:
        return _quote_dict(self)


@dataclass(frozen=True)
class ExecutableQuote(PriceQuote):
    """Executable quote: price fields plus the transaction to submit."""

    to: str = ""
    data: str = ""
    value: str = ""
    gas: str = ""

    def is_valid(self) -> bool:
        return super().is_valid() and bool(self.to) and bool(self.data)


_CAMEL = {
    "buy_amount": "buyAmount",
    "sell_amount": "sellAmount",
    "estimated_gas": "estimatedGas",
    "buy_token": "buyToken",
    "sell_token": "sellToken",
    "failure_kind": "failureKind",
}


def _quote_dict(quote: PriceQuote) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, val in asdict(quote).items():
        if key in ("error", "failure_kind") and val is None:
            continue
        if isinstance(val, FailureKind):
            val = val.value
        out[_CAMEL.get(key, key)] = val
    return out
