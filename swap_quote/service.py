"""
Quote service: the three public operations consumed by the presentation layer.

- list_supported_tokens: paged view of the static registry for one chain.
- get_price: indicative price for selling a human-readable amount.
- get_quote: executable quote (transaction target, calldata, value, gas).

None of these raise. Every failure becomes a structurally complete result with
empty numeric fields, a display-ready `error` and a `failure_kind`.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .amounts import AmountCodec
from .core.errors import AmountError
from .providers.base import (
    AmountQuery,
    ExecutableQuote,
    Failure,
    FailureKind,
    Gateway,
    PriceQuote,
    RequestSpec,
)
from .tokens.registry import TokenDescriptor, TokenRegistry

logger = logging.getLogger(__name__)

PRICE_PATH = "/swap/permit2/price"
QUOTE_PATH = "/swap/permit2/quote"
DEFAULT_LIMIT = 100

PRICE_ERROR = "Failed to fetch price"
QUOTE_ERROR = "Failed to fetch quote"

QueryLike = Union[AmountQuery, Mapping[str, Any]]


class _MalformedBody(Exception):
    pass


def _safe_get(d: Dict[str, Any], path: str, default: Any = None) -> Any:
    cur: Any = d
    for key in path.split("."):
        if not isinstance(cur, dict) or key not in cur:
            return default
        cur = cur[key]
    return cur


def _as_text(x: Any, field_name: str) -> str:
    """Scalar JSON value -> string, unchanged where it already is one."""
    if x is None:
        return ""
    if isinstance(x, str):
        return x
    if isinstance(x, bool):
        raise _MalformedBody(f"{field_name}: unexpected boolean")
    if isinstance(x, int):
        return str(x)
    if isinstance(x, float):
        return format(Decimal(repr(x)), "f")
    raise _MalformedBody(f"{field_name}: unexpected {type(x).__name__}")


def _first(body: Dict[str, Any], *paths: str) -> str:
    """First non-empty value among dotted paths (v2 nests tx fields under `transaction`)."""
    for path in paths:
        text = _as_text(_safe_get(body, path), path)
        if text:
            return text
    return ""


def _paging(value: Any, default: int) -> int:
    if value is None:
        return default
    try:
        n = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return max(n, 0)


class QuoteService:
    """
    Orchestrates AmountCodec and a Gateway.

    Stateless between calls; safe to share across threads. Results reflect
    live market state, so repeated calls may differ.
    """

    def __init__(
        self,
        registry: TokenRegistry,
        gateway: Gateway,
        price_path: str = PRICE_PATH,
        quote_path: str = QUOTE_PATH,
        default_limit: int = DEFAULT_LIMIT,
    ) -> None:
        self._registry = registry
        self._codec = AmountCodec(registry)
        self._gateway = gateway
        self._price_path = price_path
        self._quote_path = quote_path
        self._default_limit = default_limit

    @property
    def codec(self) -> AmountCodec:
        return self._codec

    # ------------------------------------------------------------------
    # 1. Token list
    # ------------------------------------------------------------------

    def list_supported_tokens(
        self,
        chain_id: Any,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[TokenDescriptor]:
        """Registry-order slice [offset, offset + limit) for the chain; [] for unknown chains."""
        tokens = self._registry.tokens_for_chain(chain_id)
        if not tokens:
            return []
        start = _paging(offset, 0)
        count = _paging(limit, self._default_limit)
        return list(tokens[start:start + count])

    # ------------------------------------------------------------------
    # 2. Indicative price
    # ------------------------------------------------------------------

    def get_price(self, query: QueryLike) -> PriceQuote:
        prepared = self._prepare(query)
        if isinstance(prepared, PriceQuote):
            return prepared
        q, params = prepared

        result = self._dispatch(self._price_path, params, q.api_key)
        if isinstance(result, Failure):
            return _price_failure(q.buy_token, q.sell_token, result, PRICE_ERROR)

        body = result.body
        try:
            return PriceQuote(
                price=_first(body, "price"),
                buy_amount=_first(body, "buyAmount"),
                sell_amount=_first(body, "sellAmount"),
                estimated_gas=_first(body, "estimatedGas", "gas"),
                buy_token=_first(body, "buyToken") or q.buy_token,
                sell_token=_first(body, "sellToken") or q.sell_token,
            )
        except _MalformedBody as exc:
            logger.warning("Malformed price response: %s", exc)
            return _price_failure(
                q.buy_token, q.sell_token,
                Failure(FailureKind.MALFORMED_RESPONSE, str(exc)), PRICE_ERROR,
            )

    # ------------------------------------------------------------------
    # 3. Executable quote
    # ------------------------------------------------------------------

    def get_quote(self, query: QueryLike) -> ExecutableQuote:
        prepared = self._prepare(query, executable=True)
        if isinstance(prepared, PriceQuote):
            return prepared  # type: ignore[return-value]
        q, params = prepared
        if q.taker_address:
            params["takerAddress"] = q.taker_address

        result = self._dispatch(self._quote_path, params, q.api_key)
        if isinstance(result, Failure):
            return _quote_failure(q.buy_token, q.sell_token, result, QUOTE_ERROR)

        body = result.body
        try:
            return ExecutableQuote(
                price=_first(body, "price"),
                buy_amount=_first(body, "buyAmount"),
                sell_amount=_first(body, "sellAmount"),
                estimated_gas=_first(body, "estimatedGas", "gas", "transaction.gas"),
                buy_token=_first(body, "buyToken") or q.buy_token,
                sell_token=_first(body, "sellToken") or q.sell_token,
                to=_first(body, "to", "transaction.to"),
                data=_first(body, "data", "transaction.data"),
                value=_first(body, "value", "transaction.value"),
                gas=_first(body, "gas", "transaction.gas"),
            )
        except _MalformedBody as exc:
            logger.warning("Malformed quote response: %s", exc)
            return _quote_failure(
                q.buy_token, q.sell_token,
                Failure(FailureKind.MALFORMED_RESPONSE, str(exc)), QUOTE_ERROR,
            )

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _prepare(
        self, query: QueryLike, executable: bool = False
    ) -> Union[PriceQuote, Tuple[AmountQuery, Dict[str, Any]]]:
        """Validate the query and scale the sell amount, or return a ready-made failure quote."""
        default_error = QUOTE_ERROR if executable else PRICE_ERROR
        build_failure = _quote_failure if executable else _price_failure
        try:
            q = query if isinstance(query, AmountQuery) else AmountQuery.from_mapping(query)
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            logger.info("Rejected incomplete query: %s", exc)
            buy, sell = _tokens_of(query)
            return build_failure(
                buy, sell, Failure(FailureKind.INVALID_REQUEST, f"Invalid query: {exc}"), default_error,
            )
        try:
            sell_amount = self._codec.scale_up(q.sell_amount, q.sell_token)
        except AmountError as exc:
            return build_failure(
                q.buy_token, q.sell_token, Failure(FailureKind.INVALID_REQUEST, str(exc)), default_error,
            )
        params: Dict[str, Any] = {
            "chainId": q.chain_id,
            "buyToken": q.buy_token,
            "sellToken": q.sell_token,
            "sellAmount": sell_amount,
        }
        return q, params

    def _dispatch(self, path: str, params: Dict[str, Any], api_key: str):
        spec = RequestSpec(path=path, query=params, method="GET", api_key=api_key)
        try:
            return self._gateway.request(spec)
        except Exception as exc:
            # injected gateways are supposed to return Failure; treat a raise the same way
            logger.exception("Gateway raised for %s", path)
            return Failure(FailureKind.TRANSPORT_UNAVAILABLE, f"{type(exc).__name__}: {exc}")


def _tokens_of(query: Any) -> Tuple[str, str]:
    if isinstance(query, Mapping):
        buy = query.get("buyToken", query.get("buy_token", ""))
        sell = query.get("sellToken", query.get("sell_token", ""))
        return str(buy or ""), str(sell or "")
    return "", ""


def _error_text(failure: Failure, default: str) -> str:
    """Service messages pass through verbatim; everything else gets the generic text."""
    if failure.kind in (FailureKind.SERVICE_ERROR, FailureKind.INVALID_REQUEST) and failure.message:
        return failure.message
    return default


def _price_failure(buy_token: str, sell_token: str, failure: Failure, default: str) -> PriceQuote:
    return PriceQuote(
        price="",
        buy_amount="",
        sell_amount="",
        estimated_gas="",
        buy_token=buy_token,
        sell_token=sell_token,
        error=_error_text(failure, default),
        failure_kind=failure.kind,
    )


def _quote_failure(buy_token: str, sell_token: str, failure: Failure, default: str) -> ExecutableQuote:
    return ExecutableQuote(
        price="",
        buy_amount="",
        sell_amount="",
        estimated_gas="",
        buy_token=buy_token,
        sell_token=sell_token,
        error=_error_text(failure, default),
        failure_kind=failure.kind,
    )


def create_quote_service(
    registry: Optional[TokenRegistry] = None,
    gateway: Optional[Gateway] = None,
) -> QuoteService:
    """Wire a QuoteService from config.yaml (registry and gateway can be injected)."""
    from . import config
    from .providers.defaults import create_gateway
    from .tokens.defaults import create_default_registry

    return QuoteService(
        registry=registry if registry is not None else create_default_registry(),
        gateway=gateway if gateway is not None else create_gateway(),
        price_path=config.price_path(),
        quote_path=config.quote_path(),
        default_limit=config.default_limit(),
    )
