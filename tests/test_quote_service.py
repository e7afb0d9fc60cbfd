"""
QuoteService tests: token paging, price and quote assembly, and the never-raise failure contract.

Fake gateways from tests/fakes; one end-to-end case runs through GatewayClient with requests.post patched.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
import requests

from swap_quote.providers.base import AmountQuery, ExecutableQuote, FailureKind, PriceQuote
from swap_quote.providers.gateway import GatewayClient
from swap_quote.service import PRICE_ERROR, QUOTE_ERROR, QuoteService
from swap_quote.tokens.defaults import DEFAULT_TOKENS, create_default_registry
from tests.fakes import (
    DAI,
    PRICE_BODY,
    QUOTE_BODY,
    QUOTE_BODY_V2,
    TAKER,
    USDC,
    USDT,
    FakeGateway,
    FakeGatewayFailure,
    FakeGatewayRaises,
)


def _service(gateway, **kwargs):
    return QuoteService(create_default_registry(DEFAULT_TOKENS), gateway, **kwargs)


def _query(amount="1", sell=USDT, buy=USDC, **extra):
    return AmountQuery(chain_id=1, buy_token=buy, sell_token=sell, sell_amount=amount, api_key="k", **extra)


def _assert_empty_numeric(quote):
    assert quote.price == ""
    assert quote.buy_amount == ""
    assert quote.sell_amount == ""
    assert quote.estimated_gas == ""
    assert quote.error
    assert not quote.is_valid()


class TestListSupportedTokens:
    def test_defaults_return_all(self):
        tokens = _service(FakeGateway()).list_supported_tokens(1)
        assert [t.symbol for t in tokens] == ["ETH", "USDC", "USDT", "DAI", "WBTC"]

    def test_limit_and_offset(self):
        tokens = _service(FakeGateway()).list_supported_tokens(1, limit=2, offset=1)
        assert [t.symbol for t in tokens] == ["USDC", "USDT"]

    @pytest.mark.parametrize("chain_id", [999, "nope", None, float("inf")])
    def test_unknown_chain_empty(self, chain_id):
        assert _service(FakeGateway()).list_supported_tokens(chain_id) == []

    def test_offset_past_end_empty(self):
        assert _service(FakeGateway()).list_supported_tokens(1, offset=10) == []

    def test_zero_limit_empty(self):
        assert _service(FakeGateway()).list_supported_tokens(1, limit=0) == []

    def test_negative_values_clamp_to_zero(self):
        svc = _service(FakeGateway())
        assert len(svc.list_supported_tokens(1, offset=-3)) == 5
        assert svc.list_supported_tokens(1, limit=-1) == []

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), "ten"])
    def test_unusable_paging_falls_back_to_defaults(self, value):
        svc = _service(FakeGateway())
        assert len(svc.list_supported_tokens(1, limit=value)) == 5
        assert len(svc.list_supported_tokens(1, offset=value)) == 5

    def test_default_limit_applies(self):
        tokens = _service(FakeGateway(), default_limit=3).list_supported_tokens(1)
        assert len(tokens) == 3

    def test_never_touches_gateway(self):
        gw = FakeGateway()
        _service(gw).list_supported_tokens(1)
        assert gw.call_count == 0


class TestGetPrice:
    def test_success_passes_body_through(self):
        gw = FakeGateway(PRICE_BODY)
        quote = _service(gw).get_price(_query())
        assert isinstance(quote, PriceQuote)
        assert quote.error is None
        assert quote.failure_kind is None
        assert quote.price == "0.999871"
        assert quote.buy_amount == "999871"
        assert quote.sell_amount == "1000000"
        assert quote.estimated_gas == "136000"
        assert quote.is_valid()

    def test_request_shape(self):
        gw = FakeGateway()
        _service(gw).get_price(_query("1"))
        spec = gw.requests[-1]
        assert spec.path == "/swap/permit2/price"
        assert spec.method == "GET"
        assert spec.api_key == "k"
        assert gw.last_query == {"chainId": 1, "buyToken": USDC, "sellToken": USDT, "sellAmount": "1000000"}

    def test_sell_amount_scaled_exactly(self):
        gw = FakeGateway()
        _service(gw).get_price(_query(0.1, sell=DAI))
        assert gw.last_query["sellAmount"] == "100000000000000000"

    def test_unknown_sell_token_scaled_with_18(self):
        gw = FakeGateway()
        _service(gw).get_price(_query("2", sell="0x1111111111111111111111111111111111111111"))
        assert gw.last_query["sellAmount"] == "2000000000000000000"

    def test_custom_paths(self):
        gw = FakeGateway()
        _service(gw, price_path="/swap/v1/price").get_price(_query())
        assert gw.requests[-1].path == "/swap/v1/price"

    def test_mapping_query(self):
        gw = FakeGateway()
        quote = _service(gw).get_price(
            {"chainId": 1, "buyToken": USDC, "sellToken": USDT, "sellAmount": "2.5", "apiKey": "k"}
        )
        assert quote.error is None
        assert gw.last_query["sellAmount"] == "2500000"

    def test_gas_fallback_and_numeric_values(self):
        body = {"price": 1.5, "buyAmount": 999871, "sellAmount": "1000000", "gas": 140000}
        quote = _service(FakeGateway(body)).get_price(_query())
        assert quote.price == "1.5"
        assert quote.buy_amount == "999871"
        assert quote.estimated_gas == "140000"

    def test_tokens_fall_back_to_query(self):
        body = {"price": "1", "buyAmount": "1", "sellAmount": "1"}
        quote = _service(FakeGateway(body)).get_price(_query())
        assert quote.buy_token == USDC
        assert quote.sell_token == USDT

    def test_missing_fields_are_empty(self):
        quote = _service(FakeGateway({})).get_price(_query())
        assert quote.error is None
        assert quote.buy_amount == ""
        assert not quote.is_valid()


class TestPriceFailures:
    @pytest.mark.parametrize(
        "kind",
        [FailureKind.TRANSPORT_UNAVAILABLE, FailureKind.MALFORMED_RESPONSE],
    )
    def test_unavailable_uses_generic_message(self, kind):
        quote = _service(FakeGatewayFailure(kind, "Relay unavailable: ConnectionError")).get_price(_query())
        _assert_empty_numeric(quote)
        assert quote.error == PRICE_ERROR == "Failed to fetch price"
        assert quote.failure_kind is kind
        assert quote.buy_token == USDC
        assert quote.sell_token == USDT

    def test_service_error_verbatim(self):
        gw = FakeGatewayFailure(FailureKind.SERVICE_ERROR, "Insufficient liquidity")
        quote = _service(gw).get_price(_query())
        _assert_empty_numeric(quote)
        assert quote.error == "Insufficient liquidity"
        assert quote.failure_kind is FailureKind.SERVICE_ERROR

    def test_gateway_that_raises(self):
        gw = FakeGatewayRaises()
        quote = _service(gw).get_price(_query())
        _assert_empty_numeric(quote)
        assert quote.error == PRICE_ERROR
        assert quote.failure_kind is FailureKind.TRANSPORT_UNAVAILABLE
        assert gw.call_count == 1

    @pytest.mark.parametrize("body", [{"price": {"v": 1}}, {"buyAmount": True}, {"sellAmount": [1]}])
    def test_malformed_field_values(self, body):
        quote = _service(FakeGateway(body)).get_price(_query())
        _assert_empty_numeric(quote)
        assert quote.failure_kind is FailureKind.MALFORMED_RESPONSE
        assert quote.error == PRICE_ERROR

    @pytest.mark.parametrize("amount", ["-1", "abc", "", None, float("nan"), "1e999999"])
    def test_invalid_amount_short_circuits(self, amount):
        gw = FakeGateway()
        quote = _service(gw).get_price(_query(amount))
        _assert_empty_numeric(quote)
        assert quote.failure_kind is FailureKind.INVALID_REQUEST
        assert gw.call_count == 0

    @pytest.mark.parametrize(
        "params",
        [
            {},
            {"chainId": 1, "buyToken": USDC},
            {"chainId": "mainnet", "buyToken": USDC, "sellToken": USDT, "sellAmount": "1"},
            {"chainId": float("inf"), "buyToken": USDC, "sellToken": USDT, "sellAmount": "1"},
        ],
    )
    def test_incomplete_mapping(self, params):
        gw = FakeGateway()
        quote = _service(gw).get_price(params)
        _assert_empty_numeric(quote)
        assert quote.failure_kind is FailureKind.INVALID_REQUEST
        assert quote.error.startswith("Invalid query")
        assert gw.call_count == 0

    @patch("swap_quote.providers.gateway.requests.post")
    def test_unreachable_relay_end_to_end(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("connection refused")
        svc = _service(GatewayClient(relay_url="http://127.0.0.1:9/api/proxy"))
        quote = svc.get_price(_query())
        _assert_empty_numeric(quote)
        assert quote.error == "Failed to fetch price"
        assert quote.failure_kind is FailureKind.TRANSPORT_UNAVAILABLE


class TestGetQuote:
    def test_success(self):
        quote = _service(FakeGateway(QUOTE_BODY)).get_quote(_query())
        assert isinstance(quote, ExecutableQuote)
        assert quote.error is None
        assert quote.to == QUOTE_BODY["to"]
        assert quote.data == QUOTE_BODY["data"]
        assert quote.value == "0"
        assert quote.gas == "180000"
        assert quote.estimated_gas == "136000"
        assert quote.is_valid()

    def test_request_path_and_no_taker_by_default(self):
        gw = FakeGateway(QUOTE_BODY)
        _service(gw).get_quote(_query())
        assert gw.requests[-1].path == "/swap/permit2/quote"
        assert "takerAddress" not in gw.last_query

    def test_taker_included_when_given(self):
        gw = FakeGateway(QUOTE_BODY)
        _service(gw).get_quote(_query(taker_address=TAKER))
        assert gw.last_query["takerAddress"] == TAKER

    def test_empty_taker_omitted(self):
        gw = FakeGateway(QUOTE_BODY)
        _service(gw).get_quote(
            {"chainId": 1, "buyToken": USDC, "sellToken": USDT, "sellAmount": "1", "takerAddress": ""}
        )
        assert "takerAddress" not in gw.last_query

    def test_nested_transaction_fields(self):
        quote = _service(FakeGateway(QUOTE_BODY_V2)).get_quote(_query())
        assert quote.error is None
        assert quote.to == QUOTE_BODY_V2["transaction"]["to"]
        assert quote.data == "0xdeadbeef"
        assert quote.value == "0"
        assert quote.gas == "190000"
        assert quote.estimated_gas == "190000"
        assert quote.price == ""

    def test_failure_is_executable_quote(self):
        quote = _service(FakeGatewayFailure()).get_quote(_query())
        assert isinstance(quote, ExecutableQuote)
        _assert_empty_numeric(quote)
        assert quote.error == QUOTE_ERROR == "Failed to fetch quote"
        assert quote.to == ""
        assert quote.data == ""

    def test_invalid_amount_is_executable_quote(self):
        quote = _service(FakeGateway()).get_quote(_query("-5"))
        assert isinstance(quote, ExecutableQuote)
        assert quote.failure_kind is FailureKind.INVALID_REQUEST

    def test_oversized_amount_is_invalid_request(self):
        gw = FakeGateway()
        quote = _service(gw).get_quote(_query("1e999999"))
        assert quote.failure_kind is FailureKind.INVALID_REQUEST
        assert "too large" in quote.error
        assert gw.call_count == 0

    def test_gateway_that_raises(self):
        quote = _service(FakeGatewayRaises(ConnectionResetError("reset"))).get_quote(_query())
        assert quote.error == QUOTE_ERROR


class TestQuoteDict:
    def test_success_omits_error(self):
        d = _service(FakeGateway(QUOTE_BODY)).get_quote(_query()).to_dict()
        assert d["buyAmount"] == "999871"
        assert d["estimatedGas"] == "136000"
        assert d["to"] == QUOTE_BODY["to"]
        assert "error" not in d
        assert "failureKind" not in d

    def test_failure_carries_kind_value(self):
        d = _service(FakeGatewayFailure()).get_price(_query()).to_dict()
        assert d["error"] == PRICE_ERROR
        assert d["failureKind"] == "TRANSPORT_UNAVAILABLE"
        assert d["price"] == ""
