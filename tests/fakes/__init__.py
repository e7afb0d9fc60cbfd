"""Fake gateways and fixtures for quote tests (no live network)."""

from .gateway import (
    DAI,
    ETH,
    PRICE_BODY,
    QUOTE_BODY,
    QUOTE_BODY_V2,
    TAKER,
    USDC,
    USDT,
    WBTC,
    FakeGateway,
    FakeGatewayFailure,
    FakeGatewayRaises,
)

__all__ = [
    "DAI",
    "ETH",
    "PRICE_BODY",
    "QUOTE_BODY",
    "QUOTE_BODY_V2",
    "TAKER",
    "USDC",
    "USDT",
    "WBTC",
    "FakeGateway",
    "FakeGatewayFailure",
    "FakeGatewayRaises",
]
