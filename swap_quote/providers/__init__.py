"""
Gateway architecture for the external swap-pricing service.

Requests go through a credential-carrying relay; every outcome is returned as
an explicit result value (Ok / Failure) so callers never need exception
handling for network or service problems.
"""

from __future__ import annotations

from .base import (
    AmountQuery,
    ExecutableQuote,
    Failure,
    FailureKind,
    Gateway,
    GatewayResult,
    Ok,
    PriceQuote,
    RelayEnvelope,
    RequestSpec,
)
from .gateway import GatewayClient
from .resilience import RetryConfig, retry_result

__all__ = [
    "AmountQuery",
    "ExecutableQuote",
    "Failure",
    "FailureKind",
    "Gateway",
    "GatewayClient",
    "GatewayResult",
    "Ok",
    "PriceQuote",
    "RelayEnvelope",
    "RequestSpec",
    "RetryConfig",
    "retry_result",
]
