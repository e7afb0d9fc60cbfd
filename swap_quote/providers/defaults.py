"""
Default gateway configuration.

Builds the relay gateway from config.yaml / env settings. To point at a
different relay or upstream origin, set `gateway.relay_url` / `gateway.origin`
(or SWAP_QUOTE_RELAY_URL / SWAP_QUOTE_ORIGIN).
"""
from __future__ import annotations

import logging
from typing import Optional

import requests

from .gateway import GatewayClient
from .resilience import RetryConfig

logger = logging.getLogger(__name__)


def create_gateway(
    relay_url: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> GatewayClient:
    """Build a relay gateway with retry settings from config."""
    from swap_quote import config

    url = relay_url or config.relay_url()
    logger.debug("Gateway relay=%s origin=%s", url, config.origin())
    return GatewayClient(
        relay_url=url,
        origin=config.origin(),
        protocol=config.protocol(),
        credential_header=config.credential_header(),
        api_version=config.api_version(),
        timeout_s=config.http_timeout_s(),
        retry_config=RetryConfig(max_retries=config.max_retries(), base_delay_s=0.5),
        session=session,
    )
