"""
Relay gateway to the 0x Swap API (v2).

The client never talks to api.0x.org directly. It POSTs an envelope to a
same-origin relay, which forwards the request verbatim to the named origin:

  POST {relay_url}
  {"protocol": "https", "origin": "api.0x.org", "path": "/swap/permit2/price?...",
   "method": "GET", "headers": {"Content-Type": ..., "0x-api-key": ..., "0x-version": "v2"}}

Failures come back as values (see base.Failure), never as exceptions.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests

from .base import Failure, FailureKind, GatewayResult, Ok, RelayEnvelope, RequestSpec
from .resilience import RetryConfig, retry_result

logger = logging.getLogger(__name__)

DEFAULT_ORIGIN = "api.0x.org"
HTTP_TIMEOUT_S = 15.0
ALLOWED_METHODS = ("GET", "POST")


def _query_value(v: Any) -> str:
    if isinstance(v, bool):
        return "true" if v else "false"
    return str(v)


def _service_error(body: Dict[str, Any]) -> Optional[str]:
    """Service-reported error message from a parsed envelope, if any."""
    err = body.get("error")
    if err is None or err is False or err == "" or err == [] or err == {}:
        return None
    if isinstance(err, str):
        return err
    if isinstance(err, dict):
        msg = err.get("message") or err.get("reason")
        if isinstance(msg, str) and msg:
            return msg
        return json.dumps(err, separators=(",", ":"), sort_keys=True)
    if isinstance(err, list):
        return "; ".join(str(e) for e in err)
    return str(err)


class GatewayClient:
    """Dispatch authenticated requests through the credential-carrying relay."""

    def __init__(
        self,
        relay_url: str,
        origin: str = DEFAULT_ORIGIN,
        protocol: str = "https",
        credential_header: str = "0x-api-key",
        api_version: str = "v2",
        timeout_s: float = HTTP_TIMEOUT_S,
        retry_config: Optional[RetryConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._relay_url = relay_url
        self._origin = origin
        self._protocol = protocol
        self._credential_header = credential_header
        self._api_version = api_version
        self._timeout_s = timeout_s
        self._retry_config = retry_config or RetryConfig()
        self._session = session

    @property
    def provider_name(self) -> str:
        return f"relay:{self._origin}"

    def build_envelope(self, spec: RequestSpec) -> RelayEnvelope:
        method = spec.method.upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"Unsupported method {spec.method!r}; expected one of {ALLOWED_METHODS}")
        params = {k: _query_value(v) for k, v in (spec.query or {}).items() if v is not None}
        query_string = urlencode(params)
        headers = {
            "Content-Type": "application/json",
            self._credential_header: spec.api_key,
            "0x-version": self._api_version,
        }
        return RelayEnvelope(
            protocol=self._protocol,
            origin=self._origin,
            path=spec.path + (f"?{query_string}" if query_string else ""),
            method=method,
            headers=headers,
            body=spec.body,
        )

    def request(self, spec: RequestSpec) -> GatewayResult:
        """Dispatch one request (with optional transport retries). Never raises."""
        return retry_result(
            lambda: self._dispatch(spec),
            lambda r: isinstance(r, Failure) and r.kind is FailureKind.TRANSPORT_UNAVAILABLE,
            self._retry_config,
        )

    def _post(self, payload: Dict[str, Any]) -> requests.Response:
        if self._session is not None:
            return self._session.post(self._relay_url, json=payload, timeout=self._timeout_s)
        return requests.post(self._relay_url, json=payload, timeout=self._timeout_s)

    def _dispatch(self, spec: RequestSpec) -> GatewayResult:
        try:
            envelope = self.build_envelope(spec)
        except ValueError as exc:
            return Failure(FailureKind.INVALID_REQUEST, str(exc))

        try:
            resp = self._post(envelope.to_json())
        except requests.RequestException as exc:
            # timeouts land here too; they are not a separate failure kind
            logger.warning("%s unavailable for %s: %s", self.provider_name, spec.path, type(exc).__name__)
            return Failure(
                FailureKind.TRANSPORT_UNAVAILABLE,
                f"Relay unavailable: {type(exc).__name__}: {str(exc)[:200]}",
            )
        return self._interpret(resp, spec.path)

    def _interpret(self, resp: requests.Response, path: str) -> GatewayResult:
        status = resp.status_code
        try:
            body = resp.json()
        except ValueError:
            if status >= 400:
                logger.warning("%s returned HTTP %d for %s", self.provider_name, status, path)
                return Failure(FailureKind.TRANSPORT_UNAVAILABLE, f"Relay returned HTTP {status}")
            logger.warning("%s: unparseable response body for %s", self.provider_name, path)
            return Failure(FailureKind.MALFORMED_RESPONSE, "Response body is not valid JSON")

        if not isinstance(body, dict):
            if status >= 400:
                return Failure(FailureKind.TRANSPORT_UNAVAILABLE, f"Relay returned HTTP {status}")
            return Failure(
                FailureKind.MALFORMED_RESPONSE,
                f"Expected a JSON object, got {type(body).__name__}",
            )

        err = _service_error(body)
        if err is not None:
            logger.info("%s: service error for %s: %s", self.provider_name, path, err[:200])
            return Failure(FailureKind.SERVICE_ERROR, err)

        if status >= 400:
            msg = body.get("message") or body.get("reason")
            if isinstance(msg, str) and msg:
                logger.info("%s: service error (HTTP %d) for %s: %s", self.provider_name, status, path, msg[:200])
                return Failure(FailureKind.SERVICE_ERROR, msg)
            return Failure(FailureKind.TRANSPORT_UNAVAILABLE, f"Relay returned HTTP {status}")

        return Ok(body=body, status_code=status)
