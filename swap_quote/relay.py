"""
Same-origin relay using FastAPI.

Accepts the gateway envelope on POST /api/proxy and forwards it verbatim
(method, path, headers, body) to {protocol}://{origin}{path}, returning the
upstream status and body unchanged. No transformation of its own; only
origins in `relay.allowed_origins` are reachable.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

import requests
from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import JSONResponse, Response

from . import __version__

logger = logging.getLogger(__name__)

_PROTOCOLS = ("https", "http")
_METHODS = ("GET", "POST")

app = FastAPI(title="swap-quote relay", version=__version__)


def _allowed_origins() -> List[str]:
    from . import config

    return config.relay_allowed_origins()


def _timeout_s() -> float:
    from . import config

    return config.relay_timeout_s()


def _validate(envelope: Any) -> Dict[str, Any]:
    if not isinstance(envelope, dict):
        raise HTTPException(400, detail="Envelope must be a JSON object")
    protocol = envelope.get("protocol")
    origin = envelope.get("origin")
    path = envelope.get("path")
    method = envelope.get("method", "GET")
    headers = envelope.get("headers") or {}
    body = envelope.get("body")
    if protocol not in _PROTOCOLS:
        raise HTTPException(400, detail=f"Unsupported protocol: {protocol!r}")
    if not isinstance(path, str) or not path.startswith("/"):
        raise HTTPException(400, detail="path must start with '/'")
    if not isinstance(method, str) or method.upper() not in _METHODS:
        raise HTTPException(400, detail=f"Unsupported method: {method!r}")
    if not isinstance(headers, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in headers.items()
    ):
        raise HTTPException(400, detail="headers must be a string -> string object")
    if body is not None and not isinstance(body, str):
        raise HTTPException(400, detail="body must be a string")
    if origin not in _allowed_origins():
        raise HTTPException(403, detail=f"Origin not allowed: {origin!r}")
    return {
        "url": f"{protocol}://{origin}{path}",
        "method": method.upper(),
        "headers": headers,
        "body": body,
    }


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok", "version": __version__}


@app.post("/api/proxy")
def proxy(envelope: Any = Body(...)) -> Response:
    target = _validate(envelope)

    try:
        upstream = requests.request(
            target["method"],
            target["url"],
            headers=target["headers"],
            data=target["body"].encode("utf-8") if target["body"] is not None else None,
            timeout=_timeout_s(),
        )
    except requests.RequestException as exc:
        logger.warning("Upstream unreachable %s %s: %s", target["method"], target["url"].split("?")[0], type(exc).__name__)
        return JSONResponse(status_code=502, content={"detail": "Upstream unreachable"})

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("Content-Type", "application/json"),
    )
