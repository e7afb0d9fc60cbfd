"""
Load config from config.yaml with optional env overrides.
Single source of truth for the relay endpoint, upstream origin, timeouts, and the token table.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

# Defaults if no YAML or env
_DEFAULTS: Dict[str, Any] = {
    "gateway": {
        "relay_url": "http://127.0.0.1:3000/api/proxy",
        "protocol": "https",
        "origin": "api.0x.org",
        "credential_header": "0x-api-key",
        "api_version": "v2",
        "http_timeout_s": 15.0,
        "max_retries": 1,
    },
    "endpoints": {
        "price_path": "/swap/permit2/price",
        "quote_path": "/swap/permit2/quote",
    },
    "relay": {
        "allowed_origins": ["api.0x.org"],
        "http_timeout_s": 15.0,
    },
    "paging": {"default_limit": 100},
    "api_key": "",
    # None -> built-in table from swap_quote.tokens.defaults
    "tokens": None,
}


def _config_yaml_path() -> Path:
    """config.yaml lives at repo root (parent of package dir) unless SWAP_QUOTE_CONFIG points elsewhere."""
    override = os.environ.get("SWAP_QUOTE_CONFIG")
    if override:
        return Path(override)
    return Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml() -> dict:
    config_path = _config_yaml_path()
    if not config_path.exists():
        return {}
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _env_overrides() -> dict:
    overrides: dict = {}
    relay = os.environ.get("SWAP_QUOTE_RELAY_URL")
    if relay:
        overrides.setdefault("gateway", {})["relay_url"] = relay
    origin_host = os.environ.get("SWAP_QUOTE_ORIGIN")
    if origin_host:
        overrides.setdefault("gateway", {})["origin"] = origin_host
    timeout = os.environ.get("SWAP_QUOTE_HTTP_TIMEOUT_S")
    if timeout:
        overrides.setdefault("gateway", {})["http_timeout_s"] = timeout
    key = os.environ.get("SWAP_QUOTE_API_KEY")
    if key:
        overrides["api_key"] = key
    return overrides


def get_config() -> dict:
    """Return merged config: defaults <- config.yaml <- env."""
    merged = _deep_merge(_DEFAULTS, _load_yaml())
    merged = _deep_merge(merged, _env_overrides())
    return merged


# Convenience accessors
def relay_url() -> str:
    return str(get_config()["gateway"]["relay_url"])


def protocol() -> str:
    return str(get_config()["gateway"]["protocol"])


def origin() -> str:
    return str(get_config()["gateway"]["origin"])


def credential_header() -> str:
    return str(get_config()["gateway"]["credential_header"])


def api_version() -> str:
    return str(get_config()["gateway"]["api_version"])


def http_timeout_s() -> float:
    return float(get_config()["gateway"]["http_timeout_s"])


def max_retries() -> int:
    return max(1, int(get_config()["gateway"]["max_retries"]))


def price_path() -> str:
    return str(get_config()["endpoints"]["price_path"])


def quote_path() -> str:
    return str(get_config()["endpoints"]["quote_path"])


def default_limit() -> int:
    return int(get_config()["paging"]["default_limit"])


def api_key() -> str:
    return str(get_config().get("api_key") or "")


def relay_allowed_origins() -> List[str]:
    return [str(o) for o in get_config()["relay"]["allowed_origins"]]


def relay_timeout_s() -> float:
    return float(get_config()["relay"]["http_timeout_s"])


def token_table() -> Optional[Any]:
    """Raw `tokens:` section, or None when the built-in table should be used."""
    return get_config().get("tokens")
