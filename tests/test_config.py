"""Config layering: defaults <- config.yaml (SWAP_QUOTE_CONFIG) <- env."""

from __future__ import annotations

import pytest

from swap_quote import config
from swap_quote.core.errors import ConfigError
from swap_quote.providers.base import RequestSpec
from swap_quote.providers.defaults import create_gateway
from swap_quote.service import create_quote_service
from swap_quote.tokens.defaults import DEFAULT_TOKENS, load_token_config
from tests.fakes import FakeGateway

_ENV_VARS = (
    "SWAP_QUOTE_CONFIG",
    "SWAP_QUOTE_RELAY_URL",
    "SWAP_QUOTE_ORIGIN",
    "SWAP_QUOTE_HTTP_TIMEOUT_S",
    "SWAP_QUOTE_API_KEY",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # point at a file that does not exist so a developer's config.yaml is ignored
    monkeypatch.setenv("SWAP_QUOTE_CONFIG", str(tmp_path / "absent.yaml"))


def _write_config(tmp_path, monkeypatch, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    monkeypatch.setenv("SWAP_QUOTE_CONFIG", str(path))
    return path


def test_defaults_without_yaml():
    assert config.relay_url() == "http://127.0.0.1:3000/api/proxy"
    assert config.origin() == "api.0x.org"
    assert config.protocol() == "https"
    assert config.credential_header() == "0x-api-key"
    assert config.api_version() == "v2"
    assert config.http_timeout_s() == 15.0
    assert config.max_retries() == 1
    assert config.price_path() == "/swap/permit2/price"
    assert config.quote_path() == "/swap/permit2/quote"
    assert config.default_limit() == 100
    assert config.api_key() == ""
    assert config.relay_allowed_origins() == ["api.0x.org"]
    assert config.token_table() is None
    assert load_token_config() is DEFAULT_TOKENS


def test_yaml_merges_over_defaults(tmp_path, monkeypatch):
    _write_config(
        tmp_path,
        monkeypatch,
        "gateway:\n"
        "  relay_url: http://relay.local/api/proxy\n"
        "  max_retries: 3\n"
        "paging:\n"
        "  default_limit: 2\n",
    )
    assert config.relay_url() == "http://relay.local/api/proxy"
    assert config.max_retries() == 3
    assert config.default_limit() == 2
    # untouched keys in the same section keep their defaults
    assert config.origin() == "api.0x.org"


def test_env_overrides_yaml(tmp_path, monkeypatch):
    _write_config(tmp_path, monkeypatch, "gateway:\n  relay_url: http://from-yaml/api/proxy\napi_key: from-yaml\n")
    monkeypatch.setenv("SWAP_QUOTE_RELAY_URL", "http://from-env/api/proxy")
    monkeypatch.setenv("SWAP_QUOTE_API_KEY", "from-env")
    monkeypatch.setenv("SWAP_QUOTE_HTTP_TIMEOUT_S", "2.5")
    monkeypatch.setenv("SWAP_QUOTE_ORIGIN", "sandbox.example")
    assert config.relay_url() == "http://from-env/api/proxy"
    assert config.api_key() == "from-env"
    assert config.http_timeout_s() == 2.5
    assert config.origin() == "sandbox.example"


def test_non_mapping_yaml_ignored(tmp_path, monkeypatch):
    _write_config(tmp_path, monkeypatch, "- just\n- a list\n")
    assert config.relay_url() == "http://127.0.0.1:3000/api/proxy"


def test_max_retries_floor(tmp_path, monkeypatch):
    _write_config(tmp_path, monkeypatch, "gateway:\n  max_retries: 0\n")
    assert config.max_retries() == 1


def test_token_table_from_yaml(tmp_path, monkeypatch):
    _write_config(
        tmp_path,
        monkeypatch,
        "tokens:\n"
        "  137:\n"
        '    - {address: "0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359", symbol: USDC, name: USD Coin, decimals: 6}\n',
    )
    svc = create_quote_service(gateway=FakeGateway())
    assert [t.symbol for t in svc.list_supported_tokens(137)] == ["USDC"]
    assert svc.list_supported_tokens(1) == []
    assert svc.codec.decimals_of("0x3c499c542cef5e3811e1192ce70d8cc03d5c3359") == 6


def test_bad_token_table_raises(tmp_path, monkeypatch):
    _write_config(tmp_path, monkeypatch, "tokens:\n  1:\n    - {symbol: USDC, decimals: 6}\n")
    with pytest.raises(ConfigError):
        load_token_config()


def test_create_gateway_uses_config(tmp_path, monkeypatch):
    _write_config(
        tmp_path,
        monkeypatch,
        "gateway:\n  origin: sandbox.example\n  credential_header: x-key\n  api_version: v3\n",
    )
    gw = create_gateway(relay_url="http://override/api/proxy")
    env = gw.build_envelope(RequestSpec(path="/p", api_key="k"))
    assert env.origin == "sandbox.example"
    assert env.headers == {"Content-Type": "application/json", "x-key": "k", "0x-version": "v3"}


def test_create_quote_service_paths(tmp_path, monkeypatch):
    _write_config(tmp_path, monkeypatch, "endpoints:\n  price_path: /swap/allowance-holder/price\n")
    gw = FakeGateway()
    svc = create_quote_service(gateway=gw)
    svc.get_price({"chainId": 1, "buyToken": "0xa", "sellToken": "0xb", "sellAmount": "1"})
    assert gw.requests[-1].path == "/swap/allowance-holder/price"
