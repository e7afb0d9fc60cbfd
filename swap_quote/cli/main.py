"""
Top-level CLI dispatcher: swap-quote <command> [args...].
Prints JSON to stdout. Exit 0 on success, 1 when a quote carries an error or a conversion fails.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from swap_quote import __version__

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _add_query_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--chain-id", type=int, default=1, help="Chain id (default: 1)")
    p.add_argument("--sell-token", required=True, help="Sell token address")
    p.add_argument("--buy-token", required=True, help="Buy token address")
    p.add_argument("--amount", required=True, help="Human-readable sell amount, e.g. 1.5")
    p.add_argument("--api-key", default=None, help="API key (default: SWAP_QUOTE_API_KEY / config)")
    p.add_argument("--relay-url", default=None, help="Relay endpoint (default: config gateway.relay_url)")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swap-quote",
        description="Token amount conversion and 0x price/quote lookup via a credential relay",
    )
    parser.add_argument("--version", action="version", version=f"swap-quote {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
    subparsers = parser.add_subparsers(dest="command", help="command")

    p = subparsers.add_parser("tokens", help="List supported tokens for a chain")
    p.add_argument("--chain-id", type=int, default=1)
    p.add_argument("--limit", type=int, default=None)
    p.add_argument("--offset", type=int, default=None)

    p = subparsers.add_parser("price", help="Indicative price for selling an amount")
    _add_query_args(p)

    p = subparsers.add_parser("quote", help="Executable quote (tx target, calldata, value, gas)")
    _add_query_args(p)
    p.add_argument("--taker", default=None, help="Taker address (omitted when not given)")

    p = subparsers.add_parser("scale-up", help="Human amount -> base units")
    p.add_argument("amount")
    p.add_argument("token")

    p = subparsers.add_parser("scale-down", help="Base units -> human amount")
    p.add_argument("base_units")
    p.add_argument("token")
    p.add_argument("--places", type=int, default=None, help="Round to this many fractional digits")

    p = subparsers.add_parser("relay", help="Run the same-origin relay (FastAPI + uvicorn)")
    p.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    p.add_argument("--port", type=int, default=3000, help="Port (default: 3000)")
    p.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    return parser


def _service(relay_url: Optional[str]):
    from swap_quote.providers.defaults import create_gateway
    from swap_quote.service import create_quote_service

    return create_quote_service(gateway=create_gateway(relay_url=relay_url))


def _query_params(args: argparse.Namespace) -> dict:
    from swap_quote import config

    params = {
        "chainId": args.chain_id,
        "sellToken": args.sell_token,
        "buyToken": args.buy_token,
        "sellAmount": args.amount,
        "apiKey": args.api_key if args.api_key is not None else config.api_key(),
    }
    taker = getattr(args, "taker", None)
    if taker:
        params["takerAddress"] = taker
    return params


def _main_tokens(args: argparse.Namespace) -> int:
    # building the gateway does no I/O; listing never touches the network
    tokens = _service(None).list_supported_tokens(args.chain_id, limit=args.limit, offset=args.offset)
    _print_json([t.to_dict() for t in tokens])
    return 0


def _main_price(args: argparse.Namespace) -> int:
    quote = _service(args.relay_url).get_price(_query_params(args))
    _print_json(quote.to_dict())
    return 0 if quote.error is None else 1


def _main_quote(args: argparse.Namespace) -> int:
    quote = _service(args.relay_url).get_quote(_query_params(args))
    _print_json(quote.to_dict())
    return 0 if quote.error is None else 1


def _main_scale(args: argparse.Namespace) -> int:
    from swap_quote.amounts import AmountCodec
    from swap_quote.core.errors import SwapQuoteError
    from swap_quote.tokens.defaults import create_default_registry

    codec = AmountCodec(create_default_registry())
    try:
        if args.command == "scale-up":
            out = codec.scale_up(args.amount, args.token)
        else:
            out = codec.scale_down(args.base_units, args.token, places=args.places)
    except SwapQuoteError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    _print_json({"token": args.token, "decimals": codec.decimals_of(args.token), "result": out})
    return 0


def _main_relay(args: argparse.Namespace) -> int:
    try:
        import uvicorn
    except ImportError:
        print("uvicorn not installed. Install with: pip install 'swap-quote[api]'", file=sys.stderr)
        return 1

    uvicorn.run("swap_quote.relay:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format=_LOG_FORMAT, stream=sys.stderr)

    cmd = args.command
    if cmd == "tokens":
        return _main_tokens(args)
    if cmd == "price":
        return _main_price(args)
    if cmd == "quote":
        return _main_quote(args)
    if cmd in ("scale-up", "scale-down"):
        return _main_scale(args)
    if cmd == "relay":
        return _main_relay(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
