"""Command-line interface for quotefetch."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from dataclasses import fields

from quotefetch.config import ProxyConfig, RequestConfig
from quotefetch.data.batch import BatchResult
from quotefetch.data.client import QuoteClient
from quotefetch.domain.models import InstrumentInfo
from quotefetch.domain.periods import Interval, Period
from quotefetch.errors import ConfigError, FetchError
from quotefetch.indicators import IndicatorSpec, calculate_indicator
from quotefetch.logging import setup_logger
from quotefetch.report import generate_series_report


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(description="Fetch quotes, bars and indicators")
    parser.add_argument("--timeout-ms", type=int, help="Per-request timeout in milliseconds")
    parser.add_argument("--max-retries", type=int, help="Attempt budget per request")
    parser.add_argument("--batch-size", type=int, help="Symbols per batch chunk")
    parser.add_argument(
        "--policy",
        choices=["fail_fast", "partial"],
        help="Batch failure policy",
    )
    parser.add_argument("--workers", type=int, help="Concurrent fetches per chunk")
    parser.add_argument("--proxy-host", type=str, help="HTTP proxy host")
    parser.add_argument("--proxy-port", type=int, help="HTTP proxy port")
    parser.add_argument("--log-level", type=str, help="Logging level")
    parser.add_argument("--log-file", type=str, help="Also write logs to this file")

    commands = parser.add_subparsers(dest="command", required=True)

    bars = commands.add_parser("bars", help="Fetch OHLCV bars")
    bars.add_argument("symbols", nargs="+", help="Symbols, e.g. AAPL BTC-USD CRYPTO:ETHUSDT")
    bars.add_argument(
        "--period",
        default=Period.ONE_MONTH.value,
        help="Lookback period (1d, 5d, 1mo, ... ytd, max)",
    )
    bars.add_argument(
        "--interval",
        default=Interval.ONE_DAY.value,
        help="Bar interval (1m, 5m, 1h, 1d, 1wk, ...)",
    )
    bars.add_argument(
        "--indicator",
        action="append",
        default=[],
        help="Indicator like sma:20, ema:12 or rsi:14 (repeatable)",
    )
    bars.add_argument("--rows", type=int, default=10, help="Trailing rows to print")
    bars.add_argument("--report", type=str, help="Write an HTML chart for the first symbol")

    info = commands.add_parser("info", help="Fetch instrument metadata")
    info.add_argument("symbols", nargs="+")

    price = commands.add_parser("price", help="Fetch the latest price")
    price.add_argument("symbols", nargs="+")
    return parser


def apply_cli_overrides(config: RequestConfig, args: argparse.Namespace) -> RequestConfig:
    """Apply CLI values onto environment-derived config."""
    overrides: dict[str, object] = {}
    if args.timeout_ms is not None:
        overrides["timeout_ms"] = args.timeout_ms
    if args.max_retries is not None:
        overrides["max_retries"] = args.max_retries
    if args.batch_size is not None:
        overrides["batch_size"] = args.batch_size
    if args.policy:
        overrides["batch_policy"] = args.policy
    if args.workers is not None:
        overrides["max_workers"] = args.workers
    if args.log_level:
        overrides["log_level"] = args.log_level.strip().upper()
    if args.proxy_host:
        current = config.proxy
        overrides["proxy"] = ProxyConfig(
            host=args.proxy_host,
            port=args.proxy_port or (current.port if current else 8080),
            username=current.username if current else None,
            password=current.password if current else None,
            scheme=current.scheme if current else "http",
        )
    elif args.proxy_port is not None:
        raise ConfigError("--proxy-port requires --proxy-host")
    return config.with_overrides(**overrides)


def run_bars(client: QuoteClient, args: argparse.Namespace) -> int:
    specs = [IndicatorSpec.parse(text) for text in args.indicator]
    batch = client.fetch_batch(args.symbols, args.period, args.interval)
    for symbol, series in batch.results.items():
        print(f"== {symbol} {series.interval.value}/{series.period.value} ({series.currency})")
        print(series.to_frame().tail(max(1, args.rows)).to_string())
        for spec in specs:
            values = calculate_indicator(series, spec)
            latest = f"{values[-1]:.4f}" if values else "n/a"
            print(f"{spec.column}: {latest}")
    if args.report and batch.results:
        first = next(iter(batch.results.values()))
        path = generate_series_report(first, specs, args.report)
        print(f"report written to {path}")
    return _report_errors(batch)


def run_info(client: QuoteClient, args: argparse.Namespace) -> int:
    batch = client.fetch_info_batch(args.symbols)
    for symbol, info in batch.results.items():
        print(f"== {symbol}")
        for line in _format_info(info):
            print(line)
    return _report_errors(batch)


def run_price(client: QuoteClient, args: argparse.Namespace) -> int:
    batch = client.get_current_price_batch(args.symbols)
    for symbol, value in batch.results.items():
        print(f"{symbol} {value:,.4f}")
    return _report_errors(batch)


def _format_info(info: InstrumentInfo) -> list[str]:
    lines: list[str] = []
    for item in fields(info):
        if item.name == "symbol":
            continue
        value = getattr(info, item.name)
        if value is None:
            continue
        lines.append(f"{item.name}: {value}")
    return lines


def _report_errors(batch: BatchResult) -> int:
    for symbol, error in batch.errors.items():
        print(f"{symbol}: {error}", file=sys.stderr)
    return 0 if batch.ok else 1


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = apply_cli_overrides(RequestConfig.from_env(), args)
    except ConfigError as exc:
        print(f"Configuration error: {exc}")
        return 2
    setup_logger(config.log_level, args.log_file)

    handlers = {"bars": run_bars, "info": run_info, "price": run_price}
    with QuoteClient(config) as client:
        try:
            return handlers[args.command](client, args)
        except FetchError as exc:
            print(str(exc), file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
