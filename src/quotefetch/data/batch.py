"""Chunked multi-symbol fetching with a single failure policy."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from quotefetch.config import BatchPolicy, RequestConfig
from quotefetch.errors import FetchError, ValidationError
from quotefetch.logging import FetchLogger

T = TypeVar("T")


def chunk_symbols(symbols: Sequence[str], size: int) -> list[list[str]]:
    """Split symbols into order-preserving chunks of ``size``."""
    if size <= 0:
        raise ValidationError(f"batch size must be positive (got {size})")
    return [list(symbols[start : start + size]) for start in range(0, len(symbols), size)]


def dedupe_symbols(symbols: Sequence[str]) -> list[str]:
    """Remove duplicate symbols while preserving order."""
    deduped: list[str] = []
    seen: set[str] = set()
    for symbol in symbols:
        if symbol in seen:
            continue
        seen.add(symbol)
        deduped.append(symbol)
    return deduped


@dataclass(frozen=True)
class BatchResult(Generic[T]):
    """Per-symbol successes and, under the partial policy, failures."""

    results: dict[str, T] = field(default_factory=dict)
    errors: dict[str, FetchError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def __getitem__(self, symbol: str) -> T:
        return self.results[symbol]

    def __contains__(self, symbol: object) -> bool:
        return symbol in self.results

    def __len__(self) -> int:
        return len(self.results)

    def raise_for_errors(self) -> None:
        """Raise the first recorded error, if any."""
        for error in self.errors.values():
            raise error


def run_batch(
    symbols: Sequence[str],
    fetch_one: Callable[[str], T],
    config: RequestConfig,
    operation: str = "fetch",
) -> BatchResult[T]:
    """Apply ``fetch_one`` to every symbol, chunk by chunk.

    Under ``BatchPolicy.FAIL_FAST`` the first failure in input order is raised
    and later chunks are never started. Under ``BatchPolicy.PARTIAL`` every
    symbol is attempted and failures are collected in ``errors``.
    """
    log = FetchLogger("quotefetch.data.batch")
    unique = dedupe_symbols(symbols)
    chunks = chunk_symbols(unique, config.batch_size)
    results: dict[str, T] = {}
    errors: dict[str, FetchError] = {}

    for index, chunk in enumerate(chunks, start=1):
        log.batch_chunk(index, len(chunks), chunk)
        for symbol, outcome in _run_chunk(chunk, fetch_one, config):
            if isinstance(outcome, FetchError):
                log.error(symbol, str(outcome))
                if config.batch_policy is BatchPolicy.FAIL_FAST:
                    raise outcome
                errors[symbol] = outcome
                continue
            results[symbol] = outcome

    log.batch_summary(operation, len(results), len(errors))
    return BatchResult(results=results, errors=errors)


def _run_chunk(
    chunk: list[str],
    fetch_one: Callable[[str], T],
    config: RequestConfig,
) -> list[tuple[str, T | FetchError]]:
    workers = min(config.max_workers, len(chunk))
    if workers <= 1:
        return _run_sequential(chunk, fetch_one, config)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="quotefetch") as executor:
        futures: list[tuple[str, Future[T]]] = [
            (symbol, executor.submit(fetch_one, symbol)) for symbol in chunk
        ]
        outcomes: list[tuple[str, T | FetchError]] = []
        for position, (symbol, future) in enumerate(futures):
            try:
                outcomes.append((symbol, future.result()))
            except FetchError as exc:
                outcomes.append((symbol, exc))
                if config.batch_policy is BatchPolicy.FAIL_FAST:
                    for _, pending in futures[position + 1 :]:
                        pending.cancel()
                    break
        return outcomes


def _run_sequential(
    chunk: list[str],
    fetch_one: Callable[[str], T],
    config: RequestConfig,
) -> list[tuple[str, T | FetchError]]:
    outcomes: list[tuple[str, T | FetchError]] = []
    for symbol in chunk:
        try:
            outcomes.append((symbol, fetch_one(symbol)))
        except FetchError as exc:
            outcomes.append((symbol, exc))
            if config.batch_policy is BatchPolicy.FAIL_FAST:
                break
    return outcomes
