from __future__ import annotations

import pytest

from quotefetch.config import BatchPolicy, RequestConfig
from quotefetch.data.batch import BatchResult, chunk_symbols, run_batch
from quotefetch.data.client import QuoteClient
from quotefetch.data.transport import HttpResponse
from quotefetch.errors import NetworkError, ParseError, ValidationError


@pytest.mark.parametrize(
    ("symbols", "size"),
    [
        (["A", "B", "C", "D", "E"], 2),
        (["A", "B", "C", "D"], 2),
        (["A", "B", "C"], 5),
        (["A"], 1),
        ([f"S{index}" for index in range(23)], 7),
    ],
)
def test_chunks_preserve_order_and_size(symbols: list[str], size: int) -> None:
    chunks = chunk_symbols(symbols, size)

    assert [symbol for chunk in chunks for symbol in chunk] == symbols
    assert all(len(chunk) == size for chunk in chunks[:-1])
    assert 0 < len(chunks[-1]) <= size


def test_chunking_empty_list() -> None:
    assert chunk_symbols([], 3) == []


@pytest.mark.parametrize("size", [0, -2])
def test_non_positive_chunk_size_is_rejected(size: int) -> None:
    with pytest.raises(ValidationError):
        chunk_symbols(["AAPL"], size)


def _routes(chart_body) -> dict[str, HttpResponse]:
    return {
        "AAPL": HttpResponse(200, chart_body([190.0, 191.0])),
        "BAD": HttpResponse(200, "not json"),
        "MSFT": HttpResponse(200, chart_body([410.0, 412.0, 415.0])),
    }


def test_fail_fast_batch_returns_first_failure(routing_transport, chart_body, sleeps) -> None:
    transport = routing_transport(_routes(chart_body))
    client = QuoteClient(RequestConfig(), transport=transport, sleep=sleeps.append)

    with pytest.raises(ParseError):
        client.fetch_batch(["AAPL", "BAD", "MSFT"], "1mo", "1d")

    assert not any("/MSFT?" in url for url in transport.urls)


def test_partial_batch_keeps_successes(routing_transport, chart_body, sleeps) -> None:
    transport = routing_transport(_routes(chart_body))
    config = RequestConfig(batch_policy=BatchPolicy.PARTIAL)
    client = QuoteClient(config, transport=transport, sleep=sleeps.append)

    batch = client.fetch_batch(["AAPL", "BAD", "MSFT"], "1mo", "1d")

    assert set(batch.results) == {"AAPL", "MSFT"}
    assert isinstance(batch.errors["BAD"], ParseError)
    assert not batch.ok
    assert len(batch["MSFT"]) == 3
    with pytest.raises(ParseError):
        batch.raise_for_errors()


def test_fail_fast_skips_later_chunks(routing_transport, chart_body, sleeps) -> None:
    routes = _routes(chart_body)
    routes["IBM"] = HttpResponse(200, chart_body([150.0]))
    transport = routing_transport(routes)
    config = RequestConfig(batch_size=2)
    client = QuoteClient(config, transport=transport, sleep=sleeps.append)

    with pytest.raises(ParseError):
        client.fetch_batch(["AAPL", "BAD", "MSFT", "IBM"])

    assert len(transport.urls) == 2


def test_batch_chunks_fetch_every_symbol_in_order(routing_transport, chart_body, sleeps) -> None:
    symbols = ["S1", "S2", "S3", "S4", "S5"]
    transport = routing_transport(
        {symbol: HttpResponse(200, chart_body([1.0, 2.0])) for symbol in symbols}
    )
    client = QuoteClient(RequestConfig(batch_size=2), transport=transport, sleep=sleeps.append)

    batch = client.fetch_batch(symbols)

    assert list(batch.results) == symbols
    assert [url.split("?")[0].rsplit("/", 1)[-1] for url in transport.urls] == symbols


def test_batch_dedupes_symbols(routing_transport, chart_body, sleeps) -> None:
    transport = routing_transport({"AAPL": HttpResponse(200, chart_body([1.0]))})
    client = QuoteClient(RequestConfig(), transport=transport, sleep=sleeps.append)

    batch = client.fetch_batch(["AAPL", "aapl", "AAPL"])

    assert len(batch) == 1
    assert len(transport.urls) == 1


def test_empty_batch_makes_no_requests(routing_transport, sleeps) -> None:
    transport = routing_transport({})
    client = QuoteClient(RequestConfig(), transport=transport, sleep=sleeps.append)

    batch = client.fetch_batch([])

    assert batch.results == {}
    assert transport.urls == []


def test_concurrent_partial_batch(routing_transport, chart_body, sleeps) -> None:
    symbols = [f"T{index}" for index in range(12)]
    routes = {
        symbol: HttpResponse(200, chart_body([float(index) + 1]))
        for index, symbol in enumerate(symbols)
    }
    routes["T5"] = HttpResponse(500, "down")
    transport = routing_transport(routes)
    config = RequestConfig(
        batch_policy=BatchPolicy.PARTIAL,
        batch_size=5,
        max_workers=4,
        max_retries=1,
    )
    client = QuoteClient(config, transport=transport, sleep=sleeps.append)

    batch = client.fetch_batch(symbols)

    assert set(batch.results) == set(symbols) - {"T5"}
    assert isinstance(batch.errors["T5"], NetworkError)
    assert batch["T11"].closes() == [12.0]


def test_concurrent_fail_fast_raises(routing_transport, chart_body, sleeps) -> None:
    routes = _routes(chart_body)
    transport = routing_transport(routes)
    config = RequestConfig(max_workers=3)
    client = QuoteClient(config, transport=transport, sleep=sleeps.append)

    with pytest.raises(ParseError):
        client.fetch_batch(["AAPL", "BAD", "MSFT"])


def test_price_and_info_batches_share_the_policy(
    routing_transport, chart_body, summary_body, sleeps
) -> None:
    transport = routing_transport(
        {
            "AAPL": HttpResponse(200, chart_body([190.0, 191.5], step=60)),
            "BAD": HttpResponse(200, "{}"),
        }
    )
    partial = QuoteClient(
        RequestConfig(batch_policy=BatchPolicy.PARTIAL), transport=transport, sleep=sleeps.append
    )

    prices = partial.get_current_price_batch(["AAPL", "BAD"])
    assert prices.results == {"AAPL": 191.5}
    assert isinstance(prices.errors["BAD"], ParseError)

    info_transport = routing_transport(
        {"AAPL": HttpResponse(200, summary_body("AAPL")), "BAD": HttpResponse(200, "[]")}
    )
    strict = QuoteClient(RequestConfig(), transport=info_transport, sleep=sleeps.append)
    with pytest.raises(ParseError):
        strict.fetch_info_batch(["AAPL", "BAD"])


def test_run_batch_with_plain_callable() -> None:
    def fetch_one(symbol: str) -> int:
        if symbol == "X":
            raise ValidationError("bad symbol")
        return len(symbol)

    config = RequestConfig(batch_policy=BatchPolicy.PARTIAL, batch_size=2)
    batch = run_batch(["AB", "X", "ABC"], fetch_one, config)

    assert isinstance(batch, BatchResult)
    assert batch.results == {"AB": 2, "ABC": 3}
    assert list(batch.errors) == ["X"]
