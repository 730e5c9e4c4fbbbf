"""Remote data access: transport, retry, parsing and the fetch client."""

from .batch import BatchResult, chunk_symbols, run_batch
from .client import QuoteClient
from .parsers import ChartPayload, ResponseParser, YahooResponseParser
from .retry import FetchRequest, RetryController, backoff_delay_ms
from .transport import HttpResponse, RequestsTransport, Transport

__all__ = [
    "BatchResult",
    "ChartPayload",
    "FetchRequest",
    "HttpResponse",
    "QuoteClient",
    "RequestsTransport",
    "ResponseParser",
    "RetryController",
    "Transport",
    "YahooResponseParser",
    "backoff_delay_ms",
    "chunk_symbols",
    "run_batch",
]
