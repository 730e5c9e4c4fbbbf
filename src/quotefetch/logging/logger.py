"""Logger setup and concise fetch log lines."""

from __future__ import annotations

import logging

LOGGER_NAME = "quotefetch"


def setup_logger(log_level: str = "INFO", log_file: str | None = None) -> logging.Logger:
    """Configure and return the library logger.

    Logs are written to console, plus an optional file if `log_file` is set.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.propagate = False

    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


class FetchLogger:
    """Fixed line types for fetch activity."""

    def __init__(self, name: str = LOGGER_NAME) -> None:
        self._logger = logging.getLogger(name)

    def request(self, url: str, attempt: int, max_attempts: int, proxy: str | None = None) -> None:
        via = f" | via {proxy}" if proxy else ""
        self._logger.debug("request | %s | attempt %s/%s%s", url, attempt, max_attempts, via)

    def retry(self, reason: str, attempt: int, max_attempts: int, delay_ms: int) -> None:
        self._logger.warning(
            "retry | %s (attempt %s/%s). Retrying in %.2fs.",
            reason,
            attempt,
            max_attempts,
            delay_ms / 1000.0,
        )

    def fetched(self, symbol: str, interval: str, period: str, bar_count: int) -> None:
        self._logger.info("fetch | %s | %s/%s | %s bars", symbol, interval, period, bar_count)

    def fetched_info(self, symbol: str, name: str | None) -> None:
        self._logger.info("info | %s | %s", symbol, name or "-")

    def batch_chunk(self, index: int, total: int, symbols: list[str]) -> None:
        self._logger.info("batch | chunk %s/%s | %s", index, total, ",".join(symbols))

    def batch_summary(self, operation: str, succeeded: int, failed: int) -> None:
        self._logger.info("batch | %s | ok %s | failed %s", operation, succeeded, failed)

    def error(self, symbol: str, message: str) -> None:
        self._logger.error("error | %s | %s", symbol, message)
