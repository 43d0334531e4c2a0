"""Logging setup and a latency-logging decorator for sync and async callables."""

import asyncio
import logging
import time
from functools import wraps
from typing import Callable, Union

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

# Third-party loggers that are chatty at INFO.
_NOISY_LOGGERS = ("botocore", "urllib3", "httpx", "google_genai", "sentence_transformers")


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def log_latency(operation_name: str):
    """Log how long the wrapped call took and whether it raised."""

    def decorator(func: Callable):
        logger = logging.getLogger(func.__module__)

        def _report(start: float, error: Exception = None) -> None:
            latency_ms = (time.perf_counter() - start) * 1000
            if error is None:
                logger.info(f"{operation_name} | latency_ms={latency_ms:.2f} | status=success")
            else:
                logger.error(
                    f"{operation_name} | latency_ms={latency_ms:.2f} | status=error | "
                    f"error={type(error).__name__}: {error}"
                )

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _report(start, e)
                raise
            _report(start)
            return result

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _report(start, e)
                raise
            _report(start)
            return result

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
