"""
Tests for the latency logging decorator.
"""

import logging

import pytest

from fidgetech_rag.logging_config import log_latency


@log_latency("test.sync")
def add(a, b):
    return a + b


@log_latency("test.async")
async def fail_async():
    raise RuntimeError("nope")


def test_sync_success_is_logged(caplog):
    with caplog.at_level(logging.INFO, logger=__name__):
        assert add(1, 2) == 3

    assert "test.sync | latency_ms=" in caplog.text
    assert "status=success" in caplog.text


async def test_async_error_is_logged_and_reraised(caplog):
    with caplog.at_level(logging.INFO, logger=__name__):
        with pytest.raises(RuntimeError):
            await fail_async()

    assert "test.async" in caplog.text
    assert "status=error" in caplog.text
    assert "RuntimeError: nope" in caplog.text
