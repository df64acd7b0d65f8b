"""Tests for logging context managers."""

import asyncio
import logging

import pytest

from fare_compare.compare_logging import (
    ContextFilter,
    LogContext,
    log_comparison_context,
    log_context,
)


@pytest.mark.unit
class TestLogContext:
    @pytest.fixture
    def logger(self):
        logger = logging.getLogger("test.fare_compare.context")
        logger.setLevel(logging.DEBUG)
        return logger

    @pytest.fixture
    def captured_records(self, logger):
        records: list[logging.LogRecord] = []

        class RecordCapture(logging.Handler):
            def emit(self, record: logging.LogRecord) -> None:
                records.append(record)

        handler = RecordCapture()
        handler.addFilter(ContextFilter())
        logger.addHandler(handler)
        yield records
        logger.removeHandler(handler)
        LogContext.clear()

    def test_log_context_adds_fields(self, logger, captured_records):
        with log_context(provider_id="uber"):
            logger.info("Test message")

        assert captured_records[0].provider_id == "uber"

    def test_context_restored_after_block(self, logger, captured_records):
        with log_context(provider_id="uber"):
            with log_context(provider_id="careem"):
                logger.info("inner")
            logger.info("outer")
        logger.info("after")

        assert captured_records[0].provider_id == "careem"
        assert captured_records[1].provider_id == "uber"
        assert not hasattr(captured_records[2], "provider_id")

    def test_comparison_context_sets_correlation_id(self, logger, captured_records):
        with log_comparison_context("cmp-42"):
            logger.info("comparing")

        record = captured_records[0]
        assert record.comparison_id == "cmp-42"
        assert record.correlation_id == "cmp-42"

    def test_context_overrides_default_correlation_placeholder(self, logger, captured_records):
        with log_comparison_context("cmp-7"):
            logger.info("comparing", extra={"correlation_id": "-"})

        assert captured_records[0].correlation_id == "cmp-7"

    async def test_concurrent_tasks_do_not_share_context(self, logger, captured_records):
        async def compare(comparison_id: str) -> None:
            with log_comparison_context(comparison_id):
                await asyncio.sleep(0)
                logger.info("done")

        await asyncio.gather(compare("a"), compare("b"))

        assert sorted(r.comparison_id for r in captured_records) == ["a", "b"]
