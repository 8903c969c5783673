"""
Tests for structured logging: JSON format, context propagation, exceptions.
"""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from stock_kernel.exceptions import InvalidTransitionError
from stock_kernel.logging_config import (
    CONTEXT_FIELDS,
    LogContext,
    StructuredFormatter,
    get_logger,
)


@pytest.fixture
def formatted():
    """Logger wired to a private stream; returns (logger, read_records)."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    logger = get_logger("test.formatting")
    logger.addHandler(handler)

    def read():
        return [json.loads(line) for line in stream.getvalue().splitlines() if line]

    yield logger, read
    logger.removeHandler(handler)


class TestStructuredFormatter:
    def test_base_fields(self, formatted):
        logger, read = formatted

        logger.info("ledger_delta_applied")

        record = read()[0]
        assert record["message"] == "ledger_delta_applied"
        assert record["level"] == "INFO"
        assert record["logger"] == "stock_kernel.test.formatting"
        assert "ts" in record

    def test_extra_fields_serialized(self, formatted):
        logger, read = formatted
        product_id = uuid4()

        logger.info("x", extra={"product_id": product_id, "cost": Decimal("1.50")})

        record = read()[0]
        assert record["product_id"] == str(product_id)
        assert record["cost"] == "1.50"

    def test_context_fields(self, formatted):
        logger, read = formatted

        with LogContext.bind(transfer_id="t-1", actor_id="u-1"):
            logger.info("inside")
        logger.info("outside")

        inside, outside = read()
        assert inside["transfer_id"] == "t-1"
        assert inside["actor_id"] == "u-1"
        assert "transfer_id" not in outside

    def test_exception_fields(self, formatted):
        logger, read = formatted

        try:
            raise InvalidTransitionError("t-1", "ship", "pending")
        except InvalidTransitionError:
            logger.warning("rejected", exc_info=True)

        record = read()[0]
        assert record["exc_type"] == "InvalidTransitionError"
        assert record["exc_code"] == "INVALID_TRANSITION"
        assert record["exc_current_status"] == "pending"
        assert "traceback" in record


class TestLogContext:
    def test_set_and_clear(self):
        LogContext.set(run_id="r-1")

        assert LogContext.get_all() == {"run_id": "r-1"}

        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_nested_bind_restores(self):
        with LogContext.bind(transfer_id="outer"):
            with LogContext.bind(transfer_id="inner", run_id="r-2"):
                assert LogContext.get_all() == {"transfer_id": "inner", "run_id": "r-2"}
            assert LogContext.get_all() == {"transfer_id": "outer"}
        assert LogContext.get_all() == {}

    def test_bind_restores_after_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(actor_id="u-9"):
                raise RuntimeError("boom")

        assert LogContext.get_all() == {}

    def test_bind_stringifies_ids(self):
        transfer_id = uuid4()

        with LogContext.bind(transfer_id=transfer_id, actor_id=None):
            assert LogContext.get_all() == {"transfer_id": str(transfer_id)}

    @pytest.mark.parametrize("field", ["correlation_id", "producer", "sku"])
    def test_unknown_field_rejected(self, field):
        with pytest.raises(ValueError, match=field):
            LogContext.set(**{field: "x"})
        with pytest.raises(ValueError, match=field):
            with LogContext.bind(**{field: "x"}):
                pass

    def test_context_fields_are_this_projects(self):
        assert CONTEXT_FIELDS == ("actor_id", "transfer_id", "run_id")
