"""Tests for structured logging of repository operations."""

import io
import json
import logging
import sys

import pytest

from cosmos_repository import get_entity_information
from cosmos_repository.logging_utils import (
    RepositoryLoggerAdapter,
    StructuredJsonFormatter,
    configure_structured_logging,
)

from .domain import Contact, ReactiveContactRepository


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "cosmos_repository.test", logging.INFO, __file__, 1, "hello %s", ("x",), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredJsonFormatter:
    def test_standard_fields(self):
        output = json.loads(StructuredJsonFormatter().format(make_record()))
        assert output["level"] == "INFO"
        assert output["logger"] == "cosmos_repository.test"
        assert output["message"] == "hello x"
        assert output["timestamp"].endswith("+00:00")
        assert "cosmos" not in output

    def test_cosmos_context_grouped(self):
        record = make_record(container="contacts", request_charge=2.5, activity_id=None)
        output = json.loads(StructuredJsonFormatter().format(record))
        assert output["cosmos"] == {"container": "contacts", "request_charge": 2.5}

    def test_unrelated_extra_fields_ignored(self):
        output = json.loads(StructuredJsonFormatter().format(make_record(user="bob")))
        assert "user" not in output

    def test_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                "cosmos_repository.test", logging.ERROR, __file__, 1, "failed", (), None
            )
            record.exc_info = sys.exc_info()
        output = json.loads(StructuredJsonFormatter().format(record))
        assert "RuntimeError: boom" in output["exception"]


class TestConfigureStructuredLogging:
    def test_replaces_handlers(self):
        logger = configure_structured_logging(logging.DEBUG, "cosmos_repository.test_configure")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, StructuredJsonFormatter)
        configure_structured_logging(logging.INFO, "cosmos_repository.test_configure")
        assert len(logger.handlers) == 1
        logger.handlers.clear()

    @pytest.mark.asyncio
    async def test_template_writes_carry_context(self, template):
        stream = io.StringIO()
        logger = configure_structured_logging(logging.DEBUG, stream=stream)
        try:
            await template.insert(get_entity_information(Contact), Contact("c1", "mr"))
        finally:
            logger.handlers.clear()
            logger.setLevel(logging.NOTSET)

        lines = [json.loads(line) for line in stream.getvalue().splitlines()]
        contexts = [line["cosmos"] for line in lines if "cosmos" in line]
        assert {"container": "contacts", "operation": "insert"} in contexts
        charged = [ctx for ctx in contexts if "request_charge" in ctx]
        assert charged[0]["request_charge"] == 2.5
        assert charged[0]["activity_id"]


class TestRepositoryLoggerAdapter:
    def test_stamps_container_and_entity(self, caplog):
        adapter = RepositoryLoggerAdapter(
            logging.getLogger("cosmos_repository.test_adapter"),
            get_entity_information(Contact),
        )
        with caplog.at_level(logging.INFO, logger="cosmos_repository.test_adapter"):
            adapter.info("saved", extra={"operation": "save"})
        record = caplog.records[-1]
        assert record.container == "contacts"
        assert record.entity == "Contact"
        assert record.operation == "save"

    @pytest.mark.asyncio
    async def test_derived_query_logged_with_kind(self, template, caplog):
        repository = ReactiveContactRepository(template)
        with caplog.at_level(logging.DEBUG, logger="cosmos_repository.repository.base"):
            await repository.count_by_title("mr")
        record = next(r for r in caplog.records if "count_by_title" in r.getMessage())
        assert record.container == "contacts"
        assert record.operation == "count"
