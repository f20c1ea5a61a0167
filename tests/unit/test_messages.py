"""
Unit tests for message formatting and correlation logging.
"""

import json
import logging

from doi_deposit.core.logging import (
    CorrelationContext,
    HumanReadableFormatter,
    StructuredFormatter,
    log_with_context,
)
from doi_deposit.core.messages import (
    DEPOSIT_ERROR,
    NO_DOI_PREFIX,
    NO_PARAM,
    CatalogMessageFormatter,
    default_formatter,
)


class TestCatalogMessageFormatter:
    """Tests for CatalogMessageFormatter."""

    def test_known_key(self):
        message = default_formatter(NO_DOI_PREFIX, {"path": "journal-a"})

        assert "journal-a" in message
        assert "DOI prefix" in message

    def test_generic_deposit_error(self):
        message = default_formatter(DEPOSIT_ERROR, {"param": NO_PARAM})

        assert "' - '" in message

    def test_unknown_key_keeps_key_and_params(self):
        assert default_formatter("err.code", {"param": "p1"}) == "err.code (param=p1)"
        assert default_formatter("err.code", {}) == "err.code"

    def test_missing_template_param_falls_back(self):
        assert default_formatter(NO_DOI_PREFIX, {}) == NO_DOI_PREFIX

    def test_custom_catalog(self):
        formatter = CatalogMessageFormatter({"err.code": "Failed: {param}"})

        assert formatter("err.code", {"param": "p1"}) == "Failed: p1"
        assert "journal-a" in formatter(NO_DOI_PREFIX, {"path": "journal-a"})


class TestCorrelationLogging:
    """Tests for correlation contexts and formatters."""

    def test_nested_contexts_inherit_fields(self):
        with CorrelationContext(run_id="r1"):
            with CorrelationContext(tenant="journal-a", object_id=None):
                assert CorrelationContext.get_current() == {"run_id": "r1", "tenant": "journal-a"}
            assert CorrelationContext.get_current() == {"run_id": "r1"}
        assert CorrelationContext.get_current() == {}

    def test_log_with_context_attaches_fields(self, caplog):
        logger = logging.getLogger("doi_deposit.test")

        with caplog.at_level(logging.INFO, logger="doi_deposit.test"):
            with CorrelationContext(run_id="r1", tenant="journal-a"):
                log_with_context(logger, logging.INFO, "Depositing", object_id="7")

        record = caplog.records[-1]
        assert record.run_id == "r1"
        assert record.tenant == "journal-a"
        assert record.object_id == "7"

    def test_structured_formatter(self):
        record = logging.LogRecord("doi_deposit", logging.WARNING, __file__, 1, "msg", None, None)
        record.run_id = "r1"

        data = json.loads(StructuredFormatter(include_timestamp=False).format(record))

        assert data == {"level": "WARNING", "logger": "doi_deposit", "message": "msg", "run_id": "r1"}

    def test_human_readable_formatter(self):
        record = logging.LogRecord("doi_deposit", logging.INFO, __file__, 1, "msg", None, None)
        record.tenant = "journal-a"

        line = HumanReadableFormatter(include_timestamp=False).format(record)

        assert line == "[INFO] doi_deposit - msg [tenant=journal-a]"
