"""
Unit tests for the tenant eligibility filter.
"""

import logging

import pytest

from doi_deposit.core.models import SkipReason
from doi_deposit.eligibility import TenantEligibilityFilter
from doi_deposit.repositories import build_in_memory_collaborators


def evaluate(tenant_configs):
    tenants, resolver, _ = build_in_memory_collaborators(tenant_configs)
    return TenantEligibilityFilter(tenants, resolver).evaluate()


class TestTenantEligibilityFilter:
    """Tests for TenantEligibilityFilter."""

    def test_fully_configured_tenant_is_eligible(self, make_tenant):
        result = evaluate([make_tenant()])

        assert [t.path for t in result.eligible] == ["journal-a"]
        assert result.skipped == []

    @pytest.mark.parametrize("missing", ["username", "password", "automaticRegistration"])
    def test_missing_registration_setting_is_silent_skip(self, make_tenant, missing):
        entry = make_tenant()
        del entry["settings"][missing]

        result = evaluate([entry])

        assert result.eligible == []
        assert [s.reason for s in result.skipped] == [SkipReason.NOT_CONFIGURED]
        assert result.warnings() == []

    def test_automatic_registration_off_is_silent_skip(self, make_tenant):
        entry = make_tenant()
        entry["settings"]["automaticRegistration"] = False

        result = evaluate([entry])

        assert result.eligible == []
        assert result.warnings() == []

    def test_disabled_doi_plugin_is_silent_skip(self, make_tenant):
        entry = make_tenant(doi_plugin={"enabled": False, "doiPrefix": "10.1234"})

        result = evaluate([entry])

        assert result.eligible == []
        assert [s.reason for s in result.skipped] == [SkipReason.IDENTIFIER_PLUGIN_DISABLED]
        assert result.warnings() == []

    def test_missing_prefix_warns(self, make_tenant):
        entry = make_tenant(doi_plugin={"enabled": True, "enableIssueDoi": True})

        result = evaluate([entry])

        assert result.eligible == []
        assert [s.reason for s in result.warnings()] == [SkipReason.NO_PREFIX]
        assert result.warnings()[0].tenant.path == "journal-a"

    def test_missing_prefix_is_not_logged_as_python_warning(self, make_tenant, caplog):
        """The run log entry is the only warning for a missing prefix."""
        entry = make_tenant(doi_plugin={"enabled": True})

        with caplog.at_level(logging.DEBUG, logger="doi_deposit.eligibility"):
            evaluate([entry])

        assert [r.levelno for r in caplog.records if r.levelno >= logging.WARNING] == []
        assert any("no DOI prefix" in r.getMessage() for r in caplog.records)

    def test_empty_prefix_counts_as_missing(self, make_tenant):
        entry = make_tenant(doi_plugin={"enabled": True, "doiPrefix": ""})

        result = evaluate([entry])

        assert [s.reason for s in result.skipped] == [SkipReason.NO_PREFIX]

    def test_tenant_without_doi_plugin_is_eligible(self, make_tenant):
        """No DOI plugin installed does not exclude the tenant."""
        result = evaluate([make_tenant(install_plugin=False)])

        assert [t.path for t in result.eligible] == ["journal-a"]
        assert result.skipped == []

    def test_credentials_checked_before_plugin(self, make_tenant):
        """An unconfigured tenant never reaches the prefix warning."""
        entry = make_tenant(configured=False, doi_plugin={"enabled": True})

        result = evaluate([entry])

        assert [s.reason for s in result.skipped] == [SkipReason.NOT_CONFIGURED]
        assert result.warnings() == []

    def test_repository_order_preserved(self, make_tenant):
        result = evaluate([
            make_tenant("3", "c"),
            make_tenant("1", "a", configured=False),
            make_tenant("2", "b"),
            make_tenant("4", "d", doi_plugin={"enabled": True}),
        ])

        assert [t.path for t in result.eligible] == ["c", "b"]
        assert [s.tenant.path for s in result.skipped] == ["a", "d"]
