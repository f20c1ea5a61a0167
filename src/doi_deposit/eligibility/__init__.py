"""
Tenant eligibility for automatic DOI deposit.
"""

from .tenant_filter import TenantEligibilityFilter, REQUIRED_SETTINGS

__all__ = ["TenantEligibilityFilter", "REQUIRED_SETTINGS"]
