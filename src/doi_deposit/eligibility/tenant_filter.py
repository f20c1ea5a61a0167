"""
Eligibility filter: which tenants take part in automatic DOI deposit.
"""

import logging

from ..core.collaborators import IdentifierPluginResolver, TenantRepository
from ..core.models import EligibilityResult, SkipReason, SkipRecord, Tenant


logger = logging.getLogger(__name__)


# Registration plugin settings every eligible tenant needs
REQUIRED_SETTINGS = ("username", "password", "automaticRegistration")


class TenantEligibilityFilter:
    """
    Decides which tenants qualify for automatic registration this run.

    Rules, applied per tenant in repository order:
    1. No account name, password or automatic registration flag: skipped
       silently (not configured yet).
    2. Identifier plugin installed but disabled: skipped silently.
    3. Identifier plugin enabled without a DOI prefix: skipped with a
       warning.
    4. Identifier plugin enabled with a prefix: eligible.
    5. No identifier plugin installed at all: eligible.
    """

    def __init__(
        self,
        tenant_repository: TenantRepository,
        plugin_resolver: IdentifierPluginResolver,
    ):
        self.tenant_repository = tenant_repository
        self.plugin_resolver = plugin_resolver

    def evaluate(self) -> EligibilityResult:
        """
        Run a full pass over all tenants.

        Returns:
            EligibilityResult with eligible tenants and skip records
        """
        result = EligibilityResult()

        for tenant in self.tenant_repository.list_tenants():
            reason = self._check(tenant)
            if reason is None:
                result.eligible.append(tenant)
            else:
                result.skipped.append(SkipRecord(tenant=tenant, reason=reason))

        logger.info(
            f"Eligibility: {len(result.eligible)} eligible, "
            f"{len(result.skipped)} skipped"
        )
        return result

    def _check(self, tenant: Tenant):
        """Return the skip reason for a tenant, or None if it is eligible."""
        for key in REQUIRED_SETTINGS:
            if not self.tenant_repository.get_tenant_setting(tenant.tenant_id, key):
                logger.debug(f"Tenant {tenant.path}: '{key}' not configured")
                return SkipReason.NOT_CONFIGURED

        plugin = self.plugin_resolver.resolve(tenant.tenant_id)
        if plugin is None:
            # Without a DOI plugin there is no prefix to check
            logger.debug(f"Tenant {tenant.path}: no DOI plugin installed")
            return None

        if not plugin.get_setting(tenant.tenant_id, "enabled"):
            logger.debug(f"Tenant {tenant.path}: DOI plugin disabled")
            return SkipReason.IDENTIFIER_PLUGIN_DISABLED

        if not plugin.get_setting(tenant.tenant_id, "doiPrefix"):
            logger.debug(f"Tenant {tenant.path}: no DOI prefix configured")
            return SkipReason.NO_PREFIX

        return None
