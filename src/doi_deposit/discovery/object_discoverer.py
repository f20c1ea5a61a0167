"""
Object discovery: unregistered objects per tenant and kind.
"""

import logging
from typing import List

from ..core.collaborators import IdentifierPluginResolver, ObjectRepository
from ..core.models import ObjectKind, RegisterableObject, Tenant


logger = logging.getLogger(__name__)


class ObjectDiscoverer:
    """
    Enumerates objects still waiting for a DOI.

    A kind is only queried when the tenant's DOI plugin enables it
    (enableIssueDoi, enablePublicationDoi, enableRepresentationDoi).
    Disabled kinds and empty results are routine and produce no log
    entries.
    """

    def __init__(
        self,
        object_repository: ObjectRepository,
        plugin_resolver: IdentifierPluginResolver,
    ):
        self.object_repository = object_repository
        self.plugin_resolver = plugin_resolver

    def is_enabled(self, tenant: Tenant, kind: ObjectKind) -> bool:
        """Check the tenant's enablement flag for a kind."""
        plugin = self.plugin_resolver.resolve(tenant.tenant_id)
        if plugin is None:
            return False
        return bool(plugin.get_setting(tenant.tenant_id, kind.enable_setting))

    def discover(self, tenant: Tenant, kind: ObjectKind) -> List[RegisterableObject]:
        """
        Get unregistered objects of a kind.

        Args:
            tenant: The tenant to search
            kind: Object kind

        Returns:
            Objects in repository order; empty if the kind is disabled
        """
        if not self.is_enabled(tenant, kind):
            logger.debug(f"Tenant {tenant.path}: {kind.value} DOIs disabled")
            return []

        objects = list(self.object_repository.list_unregistered(tenant, kind))
        logger.debug(
            f"Tenant {tenant.path}: {len(objects)} unregistered {kind.file_name_part}"
        )
        return objects
