"""
In-memory collaborators.

Reference implementations of the repository interfaces, backed by plain
dictionaries. They can be built from the ``tenants`` section of the
deposit configuration for dry runs and local testing.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple
from xml.etree import ElementTree

from ..core.collaborators import (
    DocumentProducer,
    IdentifierPlugin,
    IdentifierPluginResolver,
    ObjectRepository,
    TenantRepository,
)
from ..core.exceptions import DocumentError
from ..core.models import ObjectKind, RegisterableObject, Tenant


logger = logging.getLogger(__name__)


class InMemoryTenantRepository(TenantRepository):
    """Tenants with their registration settings held in ``Tenant.settings``."""

    def __init__(self, tenants: Iterable[Tenant]):
        self._tenants = list(tenants)
        self._by_id = {t.tenant_id: t for t in self._tenants}

    def list_tenants(self) -> List[Tenant]:
        return list(self._tenants)

    def get_tenant_setting(self, tenant_id: str, key: str) -> Any:
        tenant = self._by_id.get(tenant_id)
        if tenant is None:
            return None
        return tenant.settings.get(key)


class InMemoryIdentifierPlugin(IdentifierPlugin):
    """DOI plugin settings keyed by tenant id."""

    def __init__(self, settings: Optional[Dict[str, Dict[str, Any]]] = None):
        self.settings = settings or {}

    def get_setting(self, tenant_id: str, key: str) -> Any:
        return self.settings.get(tenant_id, {}).get(key)


class InMemoryIdentifierPluginResolver(IdentifierPluginResolver):
    """
    Resolves a shared plugin for tenants that have it installed.

    Tenants not listed in ``installed_for`` have no DOI plugin.
    """

    def __init__(self, plugin: InMemoryIdentifierPlugin, installed_for: Iterable[str]):
        self.plugin = plugin
        self.installed_for: Set[str] = set(installed_for)

    def resolve(self, tenant_id: str) -> Optional[IdentifierPlugin]:
        if tenant_id in self.installed_for:
            return self.plugin
        return None


class InMemoryObjectRepository(ObjectRepository):
    """Objects per tenant; registered ids are remembered across runs."""

    def __init__(self, objects: Iterable[RegisterableObject] = ()):
        self._objects: List[RegisterableObject] = list(objects)
        self.registered: Set[Tuple[str, str, str]] = set()

    def add(self, obj: RegisterableObject) -> None:
        self._objects.append(obj)

    def list_unregistered(self, tenant: Tenant, kind: ObjectKind) -> List[RegisterableObject]:
        return [
            o for o in self._objects
            if o.tenant_id == tenant.tenant_id
            and o.kind == kind
            and _key(o) not in self.registered
        ]

    def mark_registered(self, obj: RegisterableObject, tenant: Tenant) -> None:
        self.registered.add(_key(obj))
        logger.debug(f"Marked {obj.kind.value} {obj.object_id} registered")


def _key(obj: RegisterableObject) -> Tuple[str, str, str]:
    return obj.tenant_id, obj.kind.value, obj.object_id


class SimpleXmlDocumentProducer(DocumentProducer):
    """
    Renders an object as a small XML document.

    Only meant for dry runs; real deployments plug in the schema-aware
    producer of the hosting application.
    """

    def serialize(self, obj: RegisterableObject, filter_key: str, tenant: Tenant) -> bytes:
        if not obj.pub_id:
            raise DocumentError(
                f"{obj.kind.value} {obj.object_id} has no DOI assigned",
                object_id=obj.object_id,
                filter_key=filter_key,
            )

        root = ElementTree.Element("resource", {"filter": filter_key})
        identifier = ElementTree.SubElement(root, "identifier", {"identifierType": "DOI"})
        identifier.text = obj.pub_id
        ElementTree.SubElement(root, "publisher").text = tenant.name or tenant.path
        if obj.url:
            ElementTree.SubElement(root, "url").text = obj.url
        for key, value in sorted(obj.metadata.items()):
            ElementTree.SubElement(root, str(key)).text = str(value)

        return ElementTree.tostring(root, encoding="utf-8", xml_declaration=True)


def build_in_memory_collaborators(
    tenant_configs: List[Dict[str, Any]],
) -> Tuple[InMemoryTenantRepository, InMemoryIdentifierPluginResolver, InMemoryObjectRepository]:
    """
    Build repositories from the ``tenants`` configuration section.

    Each tenant entry looks like:

        - id: "1"
          path: journal-a
          settings: {username: u, password: p, automaticRegistration: true}
          doi_plugin: {enabled: true, doiPrefix: "10.1234", enableIssueDoi: true}
          objects:
            - {id: "5", kind: issue, doi: "10.1234/a.5", url: "https://..."}

    Omitting ``doi_plugin`` means the tenant has no DOI plugin installed.

    Returns:
        (tenant_repository, plugin_resolver, object_repository)
    """
    tenants = []
    plugin_settings: Dict[str, Dict[str, Any]] = {}
    installed_for = []
    objects = []

    for entry in tenant_configs:
        tenant_id = str(entry["id"])
        tenants.append(Tenant(
            tenant_id=tenant_id,
            path=entry.get("path", tenant_id),
            name=entry.get("name"),
            settings=dict(entry.get("settings") or {}),
        ))

        if "doi_plugin" in entry:
            plugin_settings[tenant_id] = dict(entry["doi_plugin"] or {})
            installed_for.append(tenant_id)

        for obj in entry.get("objects") or []:
            metadata = {
                k: v for k, v in obj.items() if k not in ("id", "kind", "doi", "url")
            }
            objects.append(RegisterableObject(
                object_id=str(obj["id"]),
                kind=ObjectKind(obj["kind"]),
                tenant_id=tenant_id,
                pub_id=obj.get("doi"),
                url=obj.get("url"),
                metadata=metadata,
            ))

    logger.info(f"Built in-memory collaborators: {len(tenants)} tenants, {len(objects)} objects")

    plugin = InMemoryIdentifierPlugin(plugin_settings)
    return (
        InMemoryTenantRepository(tenants),
        InMemoryIdentifierPluginResolver(plugin, installed_for),
        InMemoryObjectRepository(objects),
    )
