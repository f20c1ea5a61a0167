"""
Shared test fixtures and configuration for pytest.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from doi_deposit.connectors.test_transport import TestTransport
from doi_deposit.core.collaborators import RegistrationPlugin
from doi_deposit.repositories import (
    SimpleXmlDocumentProducer,
    build_in_memory_collaborators,
)
from doi_deposit.runner import DepositRunner
from doi_deposit.storage import LocalTransientStorage


logger = logging.getLogger(__name__)


# ============================================================================
# Pytest hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "e2e: End-to-end tests (full pipeline with local files)")


# ============================================================================
# Builders
# ============================================================================

def tenant_config(
    tenant_id: str = "1",
    path: str = "journal-a",
    configured: bool = True,
    doi_plugin: Optional[Dict[str, Any]] = None,
    objects: Optional[List[Dict[str, Any]]] = None,
    install_plugin: bool = True,
) -> Dict[str, Any]:
    """
    Build one entry of the ``tenants`` configuration section.

    A configured tenant has credentials and automatic registration on;
    the default DOI plugin is enabled with prefix 10.1234 and all kinds on.
    """
    entry: Dict[str, Any] = {
        "id": tenant_id,
        "path": path,
        "settings": (
            {"username": "user", "password": "secret", "automaticRegistration": True}
            if configured else {}
        ),
        "objects": objects or [],
    }
    if install_plugin:
        entry["doi_plugin"] = doi_plugin if doi_plugin is not None else {
            "enabled": True,
            "doiPrefix": "10.1234",
            "enableIssueDoi": True,
            "enablePublicationDoi": True,
            "enableRepresentationDoi": True,
        }
    return entry


def obj_config(object_id: str, kind: str = "issue", **extra: Any) -> Dict[str, Any]:
    """Build one object entry with a DOI and landing page."""
    entry = {
        "id": object_id,
        "kind": kind,
        "doi": f"10.1234/{kind}.{object_id}",
        "url": f"https://journal.example.com/{kind}/{object_id}",
    }
    entry.update(extra)
    return entry


class Pipeline:
    """Runner plus the collaborators a test wants to inspect."""

    def __init__(self, runner, transport, storage, tenants, resolver, objects):
        self.runner = runner
        self.transport = transport
        self.storage = storage
        self.tenants = tenants
        self.resolver = resolver
        self.objects = objects

    def leftover_files(self) -> List[Path]:
        return list(Path(self.storage.base_dir).iterdir())


@pytest.fixture
def build_pipeline(tmp_path):
    """Factory fixture wiring a DepositRunner over in-memory collaborators."""

    def _build(
        tenant_configs: List[Dict[str, Any]],
        transport: Optional[TestTransport] = None,
        producer=None,
        log_sink=None,
    ) -> Pipeline:
        tenants, resolver, objects = build_in_memory_collaborators(tenant_configs)
        transport = transport or TestTransport()
        storage = LocalTransientStorage(base_dir=tmp_path / "export")
        plugin = RegistrationPlugin(
            objects=objects,
            producer=producer or SimpleXmlDocumentProducer(),
            transport=transport,
        )
        runner = DepositRunner(
            plugin=plugin,
            tenant_repository=tenants,
            plugin_resolver=resolver,
            storage=storage,
            log_sink=log_sink,
        )
        return Pipeline(runner, transport, storage, tenants, resolver, objects)

    return _build


@pytest.fixture
def make_tenant():
    """Factory fixture for tenant configuration entries."""
    return tenant_config


@pytest.fixture
def make_obj():
    """Factory fixture for object configuration entries."""
    return obj_config
