"""
Interfaces of the collaborators the deposit pipeline depends on.

The pipeline only talks to these abstractions. Concrete implementations
live in the connectors, storage and repositories packages, or are
supplied by the hosting application.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from .models import LogEntry, ObjectKind, RegisterableObject, Tenant


class TenantRepository(ABC):
    """Read-only source of tenants and their registration settings."""

    @abstractmethod
    def list_tenants(self) -> List[Tenant]:
        """Return all tenants in repository order."""
        pass

    @abstractmethod
    def get_tenant_setting(self, tenant_id: str, key: str) -> Any:
        """
        Get a registration setting for a tenant.

        Args:
            tenant_id: Tenant identifier
            key: Setting name (e.g. 'username', 'automaticRegistration')

        Returns:
            The setting value, or None if absent
        """
        pass


class IdentifierPlugin(ABC):
    """Handle to the per-tenant DOI identifier plugin."""

    @abstractmethod
    def get_setting(self, tenant_id: str, key: str) -> Any:
        """Get an identifier plugin setting, or None if absent."""
        pass


class IdentifierPluginResolver(ABC):
    """Locates the DOI identifier plugin for a tenant."""

    @abstractmethod
    def resolve(self, tenant_id: str) -> Optional[IdentifierPlugin]:
        """Return the plugin handle, or None if it is not installed."""
        pass


class ObjectRepository(ABC):
    """Source of objects still waiting for DOI registration."""

    @abstractmethod
    def list_unregistered(self, tenant: Tenant, kind: ObjectKind) -> List[RegisterableObject]:
        """Return unregistered objects of a kind, in repository order."""
        pass

    def mark_registered(self, obj: RegisterableObject, tenant: Tenant) -> None:
        """Record a successful registration. Optional."""
        pass


class DocumentProducer(ABC):
    """Turns an object into a serialized registration document."""

    @abstractmethod
    def serialize(self, obj: RegisterableObject, filter_key: str, tenant: Tenant) -> bytes:
        """
        Serialize an object.

        Args:
            obj: The object to serialize
            filter_key: Kind-specific filter, e.g. 'article=>datacite-xml'
            tenant: Owning tenant

        Returns:
            Document bytes

        Raises:
            DocumentError if the object cannot be serialized
        """
        pass


class TransientStorage(ABC):
    """Scratch space for documents while they are being deposited."""

    @abstractmethod
    def path_for(self, file_name: str) -> str:
        """Return the full path for a file name."""
        pass

    @abstractmethod
    def write(self, path: str, data: bytes) -> None:
        """Write document bytes to a path."""
        pass

    @abstractmethod
    def delete(self, path: str) -> None:
        """Delete a path. Must tolerate a path that was never written."""
        pass


class DepositTransport(ABC):
    """Client that submits a document to the registration authority."""

    @abstractmethod
    def deposit(self, obj: RegisterableObject, tenant: Tenant, path: str) -> Any:
        """
        Deposit the document stored at ``path``.

        Returns:
            True on success, a sequence of (message_code, param) pairs on
            structured failure. Any other value is treated as a generic
            deposit error.
        """
        pass

    def get_name(self) -> str:
        """Return the transport name."""
        return type(self).__name__


class RunLogSink(ABC):
    """Destination of the run log once a run completes."""

    @abstractmethod
    def flush(self, run_id: str, entries: Iterable[LogEntry]) -> None:
        """Persist the entries of a finished run."""
        pass

    def close(self) -> None:
        """Close any open resources. Optional."""
        pass


@dataclass
class RegistrationPlugin:
    """
    The registration-side collaborators of a run.

    Attributes:
        objects: Source of unregistered objects
        producer: Document producer
        transport: Deposit transport
        document_format: Format part of the producer filter key
        file_prefix: Prefix of transient export file names
    """
    objects: ObjectRepository
    producer: DocumentProducer
    transport: DepositTransport
    document_format: str = "datacite-xml"
    file_prefix: str = "datacite"
