"""
Reference repository implementations.
"""

from .in_memory import (
    InMemoryTenantRepository,
    InMemoryIdentifierPlugin,
    InMemoryIdentifierPluginResolver,
    InMemoryObjectRepository,
    SimpleXmlDocumentProducer,
    build_in_memory_collaborators,
)

__all__ = [
    "InMemoryTenantRepository",
    "InMemoryIdentifierPlugin",
    "InMemoryIdentifierPluginResolver",
    "InMemoryObjectRepository",
    "SimpleXmlDocumentProducer",
    "build_in_memory_collaborators",
]
