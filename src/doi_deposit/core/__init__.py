"""
Core abstractions and data models for the DOI deposit pipeline.
"""

from .models import (
    ObjectKind, Tenant, RegisterableObject, DepositOutcome, DepositResult,
    DepositAttempt, LogSeverity, LogEntry, RunLog, SkipReason, SkipRecord,
    EligibilityResult, RunMetrics,
)
from .collaborators import (
    TenantRepository, IdentifierPlugin, IdentifierPluginResolver,
    ObjectRepository, DocumentProducer, TransientStorage, DepositTransport,
    RunLogSink, RegistrationPlugin,
)
from .exceptions import (
    DepositError, DocumentError, TransportError, ConfigError,
    PluginUnavailableError,
)

__all__ = [
    # Models
    "ObjectKind",
    "Tenant",
    "RegisterableObject",
    "DepositOutcome",
    "DepositResult",
    "DepositAttempt",
    "LogSeverity",
    "LogEntry",
    "RunLog",
    "SkipReason",
    "SkipRecord",
    "EligibilityResult",
    "RunMetrics",
    # Collaborators
    "TenantRepository",
    "IdentifierPlugin",
    "IdentifierPluginResolver",
    "ObjectRepository",
    "DocumentProducer",
    "TransientStorage",
    "DepositTransport",
    "RunLogSink",
    "RegistrationPlugin",
    # Exceptions
    "DepositError",
    "DocumentError",
    "TransportError",
    "ConfigError",
    "PluginUnavailableError",
]
