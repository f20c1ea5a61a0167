"""
Core data models for the DOI deposit pipeline.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple


class ObjectKind(str, Enum):
    """
    Kind of registerable object.

    Values are the names the content repository uses for each kind
    (issue, article, galley).
    """
    COLLECTION = "issue"
    WORK = "article"
    REPRESENTATION = "galley"

    @property
    def enable_setting(self) -> str:
        """Identifier plugin setting that enables DOIs for this kind."""
        return _ENABLE_SETTINGS[self]

    @property
    def file_name_part(self) -> str:
        """Plural name used inside transient export file names."""
        return _FILE_NAME_PARTS[self]

    def filter_key(self, document_format: str = "datacite-xml") -> str:
        """Build the document producer filter key, e.g. 'issue=>datacite-xml'."""
        return f"{self.value}=>{document_format}"

    @classmethod
    def ordered(cls) -> List["ObjectKind"]:
        """Kinds in the order a run processes them."""
        return [cls.COLLECTION, cls.WORK, cls.REPRESENTATION]


_ENABLE_SETTINGS = {
    ObjectKind.COLLECTION: "enableIssueDoi",
    ObjectKind.WORK: "enablePublicationDoi",
    ObjectKind.REPRESENTATION: "enableRepresentationDoi",
}

_FILE_NAME_PARTS = {
    ObjectKind.COLLECTION: "issues",
    ObjectKind.WORK: "articles",
    ObjectKind.REPRESENTATION: "galleys",
}


@dataclass
class Tenant:
    """
    A publishing venue (journal) as seen by the deposit pipeline.

    Attributes:
        tenant_id: Repository identifier of the tenant
        path: Routable path/slug, used in log messages
        name: Optional display name
        settings: Raw settings snapshot, if the repository provides one
    """
    tenant_id: str
    path: str
    name: Optional[str] = None
    settings: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RegisterableObject:
    """
    A content record that can receive a DOI.

    The pipeline treats it as an opaque handle; only the document producer
    and the transport look inside ``pub_id``, ``url`` and ``metadata``.

    Attributes:
        object_id: Repository identifier of the record
        kind: Object kind
        tenant_id: Owning tenant
        pub_id: Assigned (not yet registered) DOI
        url: Landing page URL the DOI should resolve to
        metadata: Additional fields for the document producer
    """
    object_id: str
    kind: ObjectKind
    tenant_id: str
    pub_id: Optional[str] = None
    url: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class DepositOutcome(str, Enum):
    """Tag of a deposit result."""
    SUCCESS = "success"
    FAILURE = "failure"
    MALFORMED = "malformed"


DepositMessage = Tuple[str, Optional[str]]


@dataclass(frozen=True)
class DepositResult:
    """
    Outcome of one deposit attempt.

    Attributes:
        outcome: Success, structured failure, or malformed transport result
        messages: Ordered (code, param) pairs for structured failures
        raw: The unexpected value a transport returned, for malformed results
    """
    outcome: DepositOutcome
    messages: Tuple[DepositMessage, ...] = ()
    raw: Any = None

    @classmethod
    def success(cls) -> "DepositResult":
        return cls(outcome=DepositOutcome.SUCCESS)

    @classmethod
    def failure(cls, messages: Sequence[Sequence[Any]]) -> "DepositResult":
        return cls(
            outcome=DepositOutcome.FAILURE,
            messages=tuple(_to_message(m) for m in messages),
        )

    @classmethod
    def malformed(cls, raw: Any) -> "DepositResult":
        return cls(outcome=DepositOutcome.MALFORMED, raw=raw)

    @classmethod
    def from_transport(cls, value: Any) -> "DepositResult":
        """
        Classify a raw transport return value.

        ``True`` is success, a list or tuple of (code, param) pairs is a
        structured failure, anything else is malformed.
        """
        if value is True:
            return cls.success()
        if isinstance(value, (list, tuple)) and all(
            isinstance(m, (list, tuple)) and len(m) >= 1 for m in value
        ):
            return cls.failure(value)
        return cls.malformed(value)

    @property
    def ok(self) -> bool:
        return self.outcome == DepositOutcome.SUCCESS


def _to_message(message: Sequence[Any]) -> DepositMessage:
    code = str(message[0])
    param = message[1] if len(message) > 1 else None
    return code, (None if param is None else str(param))


@dataclass
class DepositAttempt:
    """
    One deposit of one object in one run.

    Attributes:
        obj: The object being registered
        document: Serialized registration document
        path: Transient file the document was written to
        result: Outcome of the deposit
    """
    obj: RegisterableObject
    document: bytes
    path: str
    result: DepositResult


class LogSeverity(str, Enum):
    """Severity of a run log entry."""
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class LogEntry:
    """
    A single formatted run log entry.

    Attributes:
        severity: Entry severity
        message: Human-readable message
        message_key: Untranslated message key
        params: Parameters the message was formatted with
        tenant_path: Tenant the entry is about, if any
        object_id: Object the entry is about, if any
        timestamp: When the entry was appended
    """
    severity: LogSeverity
    message: str
    message_key: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)
    tenant_path: Optional[str] = None
    object_id: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "message": self.message,
            "message_key": self.message_key,
            "params": self.params,
            "tenant_path": self.tenant_path,
            "object_id": self.object_id,
            "timestamp": self.timestamp.isoformat(),
        }


class RunLog:
    """Append-only, ordered log of one run."""

    def __init__(self):
        self._entries: List[LogEntry] = []

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)

    @property
    def entries(self) -> Tuple[LogEntry, ...]:
        return tuple(self._entries)

    def warnings(self) -> List[LogEntry]:
        return [e for e in self._entries if e.severity == LogSeverity.WARNING]

    def for_tenant(self, tenant_path: str) -> List[LogEntry]:
        return [e for e in self._entries if e.tenant_path == tenant_path]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)


class SkipReason(str, Enum):
    """Why a tenant was left out of a run."""
    NOT_CONFIGURED = "not_configured"
    IDENTIFIER_PLUGIN_DISABLED = "identifier_plugin_disabled"
    NO_PREFIX = "no_prefix"

    @property
    def warn(self) -> bool:
        """Whether this skip deserves a run log entry."""
        return self is SkipReason.NO_PREFIX


@dataclass(frozen=True)
class SkipRecord:
    """A tenant excluded from the run and the reason."""
    tenant: Tenant
    reason: SkipReason


@dataclass
class EligibilityResult:
    """
    Output of the eligibility pass.

    Attributes:
        eligible: Tenants to process, in repository order
        skipped: Excluded tenants with their reasons, in repository order
    """
    eligible: List[Tenant] = field(default_factory=list)
    skipped: List[SkipRecord] = field(default_factory=list)

    def warnings(self) -> List[SkipRecord]:
        return [s for s in self.skipped if s.reason.warn]


@dataclass
class RunMetrics:
    """Aggregate metrics for a run."""
    run_id: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    tenants_seen: int = 0
    tenants_eligible: int = 0
    tenants_skipped: int = 0
    objects_attempted: int = 0
    objects_succeeded: int = 0
    objects_failed: int = 0
    status: str = "running"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "tenants_seen": self.tenants_seen,
            "tenants_eligible": self.tenants_eligible,
            "tenants_skipped": self.tenants_skipped,
            "objects_attempted": self.objects_attempted,
            "objects_succeeded": self.objects_succeeded,
            "objects_failed": self.objects_failed,
            "status": self.status,
        }
