"""
Deposit executor: one deposit attempt for one object.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from ..core.collaborators import DepositTransport, TransientStorage
from ..core.messages import DEPOSIT_ERROR
from ..core.models import DepositAttempt, DepositResult, RegisterableObject, Tenant


logger = logging.getLogger(__name__)


class DepositExecutor:
    """
    Writes a document to transient storage, deposits it and cleans up.

    Every outcome is returned as data. The transient file is deleted
    whether the write, the deposit or neither failed.

    Example file name:
        datacite-20160723-160036-articles-1-17-3f2a9c1e.xml
    """

    def __init__(
        self,
        storage: TransientStorage,
        transport: DepositTransport,
        file_prefix: str = "datacite",
        extension: str = ".xml",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the executor.

        Args:
            storage: Transient storage for documents
            transport: Transport that performs the deposit
            file_prefix: Prefix of transient file names
            extension: File extension of transient files
            clock: Time source, used for file names
        """
        self.storage = storage
        self.transport = transport
        self.file_prefix = file_prefix
        self.extension = extension
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def build_file_name(self, obj: RegisterableObject, tenant: Tenant) -> str:
        """Build a transient file name unique to this object and attempt."""
        timestamp = self.clock().strftime("%Y%m%d-%H%M%S")
        suffix = uuid.uuid4().hex[:8]
        return (
            f"{self.file_prefix}-{timestamp}-{obj.kind.file_name_part}-"
            f"{_safe(tenant.tenant_id)}-{_safe(obj.object_id)}-{suffix}{self.extension}"
        )

    def execute(self, obj: RegisterableObject, document: bytes, tenant: Tenant) -> DepositAttempt:
        """
        Perform one deposit attempt.

        Args:
            obj: The object to register
            document: Serialized registration document
            tenant: Owning tenant

        Returns:
            DepositAttempt carrying the result; never raises
        """
        path = self.storage.path_for(self.build_file_name(obj, tenant))

        try:
            self.storage.write(path, document)
            raw = self.transport.deposit(obj, tenant, path)
            result = DepositResult.from_transport(raw)
        except Exception as e:
            logger.exception(
                f"Deposit of {obj.kind.value} {obj.object_id} via "
                f"{self.transport.get_name()} raised: {e}"
            )
            result = DepositResult.failure([(DEPOSIT_ERROR, str(e))])
        finally:
            self._cleanup(path)

        logger.debug(f"Deposit of {obj.kind.value} {obj.object_id}: {result.outcome.value}")
        return DepositAttempt(obj=obj, document=document, path=path, result=result)

    def _cleanup(self, path: str) -> None:
        """Remove the transient file."""
        try:
            self.storage.delete(path)
        except Exception as e:
            logger.error(f"Failed to remove transient file {path}: {e}")


def _safe(value: str) -> str:
    """Sanitize an identifier for use in file names."""
    safe = str(value).replace("/", "_").replace("\\", "_").replace(":", "_")
    if len(safe) > 64:
        safe = safe[:64]
    return safe
