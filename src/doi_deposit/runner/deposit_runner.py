"""
Main execution runner for the DOI deposit job.
"""

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..core.collaborators import (
    IdentifierPluginResolver,
    RegistrationPlugin,
    RunLogSink,
    TenantRepository,
    TransientStorage,
)
from ..core.exceptions import DocumentError
from ..core.logging import CorrelationContext, log_with_context
from ..core.messages import (
    DEPOSIT_ERROR,
    DOCUMENT_ERROR,
    NO_DOI_PREFIX,
    NO_PARAM,
    PLUGIN_UNAVAILABLE,
    RUN_CANCELLED,
    MessageFormatter,
    default_formatter,
)
from ..core.models import (
    DepositOutcome,
    DepositResult,
    LogEntry,
    LogSeverity,
    ObjectKind,
    RegisterableObject,
    RunLog,
    RunMetrics,
    Tenant,
)
from ..deposit.deposit_executor import DepositExecutor
from ..discovery.object_discoverer import ObjectDiscoverer
from ..eligibility.tenant_filter import TenantEligibilityFilter


logger = logging.getLogger(__name__)


_PYTHON_LEVELS = {
    LogSeverity.NOTICE: logging.INFO,
    LogSeverity.WARNING: logging.WARNING,
    LogSeverity.ERROR: logging.ERROR,
}


class DepositRunner:
    """
    Orchestrator for one scheduled deposit run.

    Manages the workflow:
    1. Select eligible tenants
    2. For each tenant and each enabled object kind, discover unregistered objects
    3. Serialize and deposit each object
    4. Turn failures into run log entries and keep going
    5. Flush the run log to the sink
    """

    def __init__(
        self,
        plugin: Optional[RegistrationPlugin],
        tenant_repository: TenantRepository,
        plugin_resolver: IdentifierPluginResolver,
        storage: TransientStorage,
        log_sink: Optional[RunLogSink] = None,
        message_formatter: Optional[MessageFormatter] = None,
    ):
        """
        Initialize the deposit runner.

        Args:
            plugin: Registration collaborators; None if the plugin is unavailable
            tenant_repository: Tenants and registration settings
            plugin_resolver: Locates each tenant's DOI plugin
            storage: Transient storage for export documents
            log_sink: Optional destination for the run log
            message_formatter: Renders message keys into text
        """
        self.plugin = plugin
        self.tenant_repository = tenant_repository
        self.plugin_resolver = plugin_resolver
        self.storage = storage
        self.log_sink = log_sink
        self.format_message = message_formatter or default_formatter

        self.run_log = RunLog()
        self.metrics: Optional[RunMetrics] = None
        self._shutdown_event = threading.Event()

    def run(self, run_id: Optional[str] = None) -> bool:
        """
        Run the deposit job once.

        Args:
            run_id: Optional run identifier

        Returns:
            True when the run completed, even if single deposits failed;
            False only if the registration plugin is unavailable
        """
        if run_id is None:
            run_id = str(uuid.uuid4())

        self.run_log = RunLog()
        self.metrics = RunMetrics(run_id=run_id, started_at=datetime.now(timezone.utc))
        self._shutdown_event.clear()

        with CorrelationContext(run_id=run_id):
            log_with_context(logger, logging.INFO, "Starting deposit run")

            if self.plugin is None:
                self._add_entry(LogSeverity.ERROR, PLUGIN_UNAVAILABLE, {})
                self._finish("failed")
                return False

            status = "failed"
            try:
                self._run_tenants()
                if self._shutdown_event.is_set():
                    self._add_entry(LogSeverity.NOTICE, RUN_CANCELLED, {})
                    status = "cancelled"
                else:
                    status = "completed"
            finally:
                # The run log reaches the sink even if the run aborts
                self._finish(status)

        return True

    def shutdown(self) -> None:
        """Stop the run before the next object is attempted."""
        logger.info("Shutdown requested")
        self._shutdown_event.set()

    def get_stats(self) -> Dict[str, Any]:
        """Get metrics and log counts of the last run."""
        return {
            "run_metrics": self.metrics.to_dict() if self.metrics else None,
            "log_entries": len(self.run_log),
            "warnings": len(self.run_log.warnings()),
        }

    def close(self) -> None:
        """Close transport and sink resources."""
        logger.info("Closing runner resources")

        if self.plugin is not None and hasattr(self.plugin.transport, "close"):
            self.plugin.transport.close()

        if self.log_sink is not None:
            self.log_sink.close()

    def _run_tenants(self) -> None:
        eligibility = TenantEligibilityFilter(
            self.tenant_repository, self.plugin_resolver
        ).evaluate()

        self.metrics.tenants_seen = len(eligibility.eligible) + len(eligibility.skipped)
        self.metrics.tenants_eligible = len(eligibility.eligible)
        self.metrics.tenants_skipped = len(eligibility.skipped)

        # Skip warnings go into the log before any deposit happens
        for skip in eligibility.warnings():
            self._add_entry(
                LogSeverity.WARNING,
                NO_DOI_PREFIX,
                {"path": skip.tenant.path},
                tenant=skip.tenant,
            )

        discoverer = ObjectDiscoverer(self.plugin.objects, self.plugin_resolver)
        executor = DepositExecutor(
            storage=self.storage,
            transport=self.plugin.transport,
            file_prefix=self.plugin.file_prefix,
        )

        for tenant in eligibility.eligible:
            with CorrelationContext(tenant=tenant.path):
                for kind in ObjectKind.ordered():
                    if self._shutdown_event.is_set():
                        return
                    try:
                        objects = discoverer.discover(tenant, kind)
                    except Exception as e:
                        logger.exception(f"Discovery of {kind.file_name_part} failed: {e}")
                        self._add_entry(
                            LogSeverity.WARNING, DEPOSIT_ERROR, {"param": str(e)}, tenant=tenant
                        )
                        continue
                    if objects:
                        self._register_objects(objects, kind, tenant, executor)

    def _register_objects(
        self,
        objects,
        kind: ObjectKind,
        tenant: Tenant,
        executor: DepositExecutor,
    ) -> None:
        """Deposit each object in discovery order."""
        filter_key = kind.filter_key(self.plugin.document_format)
        log_with_context(
            logger, logging.INFO,
            f"Depositing {len(objects)} {kind.file_name_part}",
        )

        for obj in objects:
            if self._shutdown_event.is_set():
                log_with_context(logger, logging.INFO, "Run cancelled between objects")
                return

            with CorrelationContext(object_id=obj.object_id, object_kind=kind.value):
                self.metrics.objects_attempted += 1
                try:
                    result = self._register_object(obj, filter_key, tenant, executor)
                except Exception as e:
                    logger.exception(f"Unexpected error depositing {obj.object_id}: {e}")
                    result = DepositResult.failure([(DEPOSIT_ERROR, str(e))])

                if result is None:
                    continue
                if result.ok:
                    self.metrics.objects_succeeded += 1
                    log_with_context(logger, logging.INFO, "Deposited")
                else:
                    self.metrics.objects_failed += 1
                    self._add_result_entries(result, tenant, obj)

    def _register_object(
        self,
        obj: RegisterableObject,
        filter_key: str,
        tenant: Tenant,
        executor: DepositExecutor,
    ) -> Optional[DepositResult]:
        """Serialize and deposit one object; None if serialization failed."""
        try:
            document = self.plugin.producer.serialize(obj, filter_key, tenant)
        except DocumentError as e:
            self._document_failed(e, tenant, obj)
            return None
        except Exception as e:
            logger.exception(f"Document producer raised for {obj.object_id}: {e}")
            self._document_failed(e, tenant, obj)
            return None

        attempt = executor.execute(obj, document, tenant)
        return attempt.result

    def _document_failed(self, error: Exception, tenant: Tenant, obj: RegisterableObject) -> None:
        self.metrics.objects_failed += 1
        self._add_entry(
            LogSeverity.WARNING, DOCUMENT_ERROR, {"param": str(error)}, tenant=tenant, obj=obj
        )

    def _add_result_entries(
        self,
        result: DepositResult,
        tenant: Tenant,
        obj: RegisterableObject,
    ) -> None:
        """One entry per failure message, or one generic entry."""
        if result.outcome == DepositOutcome.FAILURE:
            for code, param in result.messages:
                self._add_entry(
                    LogSeverity.WARNING, code, {"param": param}, tenant=tenant, obj=obj
                )
        else:
            self._add_entry(
                LogSeverity.WARNING, DEPOSIT_ERROR, {"param": NO_PARAM}, tenant=tenant, obj=obj
            )

    def _add_entry(
        self,
        severity: LogSeverity,
        key: str,
        params: Dict[str, Any],
        tenant: Optional[Tenant] = None,
        obj: Optional[RegisterableObject] = None,
    ) -> None:
        """Append to the run log and mirror to the Python logger."""
        entry = LogEntry(
            severity=severity,
            message=self.format_message(key, params),
            message_key=key,
            params=params,
            tenant_path=tenant.path if tenant else None,
            object_id=obj.object_id if obj else None,
        )
        self.run_log.append(entry)
        log_with_context(logger, _PYTHON_LEVELS[severity], entry.message)

    def _finish(self, status: str) -> None:
        self.metrics.status = status
        self.metrics.ended_at = datetime.now(timezone.utc)

        log_with_context(logger, logging.INFO, f"Run {status}")
        logger.info(f"Metrics: {json.dumps(self.metrics.to_dict(), indent=2)}")

        if self.log_sink is not None:
            try:
                self.log_sink.flush(self.metrics.run_id, self.run_log.entries)
            except Exception as e:
                logger.error(f"Run log flush failed: {e}")
