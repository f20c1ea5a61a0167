#!/usr/bin/env python3
"""
CLI entry point for the scheduled DOI deposit job.

Runs one deposit pass over all tenants and exits 0 when the run
completed (individual deposit failures are reported in the run log),
1 when the registration plugin is unavailable or the setup fails.

Usage:
    doi-deposit --config config/deposit.yaml
    doi-deposit --config config/deposit.yaml --dry-run
    doi-deposit --config config/deposit.yaml --run-id nightly-2024-01-01
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

from doi_deposit.config import DepositConfig
from doi_deposit.connectors import DataciteHttpTransport, TestTransport
from doi_deposit.core.collaborators import (
    DepositTransport,
    DocumentProducer,
    IdentifierPluginResolver,
    ObjectRepository,
    RegistrationPlugin,
    RunLogSink,
    TenantRepository,
)
from doi_deposit.core.exceptions import ConfigError, PluginUnavailableError
from doi_deposit.core.logging import configure_logging
from doi_deposit.repositories import SimpleXmlDocumentProducer, build_in_memory_collaborators
from doi_deposit.runner import DepositRunner
from doi_deposit.storage import JsonlRunLogSink, LocalTransientStorage, NullRunLogSink


logger = logging.getLogger(__name__)


Collaborators = Tuple[TenantRepository, IdentifierPluginResolver, ObjectRepository, DocumentProducer]


def setup_logging(config: DepositConfig, verbose: bool = False, structured: bool = False) -> None:
    """Configure logging from config and flags."""
    logging_config = config.get_logging_config()
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, str(logging_config.get("level", "INFO")).upper(), logging.INFO)

    configure_logging(
        level=level,
        structured=structured or bool(logging_config.get("structured", False)),
    )


def load_factory(factory_ref: str):
    """
    Import a collaborator factory from a 'module.path.function' reference.

    Raises:
        PluginUnavailableError if the module or function cannot be found
    """
    parts = factory_ref.rsplit(".", 1)
    if len(parts) != 2:
        raise PluginUnavailableError(f"Invalid factory reference: {factory_ref}")

    module_path, func_name = parts
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise PluginUnavailableError(f"Could not import {module_path}: {e}") from e

    factory = getattr(module, func_name, None)
    if factory is None:
        raise PluginUnavailableError(f"Factory function not found: {factory_ref}")
    return factory


def build_collaborators(config: DepositConfig) -> Collaborators:
    """
    Build the repositories and document producer.

    A configured ``collaborators.factory`` is called with the config and
    must return (tenant_repository, plugin_resolver, object_repository,
    document_producer). Without a factory the ``tenants`` section is
    loaded into in-memory repositories.
    """
    factory_ref = config.get("collaborators.factory")
    if not factory_ref:
        tenants, resolver, objects = build_in_memory_collaborators(config.get_tenants())
        return tenants, resolver, objects, SimpleXmlDocumentProducer()

    collaborators = load_factory(factory_ref)(config)
    if not isinstance(collaborators, tuple) or len(collaborators) != 4:
        raise ConfigError(
            f"{factory_ref} must return (tenant_repository, plugin_resolver, "
            "object_repository, document_producer)"
        )
    return collaborators


def build_transport(
    config: DepositConfig,
    tenants: TenantRepository,
    objects: ObjectRepository,
    dry_run: bool = False,
) -> DepositTransport:
    """Build the deposit transport from configuration."""
    transport_config = config.get_transport_config()
    transport_type = transport_config.get("type", "datacite")

    if dry_run or transport_type == "test":
        return TestTransport()

    if transport_type == "datacite":
        return DataciteHttpTransport(
            settings=tenants,
            object_repository=objects,
            api_url=transport_config.get("api_url", "https://mds.datacite.org/"),
            test_api_url=transport_config.get("test_api_url", "https://mds.test.datacite.org/"),
            test_mode=bool(transport_config.get("test_mode", False)),
            timeout=transport_config.get("timeout", 30),
            user_agent=transport_config.get("user_agent"),
        )

    raise ConfigError(f"Unknown transport type: {transport_type}")


def build_log_sink(config: DepositConfig) -> RunLogSink:
    """Build the run log sink from configuration."""
    sink_config = config.get_log_sink_config()
    if not sink_config.get("enabled", True):
        return NullRunLogSink()
    return JsonlRunLogSink(base_dir=Path(sink_config.get("base_dir", "local/deposit/run_logs")))


def build_runner(config: DepositConfig, dry_run: bool = False) -> DepositRunner:
    """Wire a DepositRunner from configuration."""
    deposit_config = config.get_deposit_config()
    storage = LocalTransientStorage(
        base_dir=Path(deposit_config.get("export_dir", "local/deposit/export"))
    )
    log_sink = build_log_sink(config)

    try:
        tenants, resolver, objects, producer = build_collaborators(config)
    except PluginUnavailableError as e:
        # The runner reports the unavailable plugin and fails the run
        logger.error(f"Registration plugin unavailable: {e}")
        return DepositRunner(
            plugin=None,
            tenant_repository=None,
            plugin_resolver=None,
            storage=storage,
            log_sink=log_sink,
        )

    plugin = RegistrationPlugin(
        objects=objects,
        producer=producer,
        transport=build_transport(config, tenants, objects, dry_run=dry_run),
        document_format=deposit_config.get("document_format", "datacite-xml"),
        file_prefix=deposit_config.get("file_prefix", "datacite"),
    )
    logger.info(f"Transport: {plugin.transport.get_name()}")

    return DepositRunner(
        plugin=plugin,
        tenant_repository=tenants,
        plugin_resolver=resolver,
        storage=storage,
        log_sink=log_sink,
    )


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Deposit unregistered DOIs with the registration authority",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to YAML configuration file",
    )

    parser.add_argument(
        "--run-id",
        help="Run identifier (default: random UUID)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Use the test transport instead of the registration authority",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose/debug logging",
    )

    parser.add_argument(
        "--structured-logs",
        action="store_true",
        help="Emit JSON log lines",
    )

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # DOI_DEPOSIT_* overrides may come from a local .env file
    load_dotenv()

    try:
        config = DepositConfig(config_path=args.config)
    except (FileNotFoundError, ConfigError) as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"Could not load configuration: {e}")
        return 1

    setup_logging(config, verbose=args.verbose, structured=args.structured_logs)
    logger.info("Configuration loaded")

    try:
        runner = build_runner(config, dry_run=args.dry_run)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        ok = runner.run(run_id=args.run_id)
        logger.info(f"Final stats: {runner.get_stats()}")
        return 0 if ok else 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1
    finally:
        runner.close()


if __name__ == "__main__":
    sys.exit(main())
