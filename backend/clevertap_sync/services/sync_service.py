import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, Optional, Union

from sqlalchemy.orm import Session

from clevertap_sync.config import settings
from clevertap_sync.connectors.base import BaseConnector
from clevertap_sync.connectors.clevertap_connector import CleverTapConnector
from clevertap_sync.constants.sync_reasons import SyncOutcome, SkipReason, explain_skip
from clevertap_sync.exceptions import BuildError, ConfigError, TransportError
from clevertap_sync.models.sync_event import STATUS_SUCCESS
from clevertap_sync.schemas.record import SourceRecord
from clevertap_sync.services.connection_service import get_active_connection, connector_config
from clevertap_sync.services.endpoint_resolver import EndpointResolver
from clevertap_sync.services.event_logger import SyncEventLogger, derive_status
from clevertap_sync.services.field_mapping_resolver import FieldMappingResolver, ResolvedConfig
from clevertap_sync.services.payload_builder import PayloadBuilder, serialize_partial

log = logging.getLogger(__name__)

ConnectorFactory = Callable[[Dict[str, Any]], BaseConnector]


class _BatchContext:
    """Per-batch caches: resolved configs per entity and connectors per connection."""

    def __init__(self):
        self.configs: Dict[str, Optional[ResolvedConfig]] = {}
        self.connectors: Dict[Optional[str], Union[BaseConnector, ConfigError]] = {}

    async def close(self) -> None:
        for connector in self.connectors.values():
            if isinstance(connector, BaseConnector):
                await connector.close()


class SyncService:
    """
    Orchestrates the upload of CRM records to CleverTap.

    Per record: resolve config -> usability check -> build payload ->
    resolve connection/endpoint -> dispatch -> log. Skips leave no trace in
    the event log; build, transport and HTTP failures are logged as Failed.
    Only ConfigError escapes ``synchronize``.
    """

    def __init__(
        self,
        db: Session,
        resolver: Optional[FieldMappingResolver] = None,
        payload_builder: Optional[PayloadBuilder] = None,
        endpoint_resolver: Optional[EndpointResolver] = None,
        event_logger: Optional[SyncEventLogger] = None,
        connector_factory: Optional[ConnectorFactory] = None,
        max_workers: Optional[int] = None,
    ):
        self.db = db
        self.resolver = resolver or FieldMappingResolver(db)
        self.payload_builder = payload_builder or PayloadBuilder()
        self.endpoint_resolver = endpoint_resolver or EndpointResolver()
        self.event_logger = event_logger or SyncEventLogger(db)
        self.connector_factory = connector_factory or CleverTapConnector
        self.max_workers = max(1, max_workers or settings.sync_max_workers)

    def _resolve_config(self, entity_type: str, context: _BatchContext) -> Optional[ResolvedConfig]:
        key = entity_type.lower()
        if key not in context.configs:
            context.configs[key] = self.resolver.resolve(entity_type)
        return context.configs[key]

    def _get_connector(self, connection_name: Optional[str], context: _BatchContext) -> BaseConnector:
        """Connector for a connection, built once per batch. A broken connection fails fast for every record."""
        cached = context.connectors.get(connection_name)
        if isinstance(cached, ConfigError):
            raise cached
        if cached is not None:
            return cached
        try:
            connection = get_active_connection(self.db, connection_name)
            connector = self.connector_factory(connector_config(connection, self.endpoint_resolver))
        except ConfigError as e:
            context.connectors[connection_name] = e
            raise
        context.connectors[connection_name] = connector
        return connector

    async def _synchronize(self, record: Any, entity_type: Optional[str], context: _BatchContext) -> SyncOutcome:
        if record is None:
            log.debug(explain_skip(SkipReason.NO_RECORD, {"entity_type": entity_type}))
            return SyncOutcome.SKIPPED

        if not isinstance(record, SourceRecord):
            try:
                record = SourceRecord.from_object(record, record_type=entity_type)
            except ValueError as e:
                log.warning(f"Skipping unreadable record: {e}")
                return SyncOutcome.SKIPPED

        entity = entity_type or record.record_type
        resolved = self._resolve_config(entity, context)
        if resolved is None:
            log.debug(explain_skip(SkipReason.NO_CONFIGURATION, {"entity_type": entity}))
            return SyncOutcome.SKIPPED
        if not resolved.is_usable:
            log.warning(explain_skip(SkipReason.MISSING_IDENTIFIER_MAPPING, {"config_name": resolved.name}))
            return SyncOutcome.SKIPPED

        body = None
        attempted = False
        try:
            try:
                payload = self.payload_builder.build(record, resolved)
            except BuildError as e:
                log.error(f"Payload build failed for {record.record_type} {record.id}: {e.message}")
                self.event_logger.log(
                    record.id, record.record_type, None, serialize_partial(e.partial_body), detail=e.message
                )
                return SyncOutcome.FAILED

            connector = self._get_connector(resolved.connection_name, context)

            body = payload.to_json()
            warnings = "; ".join(payload.warnings) or None
            try:
                attempted = True
                response = await connector.send(body)
            except TransportError as e:
                detail = f"{e.message}; {warnings}" if warnings else e.message
                self.event_logger.log(record.id, record.record_type, None, body, detail=detail, attempted=True)
                return SyncOutcome.FAILED
        except ConfigError:
            raise
        except Exception as e:
            # Anything else still ends as one Failed event for the record
            log.error(f"Unexpected error while synchronizing {record.record_type} {record.id}: {e}", exc_info=True)
            self.event_logger.log(
                record.id, record.record_type, None, body, detail=f"Unexpected error: {e}", attempted=attempted
            )
            return SyncOutcome.FAILED

        self.event_logger.log(record.id, record.record_type, response, body, detail=warnings)
        if derive_status(response) == STATUS_SUCCESS:
            log.info(f"Synchronized {record.record_type} {record.id} to CleverTap")
            return SyncOutcome.SUCCESS
        log.warning(f"CleverTap rejected {record.record_type} {record.id} with HTTP {response.status_code}")
        return SyncOutcome.FAILED

    async def synchronize(self, record: Any, entity_type: Optional[str] = None) -> SyncOutcome:
        """
        Synchronize a single record. ``entity_type`` overrides the record's own type.

        Raises ConfigError when the target connection is misconfigured; every
        other failure is captured in the sync event log.
        """
        context = _BatchContext()
        try:
            return await self._synchronize(record, entity_type, context)
        finally:
            await context.close()

    async def synchronize_batch(self, records: Iterable[Any], entity_type: Optional[str] = None) -> dict:
        """
        Synchronize many records with bounded concurrency.

        Configurations and connectors are resolved once for the batch. A
        misconfigured connection only stops the records that target it; the
        error text is returned in ``config_errors``.
        Returns stats: {'processed', 'succeeded', 'failed', 'skipped', 'config_errors'}
        """
        stats = {
            "processed": 0,
            "succeeded": 0,
            "failed": 0,
            "skipped": 0,
            "config_errors": [],
        }
        context = _BatchContext()
        semaphore = asyncio.Semaphore(self.max_workers)

        async def run_one(record: Any) -> None:
            async with semaphore:
                stats["processed"] += 1
                try:
                    outcome = await self._synchronize(record, entity_type, context)
                except ConfigError as e:
                    if e.message not in stats["config_errors"]:
                        stats["config_errors"].append(e.message)
                    log.debug(explain_skip(SkipReason.CONNECTION_UNAVAILABLE, {
                        "connection_name": e.details.get("connection_name"), "detail": e.message,
                    }))
                    stats["skipped"] += 1
                    return
                except Exception as e:
                    log.error(f"Unexpected error while synchronizing record: {e}", exc_info=True)
                    stats["failed"] += 1
                    return
                if outcome == SyncOutcome.SUCCESS:
                    stats["succeeded"] += 1
                elif outcome == SyncOutcome.FAILED:
                    stats["failed"] += 1
                else:
                    stats["skipped"] += 1

        try:
            await asyncio.gather(*(run_one(record) for record in records))
        finally:
            await context.close()

        log.info(
            f"Batch sync finished: processed={stats['processed']}, succeeded={stats['succeeded']}, "
            f"failed={stats['failed']}, skipped={stats['skipped']}, config_errors={len(stats['config_errors'])}"
        )
        return stats
