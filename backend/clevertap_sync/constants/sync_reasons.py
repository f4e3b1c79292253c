from enum import Enum
from typing import Dict


class SyncOutcome(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class SkipReason(Enum):
    NO_RECORD = "NO_RECORD"
    NO_CONFIGURATION = "NO_CONFIGURATION"
    MISSING_IDENTIFIER_MAPPING = "MISSING_IDENTIFIER_MAPPING"
    CONNECTION_UNAVAILABLE = "CONNECTION_UNAVAILABLE"


def explain_skip(reason: SkipReason, context: Dict) -> str:
    templates = {
        SkipReason.NO_RECORD: "No record supplied (entity type hint: {entity_type}).",
        SkipReason.NO_CONFIGURATION: "No active sync configuration for entity {entity_type}.",
        SkipReason.MISSING_IDENTIFIER_MAPPING: "Sync configuration {config_name} has no mandatory customer_id mapping.",
        SkipReason.CONNECTION_UNAVAILABLE: "Connection {connection_name} is misconfigured: {detail}.",
    }
    return templates[reason].format(**context)
