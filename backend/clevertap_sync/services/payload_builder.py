import json
import logging
from typing import Any, Dict, List

from pydantic import BaseModel

from clevertap_sync.exceptions import BuildError, CoercionError
from clevertap_sync.schemas.record import SourceRecord
from clevertap_sync.services.field_mapping_resolver import ResolvedConfig
from clevertap_sync.services.type_coercion import coerce, to_text

log = logging.getLogger(__name__)

PROFILE_TYPE = "profile"


class ProfilePayload(BaseModel):
    """One CleverTap profile upload, wrapped in the ``d`` envelope on serialization."""
    identity: str
    profile_data: Dict[str, Any] = {}
    warnings: List[str] = []

    def to_body(self) -> Dict[str, Any]:
        return {
            "d": [
                {
                    "type": PROFILE_TYPE,
                    "identity": self.identity,
                    "profileData": self.profile_data,
                }
            ]
        }

    def to_json(self) -> str:
        return json.dumps(self.to_body(), separators=(",", ":"), ensure_ascii=False)


def serialize_partial(partial: Dict[str, Any]) -> str:
    """Render a partially built payload for the event log."""
    return json.dumps({"d": [{"type": PROFILE_TYPE, **partial}]}, separators=(",", ":"), ensure_ascii=False, default=str)


class PayloadBuilder:
    """Builds the CleverTap upload payload for a record from its resolved mappings."""

    def build(self, record: SourceRecord, resolved: ResolvedConfig) -> ProfilePayload:
        """
        Map every field in declaration order.

        Raises BuildError (with the partial payload attached) when the
        configuration has no identifier mapping, the identifier is blank, or a
        mandatory field fails coercion. Optional fields that fail coercion are
        left out and reported in ``warnings``.
        """
        identifier = resolved.identifier_mapping
        if identifier is None:
            raise BuildError(f"Sync configuration '{resolved.name}' has no mandatory customer_id mapping")

        partial: Dict[str, Any] = {"identity": None, "profileData": {}}
        warnings: List[str] = []

        raw_identity = record.get_field(identifier.source_field)
        try:
            identity = to_text(coerce(raw_identity, identifier.data_type)).strip()
        except CoercionError as e:
            raise BuildError(
                f"{record.record_type} {record.id}: identifier field {identifier.source_field} "
                f"failed coercion: {e.message}",
                partial_body=partial,
            )
        if not identity:
            raise BuildError(
                f"{record.record_type} {record.id}: identifier field {identifier.source_field} is blank",
                partial_body=partial,
            )
        partial["identity"] = identity

        for mapping in resolved.attribute_mappings:
            raw_value = record.get_field(mapping.source_field)
            try:
                value = coerce(raw_value, mapping.data_type)
            except CoercionError as e:
                if mapping.is_mandatory:
                    raise BuildError(
                        f"{record.record_type} {record.id}: mandatory field {mapping.source_field} -> "
                        f"{mapping.target_field} failed coercion: {e.message}",
                        partial_body=partial,
                    )
                warning = f"{mapping.source_field} -> {mapping.target_field} omitted: {e.message}"
                log.warning(f"{record.record_type} {record.id}: {warning}")
                warnings.append(warning)
                continue

            if mapping.is_mandatory and (value is None or value == ""):
                raise BuildError(
                    f"{record.record_type} {record.id}: mandatory field {mapping.source_field} is blank",
                    partial_body=partial,
                )
            partial["profileData"][mapping.target_field] = value

        return ProfilePayload(identity=identity, profile_data=partial["profileData"], warnings=warnings)
