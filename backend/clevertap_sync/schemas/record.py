"""Uniform key/value view over CRM records."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, PrivateAttr


class SourceRecord(BaseModel):
    """A CRM record (Lead, Contact, Account, Opportunity or any other object).

    The engine only ever reads records through ``get_field``, so any record
    shape can be synchronized once it is wrapped here. Field names are matched
    case-insensitively, the way CRM field API names are.
    """
    id: str = Field(..., min_length=1, description="Record identifier in the CRM")
    record_type: str = Field(..., min_length=1, description="CRM object name, e.g. 'Lead'")
    data: Dict[str, Any] = Field(default_factory=dict, description="Field API name -> raw value")

    _index: Dict[str, str] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._index = {name.lower(): name for name in self.data}

    def get_field(self, name: str) -> Optional[Any]:
        """Return the raw value of a field, or None when the record does not carry it."""
        if name in self.data:
            return self.data[name]
        key = self._index.get(name.lower())
        return self.data[key] if key is not None else None

    @classmethod
    def from_object(cls, obj: Any, record_type: Optional[str] = None) -> "SourceRecord":
        """Adapt a dict or an attribute-bearing object (e.g. an ORM row) into a SourceRecord."""
        if isinstance(obj, SourceRecord):
            return obj
        if isinstance(obj, dict):
            data = dict(obj)
        else:
            data = {k: v for k, v in vars(obj).items() if not k.startswith("_")}
        attributes = data.pop("attributes", None) or {}
        record_id = data.get("Id", data.get("id"))
        resolved_type = record_type or attributes.get("type") or data.get("record_type")
        if not resolved_type and not isinstance(obj, dict):
            resolved_type = type(obj).__name__
        if record_id is None:
            raise ValueError("Record has no 'Id' or 'id' field")
        if not resolved_type:
            raise ValueError(f"Cannot determine the record type of record {record_id}")
        return cls(id=str(record_id), record_type=resolved_type, data=data)
