from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

DataType = Literal["Text", "Number", "Date", "DateTime", "Boolean"]
Status = Literal["Active", "Inactive"]


class FieldMappingBase(BaseModel):
    source_field: str = Field(..., min_length=1)
    target_field: str = Field(..., min_length=1)
    data_type: DataType = "Text"
    is_mandatory: bool = False


class FieldMappingCreate(FieldMappingBase):
    pass


class FieldMappingInDB(FieldMappingBase):
    id: int
    position: int

    class Config:
        from_attributes = True


class SyncConfigurationBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    source_entity: str = Field(..., pattern=r"^[A-Za-z][A-Za-z0-9_]*$")
    target_entity: str = "profile"
    status: Status = "Active"
    connection_name: Optional[str] = None


def check_single_identifier(mappings: Optional[List[FieldMappingCreate]]) -> Optional[List[FieldMappingCreate]]:
    """At most one mandatory mapping may target customer_id."""
    if mappings is not None:
        identifiers = [m for m in mappings if m.is_mandatory and m.target_field == "customer_id"]
        if len(identifiers) > 1:
            raise ValueError("Only one mandatory customer_id mapping is allowed")
    return mappings


class SyncConfigurationCreate(SyncConfigurationBase):
    field_mappings: List[FieldMappingCreate] = []

    @field_validator("field_mappings")
    @classmethod
    def validate_single_identifier(cls, v):
        return check_single_identifier(v)


class SyncConfigurationUpdate(BaseModel):
    name: Optional[str] = None
    source_entity: Optional[str] = Field(None, pattern=r"^[A-Za-z][A-Za-z0-9_]*$")
    target_entity: Optional[str] = None
    status: Optional[Status] = None
    connection_name: Optional[str] = None
    field_mappings: Optional[List[FieldMappingCreate]] = None

    @field_validator("field_mappings")
    @classmethod
    def validate_single_identifier(cls, v):
        return check_single_identifier(v)


class SyncStatusUpdate(BaseModel):
    status: Status


class SyncConfigurationInDB(SyncConfigurationBase):
    id: int
    direction: str
    created_at: datetime
    updated_at: datetime
    field_mappings: List[FieldMappingInDB] = []

    class Config:
        from_attributes = True
