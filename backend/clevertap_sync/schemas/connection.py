from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class ConnectionBase(BaseModel):
    label: str = Field(..., min_length=1, max_length=200)
    region: str = Field(..., description="CleverTap region code: US, IN or EU")


class ConnectionCreate(ConnectionBase):
    account_id: str = Field(..., min_length=1)
    passcode: str = Field(..., min_length=1)  # Encrypted before storage


class ConnectionInDB(BaseModel):
    id: int
    label: str
    api_name: str
    account_id: Optional[str] = None
    passcode: Optional[str] = None  # Always masked
    region: Optional[str] = None
    api_url: Optional[str] = None
    is_deleted: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ConnectionValidationResult(BaseModel):
    valid: bool
    message: str
