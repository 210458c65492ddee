from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class OverrideSet(BaseModel):
    allow: bool


class OverrideResponse(BaseModel):
    id: str
    user_id: str
    org_id: str
    permission_code: str
    allow: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
