from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class FlagUpdate(BaseModel):
    enabled: bool


class FlagResponse(BaseModel):
    id: str
    org_id: str
    module_code: str
    flag_code: str
    enabled: bool
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
