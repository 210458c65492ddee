from pydantic import BaseModel, Field
from typing import Optional, List


class Membership(BaseModel):
    org_id: str
    org_name: Optional[str] = None
    location_id: str
    location_name: Optional[str] = None


class BootstrapResponse(BaseModel):
    user_id: str
    org_id: str
    location_id: str
    role_id: str
    role_code: str
    operations: List[str] = Field(default_factory=list)
    memberships: List[Membership] = Field(default_factory=list)
    message: str


class ContextSelect(BaseModel):
    org_id: str = Field(min_length=1)
    location_id: str = Field(min_length=1)


class ContextResponse(BaseModel):
    user_id: str
    org_id: str
    location_id: str
    permissions: List[str]
