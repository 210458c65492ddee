from pydantic import BaseModel, StrictStr
from typing import Optional, List
from datetime import datetime


class RoleCreate(BaseModel):
    code: str
    name: str
    description: Optional[str] = None


class RoleResponse(BaseModel):
    id: str
    org_id: str
    code: str
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RolePermissionsUpdate(BaseModel):
    permission_codes: List[StrictStr]


class RolePermissionsResponse(BaseModel):
    role_id: str
    permission_codes: List[str]
    message: str


class UserRoleAssign(BaseModel):
    role_id: str
    location_id: Optional[str] = None


class UserRoleResponse(BaseModel):
    id: str
    user_id: str
    org_id: str
    role_id: str
    location_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
