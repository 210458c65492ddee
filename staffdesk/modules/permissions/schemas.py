from pydantic import BaseModel, Field, StrictStr, field_validator
from typing import Optional, List, Dict


GLOBAL_LOCATION = "global"


class PermissionContext(BaseModel):
    org_id: Optional[str] = None
    location_id: Optional[str] = None


class RoleGrant(BaseModel):
    """One role assignment and the permission codes it carries."""
    role_id: str
    role_code: Optional[str] = None
    location_id: Optional[str] = None
    permission_codes: List[str] = Field(default_factory=list)


class PermissionOverride(BaseModel):
    permission_code: str
    allow: bool


# Raw row shapes returned by the nested Supabase select in store.py.
# Missing or null nested collections become empty lists.

class PermissionRow(BaseModel):
    code: Optional[str] = None


class RolePermissionRow(BaseModel):
    permissions: Optional[PermissionRow] = None


class RoleRow(BaseModel):
    code: Optional[str] = None
    role_permissions: List[RolePermissionRow] = Field(default_factory=list)

    @field_validator("role_permissions", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or []


class UserRoleRow(BaseModel):
    role_id: str
    location_id: Optional[str] = None
    roles: Optional[RoleRow] = None


class OverrideRow(BaseModel):
    permission_code: Optional[str] = None
    allow: Optional[bool] = None


# API

class EffectivePermissionsResponse(BaseModel):
    permissions: List[str]
    # Codes revoked by override; only present when a held wildcard would cover them
    denied: Optional[List[str]] = None


class PermissionCheckRequest(BaseModel):
    org_id: Optional[str] = None
    location_id: Optional[str] = None
    codes: List[StrictStr]


class PermissionCheckResponse(BaseModel):
    results: Dict[str, bool]


class CatalogPermission(BaseModel):
    code: str
    module: str
    action: str
    description: str


class CatalogRole(BaseModel):
    code: str
    name: str
    description: str
    permissions: List[str]


class PermissionCatalogResponse(BaseModel):
    permissions: List[CatalogPermission]
    roles: List[CatalogRole]
