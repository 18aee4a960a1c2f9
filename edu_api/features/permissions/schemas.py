"""
Pydantic schemas for the permissions API.
"""
from datetime import datetime
from typing import Dict, Any, List, Optional
from pydantic import BaseModel, Field, ConfigDict


# ============================================================================
# Registry Schemas
# ============================================================================

class RoleRightsResponse(BaseModel):
    """A role and the permissions it grants."""
    name: str
    permissions: List[str] = []


class PermissionGroupResponse(BaseModel):
    """Permissions grouped by subject area."""
    label: str
    permissions: List[str] = []


# ============================================================================
# Principal Schemas
# ============================================================================

class MyRightsResponse(BaseModel):
    """Role names and effective permissions of the caller."""
    user_id: str
    roles: List[str] = []
    permissions: List[str] = []


class RightsCheckRequest(BaseModel):
    """Requirements to check against the caller."""
    permissions: List[str] = Field(default_factory=list, description="All of these permissions are required")
    roles: List[str] = Field(default_factory=list, description="Any one of these roles is required")


class RightsCheckResponse(BaseModel):
    has_all_rights: bool
    has_any_role: bool


# ============================================================================
# Audit Log Schemas
# ============================================================================

class AuditLogResponse(BaseModel):
    """Schema for audit log response."""
    id: str
    user_id: Optional[str]
    action: str
    resource_type: str
    resource_id: Optional[str]
    details: Optional[Dict[str, Any]]
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuditLogListResponse(BaseModel):
    """Schema for paginated audit log list."""
    items: List[AuditLogResponse]
    total: int
    page: int
    page_size: int
    pages: int
