"""
Permission API routes.

Read-only views of the role matrix for the web client, the caller's own
effective rights, and the audit trail.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from edu_api.core.database.engine import get_db
from edu_api.features.users.dependencies import get_current_user
from edu_api.features.users.models import User
from edu_api.features.permissions.models import AuditLog
from edu_api.features.permissions.registry import DEFAULT_REGISTRY, PERMISSION_GROUPS, Permission
from edu_api.features.permissions.rights import effective_permissions, has_all_rights, has_any_role
from edu_api.features.permissions.schemas import (
    RoleRightsResponse,
    PermissionGroupResponse,
    MyRightsResponse,
    RightsCheckRequest,
    RightsCheckResponse,
    AuditLogResponse,
    AuditLogListResponse,
)
from edu_api.features.permissions.dependencies import require_right


router = APIRouter()


def _role_rights(role_name: str) -> RoleRightsResponse:
    return RoleRightsResponse(
        name=role_name,
        permissions=sorted(DEFAULT_REGISTRY.permissions_for_role(role_name)),
    )


# ============================================================================
# Registry Routes
# ============================================================================

@router.get("/roles", response_model=List[RoleRightsResponse])
async def list_roles(current_user: User = Depends(get_current_user)):
    """List every role, in definition order, with its permissions."""
    return [_role_rights(role) for role in DEFAULT_REGISTRY.list_roles()]


@router.get("/roles/{role_name}", response_model=RoleRightsResponse)
async def get_role(role_name: str, current_user: User = Depends(get_current_user)):
    """Get one role's permissions."""
    if not DEFAULT_REGISTRY.is_known_role(role_name):
        raise HTTPException(status_code=404, detail="Role not found")
    return _role_rights(role_name)


@router.get("/groups", response_model=List[PermissionGroupResponse])
async def list_permission_groups(current_user: User = Depends(get_current_user)):
    """Permissions grouped by subject area."""
    return [
        PermissionGroupResponse(label=group.label, permissions=[p.value for p in group.permissions])
        for group in PERMISSION_GROUPS
    ]


# ============================================================================
# Principal Routes
# ============================================================================

@router.get("/me", response_model=MyRightsResponse)
async def get_my_rights(current_user: User = Depends(get_current_user)):
    """Role names and effective permissions of the caller."""
    roles = current_user.role_names
    return MyRightsResponse(
        user_id=current_user.id,
        roles=roles,
        permissions=sorted(effective_permissions(roles)),
    )


@router.post("/check", response_model=RightsCheckResponse)
async def check_rights(
    check: RightsCheckRequest,
    current_user: User = Depends(get_current_user)
):
    """Check the caller against a set of required permissions and roles."""
    roles = current_user.role_names
    return RightsCheckResponse(
        has_all_rights=has_all_rights(roles, check.permissions),
        has_any_role=has_any_role(roles, check.roles),
    )


# ============================================================================
# Audit Log Routes
# ============================================================================

@router.get("/audit-logs", response_model=AuditLogListResponse)
async def list_audit_logs(
    skip: int = 0,
    limit: int = 50,
    user_id: Optional[str] = None,
    action: Optional[str] = None,
    resource_type: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_right(Permission.VIEW_AUDIT_LOGS))
):
    """List audit logs with optional filtering."""
    if limit < 1 or skip < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="skip must be >= 0 and limit >= 1"
        )

    stmt = select(AuditLog)
    if user_id:
        stmt = stmt.where(AuditLog.user_id == user_id)
    if action:
        stmt = stmt.where(AuditLog.action == action)
    if resource_type:
        stmt = stmt.where(AuditLog.resource_type == resource_type)

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = (await db.execute(count_stmt)).scalar() or 0

    stmt = stmt.order_by(AuditLog.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(stmt)
    logs = result.scalars().all()

    return AuditLogListResponse(
        items=[AuditLogResponse.model_validate(entry) for entry in logs],
        total=total,
        page=(skip // limit) + 1,
        page_size=limit,
        pages=(total + limit - 1) // limit,
    )
