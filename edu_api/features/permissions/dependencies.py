"""
FastAPI guards built on the authorization predicates, plus audit logging.

A request without a valid principal is rejected with 401 by
get_current_user before any guard runs. A valid principal that fails the
predicate gets 403.
"""
from typing import Any, Dict, Iterable, Optional
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from edu_api.features.permissions.models import AuditLog, Role
from edu_api.features.permissions.registry import DEFAULT_REGISTRY, identifier
from edu_api.features.permissions.rights import has_all_rights, has_any_role, has_right, has_role
from edu_api.features.users.dependencies import get_current_user
from edu_api.features.users.models import User
from edu_api.utils import get_logger


log = get_logger(__name__)


def _forbidden(detail: str = "Forbidden") -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def require_right(permission: Any):
    """
    Dependency requiring a single permission.

    Usage:
        @router.get("/")
        async def list_users(user: User = Depends(require_right(Permission.MANAGE_USERS))):
            ...
    """
    async def right_dependency(current_user: User = Depends(get_current_user)) -> User:
        if not has_right(current_user.role_names, permission):
            log.info("Denied user=%s right=%s", current_user.id, identifier(permission))
            raise _forbidden()
        return current_user

    return right_dependency


def require_all_rights(permissions: Iterable[Any]):
    """Dependency requiring every listed permission."""
    required = list(permissions)

    async def rights_dependency(current_user: User = Depends(get_current_user)) -> User:
        if not has_all_rights(current_user.role_names, required):
            log.info("Denied user=%s rights=%s", current_user.id, [identifier(p) for p in required])
            raise _forbidden()
        return current_user

    return rights_dependency


def require_role(role: Any):
    """Dependency requiring the literal role. Admins are not exempt."""
    async def role_dependency(current_user: User = Depends(get_current_user)) -> User:
        if not has_role(current_user.role_names, role):
            log.info("Denied user=%s role=%s", current_user.id, identifier(role))
            raise _forbidden(f"Forbidden: requires role {identifier(role)}")
        return current_user

    return role_dependency


def require_any_role(roles: Iterable[Any]):
    """
    Dependency requiring at least one of the listed roles.

    Usage:
        @router.post("/courses")
        async def create_course(user: User = Depends(require_any_role([RoleName.TEACHER, RoleName.ADMIN]))):
            ...
    """
    required = list(roles)

    async def any_role_dependency(current_user: User = Depends(get_current_user)) -> User:
        if not has_any_role(current_user.role_names, required):
            names = ", ".join(str(identifier(r)) for r in required)
            log.info("Denied user=%s roles=%s", current_user.id, names)
            raise _forbidden(f"Forbidden: requires one of roles {names}")
        return current_user

    return any_role_dependency


async def get_or_create_role(db: AsyncSession, role_name: str) -> Role:
    """
    Load the roles row for a registry role, creating it if missing.

    Raises:
        ValueError: if ``role_name`` is not defined in the registry
    """
    if not DEFAULT_REGISTRY.is_known_role(role_name):
        raise ValueError(f"Unknown role: {role_name}")

    result = await db.execute(select(Role).where(Role.name == role_name))
    role = result.scalar_one_or_none()
    if role is None:
        role = Role(name=role_name)
        db.add(role)
        await flush_or_conflict(db, f"Role {role_name} was created concurrently, retry the request")
        log.info("Created role row %s", role_name)
    return role


async def flush_or_conflict(db: AsyncSession, detail: str) -> None:
    """
    Flush pending rows, turning a unique-constraint violation into a 409.

    The existence checks before an insert can race with another request;
    the database constraint is the final word.
    """
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        log.info("Conflict on flush: %s", detail)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)


def client_info(request: Request) -> Dict[str, Optional[str]]:
    """IP address and user agent of the caller, for audit entries."""
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


async def create_audit_log(
    db: AsyncSession,
    user_id: Optional[str],
    action: str,
    resource_type: str,
    resource_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None
) -> AuditLog:
    """
    Record an audit entry in the current session.

    Args:
        db: Database session; the entry is committed with the request
        user_id: User performing the action
        action: Action performed (e.g., "grant_role", "revoke_role", "deactivate")
        resource_type: Type of resource (e.g., "user", "role")
        resource_id: ID of the resource
        details: Additional details
        ip_address: Client IP address
        user_agent: Client user agent

    Returns:
        The flushed AuditLog object
    """
    audit_log = AuditLog(
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        details=details,
        ip_address=ip_address,
        user_agent=user_agent
    )
    db.add(audit_log)
    await db.flush()

    log.info(f"Audit: user={user_id} action={action} resource={resource_type}:{resource_id}")
    return audit_log
