"""
User feature routes: own profile, user administration and role management.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from edu_api.core.database.engine import get_db
from edu_api.features.permissions.dependencies import (
    client_info,
    create_audit_log,
    flush_or_conflict,
    get_or_create_role,
    require_right,
)
from edu_api.features.permissions.models import UserRole
from edu_api.features.permissions.registry import DEFAULT_REGISTRY, Permission, RoleName
from edu_api.features.users.models import User
from edu_api.features.users.schemas import (
    RoleGrant,
    UserAdminUpdate,
    UserCreate,
    UserPublic,
    UserResponse,
    UserRoleResponse,
    UserUpdate,
)
from edu_api.features.users.dependencies import get_current_user
from edu_api.utils import get_logger


log = get_logger(__name__)
router = APIRouter(tags=["users"])

ManageUsers = Annotated[User, Depends(require_right(Permission.MANAGE_USERS))]


async def _get_user_or_404(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user


def _role_entries(user: User) -> list[UserRoleResponse]:
    return [
        UserRoleResponse(role_name=entry.role.name, granted_at=entry.granted_at, granted_by_id=entry.granted_by_id)
        for entry in user.roles
    ]


# ============================================================================
# Own Profile
# ============================================================================

@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    user: Annotated[User, Depends(require_right(Permission.VIEW_PROFILE))]
):
    """Get current authenticated user's profile."""
    return user


@router.patch("/me", response_model=UserResponse)
async def update_current_user_profile(
    update_data: UserUpdate,
    user: Annotated[User, Depends(require_right(Permission.UPDATE_PROFILE))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update current user's profile."""
    for key, value in update_data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(user, key, value)

    await db.commit()
    await db.refresh(user, ["updated_at"])
    return user


# ============================================================================
# User Administration
# ============================================================================

@router.get("/", response_model=list[UserResponse])
async def list_users(
    admin: ManageUsers,
    db: Annotated[AsyncSession, Depends(get_db)],
    skip: int = 0,
    limit: int = 50
):
    """List users (requires manageUsers)."""
    if limit < 1 or skip < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="skip must be >= 0 and limit >= 1"
        )

    result = await db.execute(
        select(User)
        .order_by(User.email)
        .offset(skip)
        .limit(limit)
    )
    return result.scalars().all()


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    request: Request,
    admin: ManageUsers,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Create a user with an initial role (requires manageUsers)."""
    if not DEFAULT_REGISTRY.is_known_role(data.role_name):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown role: {data.role_name}"
        )

    existing = await db.execute(select(User).where(User.email == data.email))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already taken"
        )

    role = await get_or_create_role(db, data.role_name)
    user = User(
        email=data.email,
        first_name=data.first_name,
        last_name=data.last_name,
        roles=[UserRole(role=role, granted_by_id=admin.id)],
    )
    db.add(user)
    await flush_or_conflict(db, "Email already taken")

    await create_audit_log(
        db,
        user_id=admin.id,
        action="create",
        resource_type="user",
        resource_id=user.id,
        details={"email": data.email, "role": data.role_name},
        **client_info(request),
    )
    await db.commit()
    await db.refresh(user, ["created_at", "updated_at"])
    return user


@router.get("/{user_id}", response_model=UserPublic)
async def get_user_by_id(
    user_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Get public user profile by ID."""
    return await _get_user_or_404(db, user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    update_data: UserAdminUpdate,
    request: Request,
    admin: ManageUsers,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update another user's profile or status (requires manageUsers)."""
    user = await _get_user_or_404(db, user_id)
    changes = update_data.model_dump(exclude_unset=True, exclude_none=True)

    if changes.get("is_active") is False and user.id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot deactivate your own account"
        )
    if "email" in changes and changes["email"] != user.email:
        existing = await db.execute(select(User).where(User.email == changes["email"]))
        if existing.scalar_one_or_none() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already taken"
            )

    for key, value in changes.items():
        setattr(user, key, value)
    await flush_or_conflict(db, "Email already taken")

    await create_audit_log(
        db,
        user_id=admin.id,
        action="update",
        resource_type="user",
        resource_id=user.id,
        details=changes,
        **client_info(request),
    )
    await db.commit()
    await db.refresh(user, ["updated_at"])
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    request: Request,
    admin: ManageUsers,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Permanently delete a user and their role grants (requires manageUsers)."""
    user = await _get_user_or_404(db, user_id)

    if user.id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account"
        )

    await db.delete(user)
    await create_audit_log(
        db,
        user_id=admin.id,
        action="delete",
        resource_type="user",
        resource_id=user_id,
        details={"email": user.email},
        **client_info(request),
    )
    await db.commit()
    log.info("User %s deleted user %s", admin.id, user_id)
    return None


@router.post("/{user_id}/deactivate")
async def deactivate_user(
    user_id: str,
    request: Request,
    admin: ManageUsers,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Deactivate a user account (requires manageUsers)."""
    user = await _get_user_or_404(db, user_id)

    if user.id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot deactivate your own account"
        )

    user.is_active = False
    await create_audit_log(
        db,
        user_id=admin.id,
        action="deactivate",
        resource_type="user",
        resource_id=user.id,
        **client_info(request),
    )
    await db.commit()

    return {"message": "User deactivated successfully"}


# ============================================================================
# Role Management
# ============================================================================

@router.get("/{user_id}/roles", response_model=list[UserRoleResponse])
async def get_user_roles(
    user_id: str,
    admin: ManageUsers,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Roles held by a user."""
    user = await _get_user_or_404(db, user_id)
    return _role_entries(user)


@router.post("/{user_id}/roles", response_model=list[UserRoleResponse], status_code=status.HTTP_201_CREATED)
async def grant_role(
    user_id: str,
    grant: RoleGrant,
    request: Request,
    admin: ManageUsers,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Grant a role to a user."""
    user = await _get_user_or_404(db, user_id)

    if not DEFAULT_REGISTRY.is_known_role(grant.role_name):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown role: {grant.role_name}"
        )
    if grant.role_name in user.role_names:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already has this role"
        )

    role = await get_or_create_role(db, grant.role_name)
    user.roles.append(UserRole(role=role, granted_by_id=admin.id))
    await flush_or_conflict(db, "User already has this role")
    await create_audit_log(
        db,
        user_id=admin.id,
        action="grant_role",
        resource_type="user",
        resource_id=user.id,
        details={"role": grant.role_name},
        **client_info(request),
    )
    await db.commit()
    log.info("User %s granted role %s to %s", admin.id, grant.role_name, user.id)
    return _role_entries(user)


@router.delete("/{user_id}/roles/{role_name}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_role(
    user_id: str,
    role_name: str,
    request: Request,
    admin: ManageUsers,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Remove a role from a user."""
    user = await _get_user_or_404(db, user_id)

    entry = next((e for e in user.roles if e.role.name == role_name), None)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User does not have this role"
        )
    # Prevent an admin from locking themselves out
    if user.id == admin.id and role_name == RoleName.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot remove your own admin role"
        )

    user.roles.remove(entry)
    await create_audit_log(
        db,
        user_id=admin.id,
        action="revoke_role",
        resource_type="user",
        resource_id=user.id,
        details={"role": role_name},
        **client_info(request),
    )
    await db.commit()
    log.info("User %s revoked role %s from %s", admin.id, role_name, user.id)
    return None
