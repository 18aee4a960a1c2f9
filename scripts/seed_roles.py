"""
Seed script to populate the roles table from the permission registry.

Run this after deploying a registry change so that every defined role has
a row users can be granted. Optionally bootstraps a first administrator and
prints an access token for them.

Usage:
    uv run python -m scripts.seed_roles
    uv run python -m scripts.seed_roles --admin-email admin@school.edu
"""
import argparse
import asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from edu_api.core.database.engine import get_db, init_db
from edu_api.features.permissions.models import Role, UserRole
from edu_api.features.permissions.registry import DEFAULT_REGISTRY, RoleName
from edu_api.features.users.auth import create_access_token
from edu_api.features.users.models import User
from edu_api.utils import get_logger


log = get_logger(__name__)


ROLE_DESCRIPTIONS = {
    RoleName.STUDENT.value: "Enrolls in courses, submits assignments, takes part in forums",
    RoleName.TEACHER.value: "Creates and runs courses, grades submissions, posts announcements",
    RoleName.ADMIN.value: "Full platform access including user and role management",
}


async def seed_roles(db: AsyncSession) -> dict[str, Role]:
    """
    Create a roles row for every registry role that lacks one.

    Returns:
        Dictionary of role name -> Role object
    """
    roles_map: dict[str, Role] = {}
    for role_name in DEFAULT_REGISTRY.list_roles():
        result = await db.execute(select(Role).where(Role.name == role_name))
        role = result.scalars().first()

        if role:
            log.debug(f"Role '{role_name}' already exists, skipping")
        else:
            role = Role(name=role_name, description=ROLE_DESCRIPTIONS.get(role_name))
            db.add(role)
            log.info(
                f"Created role '{role_name}' "
                f"({len(DEFAULT_REGISTRY.permissions_for_role(role_name))} permissions)"
            )
        roles_map[role_name] = role

    await db.commit()
    return roles_map


async def bootstrap_admin(db: AsyncSession, email: str, admin_role: Role) -> User:
    """Create (or promote) the given user to admin."""
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(email=email, first_name="Platform", last_name="Admin")
        db.add(user)
        log.info(f"Created admin user {email}")

    if RoleName.ADMIN.value not in user.role_names:
        user.roles.append(UserRole(role=admin_role))
        log.info(f"Granted admin role to {email}")

    await db.commit()
    return user


async def main(admin_email: str | None = None):
    """Create tables, seed roles, optionally bootstrap an admin."""
    log.info("Starting role seeding...")
    await init_db()

    async for db in get_db():
        try:
            roles_map = await seed_roles(db)
            log.info("Roles: %s", ", ".join(roles_map))

            if admin_email:
                admin = await bootstrap_admin(db, admin_email, roles_map[RoleName.ADMIN.value])
                print(create_access_token(admin.id))
        except Exception as e:
            log.error(f"Error seeding roles: {e}", exc_info=True)
            await db.rollback()
            raise

        break  # Only use first session


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed roles from the permission registry")
    parser.add_argument("--admin-email", help="create or promote this user to admin and print a token")
    args = parser.parse_args()
    asyncio.run(main(args.admin_email))
