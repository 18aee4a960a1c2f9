"""
User model with ULID primary keys.
"""
from datetime import datetime
from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edu_api.core.database.base import Base, TimestampMixin, generate_ulid
from edu_api.features.permissions.rights import extract_role_names


class User(Base, TimestampMixin):
    """
    A platform user (student, teacher or administrator).

    Identity is established by a signed access token whose ``sub`` claim is
    the user id; the roles relationship is the principal's role list.
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    roles: Mapped[list["UserRole"]] = relationship(  # type: ignore  # noqa: F821
        "UserRole",
        foreign_keys="UserRole.user_id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def role_names(self) -> list[str]:
        return extract_role_names(self.roles)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r})>"


# Register UserRole with the mapper before relationships are configured
from edu_api.features.permissions.models import UserRole  # noqa: E402, F401
