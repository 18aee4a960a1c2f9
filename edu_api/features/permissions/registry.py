"""
Static role -> permission matrix for the educational platform.

Roles and permissions are closed enumerations. The matrix is assembled
once at import time into an immutable PermissionRegistry; nothing mutates
it afterwards, so it is safe to share between concurrent requests.
"""
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping, NamedTuple, Optional


class RoleName(str, Enum):
    """Roles a principal can hold, in definition order."""
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class Permission(str, Enum):
    """Atomic capability flags. Values are the identifiers used on the wire."""

    # Profile and user management
    VIEW_PROFILE = "viewProfile"
    UPDATE_PROFILE = "updateProfile"
    MANAGE_USERS = "manageUsers"
    MANAGE_ROLES = "manageRoles"
    VIEW_ALL_USERS = "viewAllUsers"

    # Courses
    VIEW_COURSES = "viewCourses"
    CREATE_COURSE = "createCourse"
    UPDATE_OWN_COURSE = "updateOwnCourse"
    DELETE_OWN_COURSE = "deleteOwnCourse"
    UPDATE_ANY_COURSE = "updateAnyCourse"
    DELETE_ANY_COURSE = "deleteAnyCourse"
    VIEW_ALL_COURSES = "viewAllCourses"
    MANAGE_COURSE_CONTENT = "manageCourseContent"
    VIEW_COURSE_ANALYTICS = "viewCourseAnalytics"

    # Enrollments
    ENROLL_COURSE = "enrollCourse"
    VIEW_ENROLLMENTS = "viewEnrollments"

    # Assignments and submissions
    VIEW_ASSIGNMENTS = "viewAssignments"
    CREATE_ASSIGNMENT = "createAssignment"
    UPDATE_ASSIGNMENT = "updateAssignment"
    DELETE_ASSIGNMENT = "deleteAssignment"
    SUBMIT_ASSIGNMENT = "submitAssignment"
    VIEW_SUBMISSIONS = "viewSubmissions"
    VIEW_OWN_SUBMISSIONS = "viewOwnSubmissions"
    GRADE_SUBMISSIONS = "gradeSubmissions"

    # Forum
    VIEW_FORUM = "viewForum"
    CREATE_FORUM_POST = "createForumPost"
    UPDATE_OWN_FORUM_POST = "updateOwnForumPost"
    DELETE_OWN_FORUM_POST = "deleteOwnForumPost"
    CREATE_FORUM_COMMENT = "createForumComment"
    MANAGE_FORUM = "manageForum"

    # Announcements
    VIEW_ANNOUNCEMENTS = "viewAnnouncements"
    CREATE_ANNOUNCEMENT = "createAnnouncement"
    UPDATE_ANNOUNCEMENT = "updateAnnouncement"
    DELETE_ANNOUNCEMENT = "deleteAnnouncement"

    # Grading
    VIEW_GRADES = "viewGrades"

    # Notifications
    VIEW_NOTIFICATIONS = "viewNotifications"

    # System administration
    VIEW_SYSTEM_ANALYTICS = "viewSystemAnalytics"
    VIEW_AUDIT_LOGS = "viewAuditLogs"
    MANAGE_SYSTEM_SETTINGS = "manageSystemSettings"


ADMIN_ROLE: str = RoleName.ADMIN.value


def identifier(value: Any) -> Optional[str]:
    """
    Normalize a role or permission reference to its plain string identifier.

    Enum members become their value, strings pass through, anything else
    becomes None so that it can never match a registry entry.
    """
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str):
        return value
    return None


class PermissionGroup(NamedTuple):
    """Permissions grouped by subject area, for role-management screens."""
    label: str
    permissions: tuple[Permission, ...]


P = Permission

PERMISSION_GROUPS: tuple[PermissionGroup, ...] = (
    PermissionGroup("Profile & Users", (
        P.VIEW_PROFILE, P.UPDATE_PROFILE, P.MANAGE_USERS, P.MANAGE_ROLES, P.VIEW_ALL_USERS,
    )),
    PermissionGroup("Courses", (
        P.VIEW_COURSES, P.CREATE_COURSE, P.UPDATE_OWN_COURSE, P.DELETE_OWN_COURSE,
        P.UPDATE_ANY_COURSE, P.DELETE_ANY_COURSE, P.VIEW_ALL_COURSES,
        P.MANAGE_COURSE_CONTENT, P.VIEW_COURSE_ANALYTICS,
    )),
    PermissionGroup("Enrollments", (P.ENROLL_COURSE, P.VIEW_ENROLLMENTS)),
    PermissionGroup("Assignments", (
        P.VIEW_ASSIGNMENTS, P.CREATE_ASSIGNMENT, P.UPDATE_ASSIGNMENT, P.DELETE_ASSIGNMENT,
        P.SUBMIT_ASSIGNMENT, P.VIEW_SUBMISSIONS, P.VIEW_OWN_SUBMISSIONS, P.GRADE_SUBMISSIONS,
    )),
    PermissionGroup("Forum", (
        P.VIEW_FORUM, P.CREATE_FORUM_POST, P.UPDATE_OWN_FORUM_POST,
        P.DELETE_OWN_FORUM_POST, P.CREATE_FORUM_COMMENT, P.MANAGE_FORUM,
    )),
    PermissionGroup("Announcements", (
        P.VIEW_ANNOUNCEMENTS, P.CREATE_ANNOUNCEMENT, P.UPDATE_ANNOUNCEMENT, P.DELETE_ANNOUNCEMENT,
    )),
    PermissionGroup("Grades", (P.VIEW_GRADES,)),
    PermissionGroup("Notifications", (P.VIEW_NOTIFICATIONS,)),
    PermissionGroup("System Admin", (
        P.VIEW_SYSTEM_ANALYTICS, P.VIEW_AUDIT_LOGS, P.MANAGE_SYSTEM_SETTINGS,
    )),
)

ALL_PERMISSIONS: tuple[Permission, ...] = tuple(
    permission for group in PERMISSION_GROUPS for permission in group.permissions
)


class PermissionRegistry:
    """
    Immutable mapping from role name to the permissions that role grants.

    Lookups never raise: an unknown role simply grants nothing, because role
    names reach us from persisted (possibly stale) user data.

    Raises:
        ValueError: at construction, if the mapping is empty, a role is
            mapped to no permissions, or an identifier is not a string.
    """

    __slots__ = ("_rights", "_all")

    def __init__(self, role_rights: Mapping[Any, Iterable[Any]]):
        rights: dict[str, frozenset[str]] = {}
        for role, permissions in role_rights.items():
            role_name = identifier(role)
            if role_name is None:
                raise ValueError(f"Invalid role identifier: {role!r}")
            granted = frozenset(identifier(p) for p in permissions)
            if None in granted:
                raise ValueError(f"Invalid permission identifier for role {role_name!r}")
            if not granted:
                raise ValueError(f"Role {role_name!r} must grant at least one permission")
            rights[role_name] = granted
        if not rights:
            raise ValueError("A permission registry needs at least one role")

        self._rights: Mapping[str, frozenset[str]] = MappingProxyType(rights)
        self._all: frozenset[str] = frozenset().union(*rights.values())

    def list_roles(self) -> tuple[str, ...]:
        """Every defined role, in definition order."""
        return tuple(self._rights)

    def permissions_for_role(self, role: Any) -> frozenset[str]:
        """Exact permission set of a role; empty for anything unrecognized."""
        name = identifier(role)
        if name is None:
            return frozenset()
        return self._rights.get(name, frozenset())

    def all_permissions(self) -> frozenset[str]:
        """Union of the permissions of every defined role."""
        return self._all

    def is_known_role(self, role: Any) -> bool:
        return identifier(role) in self._rights

    def is_known_permission(self, permission: Any) -> bool:
        return identifier(permission) in self._all

    def __repr__(self) -> str:
        return f"<PermissionRegistry(roles={list(self._rights)!r})>"


DEFAULT_REGISTRY = PermissionRegistry({
    RoleName.STUDENT: (
        P.VIEW_PROFILE,
        P.UPDATE_PROFILE,
        P.VIEW_COURSES,
        P.ENROLL_COURSE,
        P.VIEW_ENROLLMENTS,
        P.VIEW_ASSIGNMENTS,
        P.SUBMIT_ASSIGNMENT,
        P.VIEW_OWN_SUBMISSIONS,
        P.VIEW_GRADES,
        P.VIEW_FORUM,
        P.CREATE_FORUM_POST,
        P.UPDATE_OWN_FORUM_POST,
        P.DELETE_OWN_FORUM_POST,
        P.CREATE_FORUM_COMMENT,
        P.VIEW_ANNOUNCEMENTS,
        P.VIEW_NOTIFICATIONS,
    ),
    RoleName.TEACHER: (
        P.VIEW_PROFILE,
        P.UPDATE_PROFILE,
        P.VIEW_COURSES,
        P.CREATE_COURSE,
        P.UPDATE_OWN_COURSE,
        P.DELETE_OWN_COURSE,
        P.MANAGE_COURSE_CONTENT,
        P.CREATE_ASSIGNMENT,
        P.UPDATE_ASSIGNMENT,
        P.DELETE_ASSIGNMENT,
        P.VIEW_SUBMISSIONS,
        P.GRADE_SUBMISSIONS,
        P.VIEW_ENROLLMENTS,
        P.MANAGE_FORUM,
        P.CREATE_ANNOUNCEMENT,
        P.UPDATE_ANNOUNCEMENT,
        P.DELETE_ANNOUNCEMENT,
        P.VIEW_NOTIFICATIONS,
        P.VIEW_COURSE_ANALYTICS,
    ),
    RoleName.ADMIN: ALL_PERMISSIONS,
})

del P
