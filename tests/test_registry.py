import pytest

from edu_api.features.permissions.registry import (
    ALL_PERMISSIONS,
    DEFAULT_REGISTRY,
    PERMISSION_GROUPS,
    Permission,
    PermissionRegistry,
    RoleName,
)


def test_roles_in_definition_order():
    assert DEFAULT_REGISTRY.list_roles() == ("student", "teacher", "admin")


def test_every_role_grants_something():
    for role in DEFAULT_REGISTRY.list_roles():
        assert DEFAULT_REGISTRY.permissions_for_role(role)


def test_admin_row_is_superset_of_every_role():
    admin = DEFAULT_REGISTRY.permissions_for_role("admin")
    for role in DEFAULT_REGISTRY.list_roles():
        assert DEFAULT_REGISTRY.permissions_for_role(role) <= admin


def test_unknown_role_grants_nothing():
    assert DEFAULT_REGISTRY.permissions_for_role("janitor") == frozenset()
    assert DEFAULT_REGISTRY.permissions_for_role("") == frozenset()
    assert DEFAULT_REGISTRY.permissions_for_role(None) == frozenset()
    assert DEFAULT_REGISTRY.permissions_for_role(42) == frozenset()


def test_enum_and_string_lookups_agree():
    assert DEFAULT_REGISTRY.permissions_for_role(RoleName.TEACHER) == \
        DEFAULT_REGISTRY.permissions_for_role("teacher")
    assert DEFAULT_REGISTRY.is_known_role(RoleName.STUDENT)
    assert DEFAULT_REGISTRY.is_known_permission(Permission.GRADE_SUBMISSIONS)
    assert DEFAULT_REGISTRY.is_known_permission("gradeSubmissions")
    assert not DEFAULT_REGISTRY.is_known_permission("gradeSubmission")


def test_permission_sets_hold_plain_strings():
    for permission in DEFAULT_REGISTRY.permissions_for_role("student"):
        assert type(permission) is str


def test_groups_cover_every_permission_once():
    grouped = [p for group in PERMISSION_GROUPS for p in group.permissions]
    assert len(grouped) == len(set(grouped)) == len(Permission)
    assert set(ALL_PERMISSIONS) == set(Permission)


def test_all_permissions_is_union_of_rows():
    union = frozenset().union(*(DEFAULT_REGISTRY.permissions_for_role(r) for r in DEFAULT_REGISTRY.list_roles()))
    assert DEFAULT_REGISTRY.all_permissions() == union


def test_registry_cannot_be_mutated_through_lookups():
    rights = DEFAULT_REGISTRY.permissions_for_role("student")
    assert isinstance(rights, frozenset)
    with pytest.raises(AttributeError):
        DEFAULT_REGISTRY.extra = 1


def test_empty_role_row_rejected():
    with pytest.raises(ValueError):
        PermissionRegistry({"guest": []})


def test_empty_registry_rejected():
    with pytest.raises(ValueError):
        PermissionRegistry({})


def test_non_string_identifiers_rejected():
    with pytest.raises(ValueError):
        PermissionRegistry({"guest": ["viewCourses", None]})
    with pytest.raises(ValueError):
        PermissionRegistry({7: ["viewCourses"]})
