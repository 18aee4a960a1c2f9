from types import SimpleNamespace

from edu_api.features.permissions.registry import DEFAULT_REGISTRY, Permission, PermissionRegistry, RoleName
from edu_api.features.permissions.rights import (
    effective_permissions,
    extract_role_names,
    has_all_rights,
    has_any_role,
    has_right,
    has_role,
)


def test_student_rights():
    rights = effective_permissions(["student"])
    assert "viewCourses" in rights
    assert "submitAssignment" in rights
    assert "gradeSubmissions" not in rights


def test_teacher_rights():
    rights = effective_permissions(["teacher"])
    assert "gradeSubmissions" in rights
    assert "createAssignment" in rights
    assert "manageUsers" not in rights


def test_multiple_roles_union():
    combined = effective_permissions(["student", "teacher"])
    assert combined == effective_permissions(["student"]) | effective_permissions(["teacher"])
    assert {"submitAssignment", "gradeSubmissions"} <= combined


def test_order_and_duplicates_do_not_matter():
    assert effective_permissions(["teacher", "student", "teacher"]) == effective_permissions(["student", "teacher"])


def test_unknown_names_contribute_nothing():
    assert effective_permissions(["student", "ghost", "", None]) == effective_permissions(["student"])
    assert effective_permissions(["ghost"]) == frozenset()


def test_empty_and_missing_role_lists():
    assert effective_permissions([]) == frozenset()
    assert effective_permissions(None) == frozenset()


def test_admin_gets_every_permission_in_registry():
    for roles in (["admin"], ["student", "admin"], ["ghost", "admin", "teacher"]):
        assert effective_permissions(roles) == DEFAULT_REGISTRY.all_permissions()


def test_admin_union_ignores_narrow_admin_row():
    registry = PermissionRegistry({
        "student": ["viewCourses", "submitAssignment"],
        "teacher": ["gradeSubmissions"],
        "admin": ["manageUsers"],
    })
    assert effective_permissions(["admin"], registry) == {
        "viewCourses", "submitAssignment", "gradeSubmissions", "manageUsers",
    }
    assert has_all_rights(["admin"], ["gradeSubmissions", "viewCourses"], registry)


def test_bare_string_is_a_single_role():
    # "admin" must not be found inside "badmin" via substring matching
    assert effective_permissions("badmin") == frozenset()
    assert not has_right("badmin", "manageUsers")
    assert effective_permissions("student") == effective_permissions(["student"])


def test_enum_members_accepted():
    assert effective_permissions([RoleName.TEACHER]) == effective_permissions(["teacher"])
    assert has_right([RoleName.STUDENT], Permission.SUBMIT_ASSIGNMENT)


def test_has_right():
    assert has_right(["admin"], "manageSystemSettings")
    assert not has_right(["student"], "manageUsers")
    assert has_right(["student"], "viewGrades")


def test_admin_passes_any_right_even_unknown():
    assert has_right(["admin"], "noSuchPermission")
    assert has_right(["admin"], None)
    assert has_all_rights(["admin"], ["noSuchPermission", "manageUsers"])


def test_unknown_right_denied_for_non_admin():
    assert not has_right(["student", "teacher"], "viewCourse")
    assert not has_right(["teacher"], None)
    assert not has_all_rights(["teacher"], ["gradeSubmissions", "gradeSubmission"])


def test_has_all_rights():
    assert has_all_rights(["teacher"], ["gradeSubmissions", "createAssignment"])
    assert not has_all_rights(["teacher"], ["gradeSubmissions", "submitAssignment"])
    assert has_all_rights(["student", "teacher"], ["gradeSubmissions", "submitAssignment"])


def test_empty_requirements_are_vacuously_true():
    for roles in ([], ["student"], ["admin"], ["ghost"]):
        assert has_all_rights(roles, [])
        assert has_any_role(roles, [])


def test_has_role_has_no_admin_bypass():
    assert has_role(["admin"], "admin")
    assert not has_role(["admin"], "teacher")
    assert not has_role(["admin"], "student")
    assert has_role(["student", "admin"], RoleName.STUDENT)


def test_has_role_malformed_input():
    assert not has_role([], "student")
    assert not has_role(None, "student")
    assert not has_role(["student"], None)
    assert not has_role(["student"], "Student")


def test_has_any_role():
    assert has_any_role(["teacher"], ["admin", "teacher"])
    assert not has_any_role(["student"], ["admin", "teacher"])
    assert not has_any_role(["admin"], ["teacher"])
    assert has_any_role(["teacher"], "teacher")


def test_predicates_are_repeatable():
    roles = ["student", "teacher"]
    first = (has_right(roles, "gradeSubmissions"), has_all_rights(roles, ["viewGrades"]),
             has_role(roles, "teacher"), has_any_role(roles, ["admin"]))
    second = (has_right(roles, "gradeSubmissions"), has_all_rights(roles, ["viewGrades"]),
              has_role(roles, "teacher"), has_any_role(roles, ["admin"]))
    assert first == second == (True, True, True, False)


def test_extract_role_names():
    rows = [
        SimpleNamespace(role=SimpleNamespace(name="student")),
        {"role": {"name": "teacher"}},
        {"role": None},
        SimpleNamespace(role=SimpleNamespace(name="")),
        SimpleNamespace(),
    ]
    assert extract_role_names(rows) == ["student", "teacher"]
    assert extract_role_names(None) == []


def test_non_iterable_role_lists_are_empty():
    assert effective_permissions(5) == frozenset()
    assert not has_right(5, "viewCourses")
    assert not has_all_rights(5, ["viewCourses"])
    assert not has_role(5, "student")
    assert not has_any_role(5, ["student"])


def test_missing_requirement_lists_deny():
    for roles in (["student"], ["admin"]):
        assert not has_all_rights(roles, None)
        assert not has_all_rights(roles, 5)
        assert not has_any_role(roles, None)
        assert not has_any_role(roles, 5)
