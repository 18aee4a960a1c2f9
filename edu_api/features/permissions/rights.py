"""
Effective-permission resolution and authorization predicates.

Every function here is pure and total: malformed input (unknown names,
None, non-string values) never raises, it just fails to match. Callers
turn a False result into a 403.

Admin policy: a principal holding the literal ``admin`` role receives the
union of every role's permissions in the registry, not merely the admin
row. Administrative privilege is total by definition, so editing the admin
row can never silently under-grant. has_right and has_all_rights also
short-circuit on admin, so admin passes even for permissions no role
declares. has_role and has_any_role check identity only.
"""
from typing import Any, Iterable, Optional

from edu_api.features.permissions.registry import (
    ADMIN_ROLE,
    DEFAULT_REGISTRY,
    PermissionRegistry,
    identifier,
)


def _values(values: Any) -> Optional[tuple]:
    # A bare string is one name, never a sequence of characters.
    # None means "no list", as does anything that cannot be iterated.
    if values is None:
        return None
    if isinstance(values, str):
        return (values,)
    try:
        return tuple(values)
    except TypeError:
        return None


def _names(values: Any) -> frozenset[str]:
    names = (identifier(value) for value in _values(values) or ())
    return frozenset(name for name in names if name is not None)


def effective_permissions(
    role_names: Optional[Iterable[Any]],
    registry: PermissionRegistry = DEFAULT_REGISTRY,
) -> frozenset[str]:
    """
    Union of the permissions granted by all of a principal's roles.

    Args:
        role_names: role names held by the principal, in any order
        registry: role -> permission matrix to resolve against

    Returns:
        Every permission in the registry if ``admin`` is present, otherwise
        the union of each known role's permissions. Unknown names add nothing.
    """
    roles = _names(role_names)
    if ADMIN_ROLE in roles:
        return registry.all_permissions()
    return frozenset().union(*(registry.permissions_for_role(role) for role in roles))


def has_right(
    role_names: Optional[Iterable[Any]],
    required_right: Any,
    registry: PermissionRegistry = DEFAULT_REGISTRY,
) -> bool:
    """True if the roles grant ``required_right``; admin always passes."""
    roles = _names(role_names)
    if ADMIN_ROLE in roles:
        return True
    right = identifier(required_right)
    return right is not None and right in effective_permissions(roles, registry)


def has_all_rights(
    role_names: Optional[Iterable[Any]],
    required_rights: Optional[Iterable[Any]],
    registry: PermissionRegistry = DEFAULT_REGISTRY,
) -> bool:
    """True if the roles grant every permission in ``required_rights``.

    An empty requirement list is vacuously satisfied; a missing one (None or
    not iterable) is never satisfied. Admin always passes a real list.
    """
    required = _values(required_rights)
    if required is None:
        return False
    roles = _names(role_names)
    if ADMIN_ROLE in roles:
        return True
    granted = effective_permissions(roles, registry)
    return all(identifier(right) in granted for right in required)


def has_role(role_names: Optional[Iterable[Any]], required_role: Any) -> bool:
    """Literal role membership. There is no admin bypass here."""
    role = identifier(required_role)
    return role is not None and role in _names(role_names)


def has_any_role(role_names: Optional[Iterable[Any]], required_roles: Optional[Iterable[Any]]) -> bool:
    """True if any of ``required_roles`` is held.

    Vacuously True for an empty list, False when the list is None or not iterable.
    """
    required = _values(required_roles)
    if required is None:
        return False
    if not required:
        return True
    held = _names(role_names)
    return any(identifier(role) in held for role in required)


def extract_role_names(user_roles: Optional[Iterable[Any]]) -> list[str]:
    """
    Pull role names out of persisted user-role associations.

    Accepts ORM rows or dicts shaped like ``{"role": {"name": "teacher"}}``
    and skips entries that carry no usable name.
    """
    names: list[str] = []
    for entry in user_roles or ():
        role = entry.get("role") if isinstance(entry, dict) else getattr(entry, "role", None)
        if isinstance(role, dict):
            name = role.get("name")
        else:
            name = getattr(role, "name", None)
        if isinstance(name, str) and name:
            names.append(name)
    return names
