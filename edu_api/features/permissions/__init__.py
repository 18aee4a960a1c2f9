"""
Permission feature module.

Role-based access control for the educational platform: the static
role -> permission registry, effective-permission resolution, and the
authorization predicates and FastAPI guards built on them.
"""
