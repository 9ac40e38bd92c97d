"""
Role and tenant based access control for the flow endpoints.
"""
from rest_framework.permissions import BasePermission

CLINICAL_ROLES = {"admin", "front_desk", "ma", "provider", "nurse"}


class IsClinicalStaff(BasePermission):
    """Authenticated staff with a clinical role, bound to a tenant."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(
            user
            and user.is_authenticated
            and getattr(user, "tenant_id", None)
            and getattr(user, "role", None) in CLINICAL_ROLES
        )


class IsPracticeAdmin(BasePermission):
    """Room registry changes are limited to practice administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == "admin")
