# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (VENUE STAFF ROLES)
# =========================================================
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_WAITER = "waiter"
ROLE_KITCHEN = "kitchen"
ROLE_BARTENDER = "bartender"
ROLE_MAINTENANCE = "maintenance"

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_WAITER,
    ROLE_KITCHEN,
    ROLE_BARTENDER,
    ROLE_MAINTENANCE,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_CONSUME = "inventory.consume"   # FEFO sale / waste consumption
CAP_INVENTORY_EDIT = "inventory.edit"         # lot receipt, metadata edits
CAP_INVENTORY_ADJUST = "inventory.adjust"     # direct signed movements, lot deactivation

ALL_CAPABILITIES = {
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_CONSUME,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_ADJUST,
}


# =========================================================
# ROLE → CAPABILITY MAP (DEFAULT)
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_MANAGER: {
        *ALL_CAPABILITIES,
    },
    ROLE_BARTENDER: {
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_CONSUME,
    },
    ROLE_KITCHEN: {
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_CONSUME,
    },
    ROLE_WAITER: {
        CAP_INVENTORY_VIEW,
    },
    ROLE_MAINTENANCE: set(),
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def capabilities_for(user) -> set[str]:
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


def get_request_venue_id(request):
    """
    Trusted venue scope for the current request.

    The venue always comes from the authenticated user, never from the payload.
    A payload/query venue_id that disagrees is a cross-tenant attempt.
    """
    user = getattr(request, "user", None)
    venue_id = getattr(user, "venue_id", None)
    if not venue_id:
        raise PermissionDenied("User venue information not found")

    for source in (getattr(request, "data", None), getattr(request, "query_params", None)):
        claimed = None
        if hasattr(source, "get"):
            claimed = source.get("venue_id")
        if claimed and str(claimed) != str(venue_id):
            raise PermissionDenied("Cannot access data from another venue")

    return venue_id


# =========================================================
# Permissions
# =========================================================
class IsVenueMember(BasePermission):
    """
    Authenticated, active user attached to a venue.
    """

    message = "User venue information not found"

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return bool(getattr(user, "venue_id", None))


class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, IsVenueMember, HasCapability]
        view.required_capability = CAP_INVENTORY_ADJUST
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default to avoid accidental open endpoints
            return False

        return required in capabilities_for(user)


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a set.

    Usage:
        view.required_any_capabilities = {CAP_INVENTORY_VIEW, CAP_INVENTORY_ADJUST}
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required_any = getattr(view, "required_any_capabilities", None) or set()
        if not required_any:
            return False

        return bool(set(required_any) & capabilities_for(user))
