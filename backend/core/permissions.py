from rest_framework.permissions import BasePermission, SAFE_METHODS


def has_role(user, *roles):
    """
    Check whether a user holds one of the given roles.
    Superusers pass every role check.
    """
    if not user or not user.is_authenticated:
        return False
    if user.is_superuser:
        return True
    return getattr(user, 'role', None) in roles


class IsAdminRole(BasePermission):
    message = 'Access denied. Your role does not have permission for this action.'

    def has_permission(self, request, view):
        return has_role(request.user, 'admin')


class IsAdminOrStaff(BasePermission):
    message = 'Access denied. Your role does not have permission for this action.'

    def has_permission(self, request, view):
        return has_role(request.user, 'admin', 'staff')


class IsAdminOrStaffForWrites(BasePermission):
    """Any authenticated user may read; only admin/staff may write"""
    message = 'Access denied. Your role does not have permission for this action.'

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        if request.method == 'DELETE':
            return has_role(request.user, 'admin')
        return has_role(request.user, 'admin', 'staff')
