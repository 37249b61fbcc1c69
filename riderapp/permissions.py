"""
Custom permission classes for the RiderApp console.

These permissions enforce the role hierarchy staff < manager < admin: a
session may reach any screen whose required role is at or below its own.
"""

from rest_framework.permissions import BasePermission

from .authentication import get_session_store
from .session import Role


class HasConsoleRole(BasePermission):
    """
    Base permission class granting access to sessions at or above
    ``required_role``.
    """
    required_role = Role.STAFF
    message = "You don't have permission to access this screen."

    def has_permission(self, request, view):
        """
        Check the session role against the view's required role.
        """
        if not request.user or not request.user.is_authenticated:
            return False

        required_role = getattr(view, 'required_role', None) or self.required_role
        return get_session_store(request).has_access(required_role)


class IsConsoleStaff(HasConsoleRole):
    """
    Permission class that allows any authenticated console role.
    """
    required_role = Role.STAFF
    message = "Please log in to access the console."


class IsConsoleManager(HasConsoleRole):
    """
    Permission class that only allows Manager or Admin sessions.
    """
    required_role = Role.MANAGER
    message = "Only Manager or Admin users can perform this action."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return get_session_store(request).is_manager()


class IsConsoleAdmin(HasConsoleRole):
    """
    Permission class that only allows Admin sessions.
    """
    required_role = Role.ADMIN
    message = "Only Admin users can perform this action."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return get_session_store(request).is_admin()
