from django.contrib.auth.mixins import LoginRequiredMixin
from rest_framework.permissions import BasePermission

from .models import User


def has_role(user, *roles):
    return bool(user and getattr(user, "is_authenticated", False) and getattr(user, "role", None) in roles)


class HasRole(BasePermission):
    allowed_roles = ()

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_active
                    and has_role(request.user, *self.allowed_roles))


class IsCustomer(HasRole):
    allowed_roles = (User.ROLE_CUSTOMER,)


class IsComplaintAdmin(HasRole):
    allowed_roles = (User.ROLE_ADMIN,)


class IsTechnician(HasRole):
    allowed_roles = (User.ROLE_TECHNICIAN,)


class IsAdminOrTechnician(HasRole):
    allowed_roles = (User.ROLE_ADMIN, User.ROLE_TECHNICIAN)


class ActorRequiredMixin(LoginRequiredMixin):
    """Plain Django views: anonymous requests get a JSON 403 instead of a login redirect."""
    raise_exception = True
