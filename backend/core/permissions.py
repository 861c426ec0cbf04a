from rest_framework import permissions


class RoleRequired(permissions.BasePermission):
    """
    Authenticated users whose ``role`` is in ``allowed_roles``.
    Superusers always pass.
    """
    allowed_roles = ()

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return user.is_superuser or getattr(user, 'role', None) in self.allowed_roles


class IsHospitalStaff(RoleRequired):
    allowed_roles = ('ADMIN', 'RECEPTION', 'DOCTOR', 'PHARMACY', 'WAREHOUSE')


class IsAdminRole(RoleRequired):
    allowed_roles = ('ADMIN',)


class IsStockKeeper(RoleRequired):
    allowed_roles = ('PHARMACY', 'WAREHOUSE', 'ADMIN')


# Doctors read stock levels when prescribing
class IsStockReader(RoleRequired):
    allowed_roles = IsStockKeeper.allowed_roles + ('DOCTOR',)
