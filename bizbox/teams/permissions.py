"""
Role checks for team members.

A team member acts through the owner's session and names itself with the
``X-Team-Member`` header. Requests without the header come from the account
owner, who holds every role.
"""
from rest_framework.permissions import BasePermission

from .models import TeamMember

TEAM_MEMBER_HEADER = 'X-Team-Member'

EDIT_ROLES = ('admin', 'manager', 'user')
DELETE_ROLES = ('admin', 'manager')


def resolve_team_member(request):
    """TeamMember named by the request header, None for the owner"""
    if hasattr(request, '_team_member'):
        return request._team_member
    identifier = request.headers.get(TEAM_MEMBER_HEADER)
    member = None
    if identifier:
        member = TeamMember.objects.filter(
            client_identifier=request.user.identifier,
            identifier=identifier,
        ).first()
    request._team_member = member
    return member


def has_team_role(request, roles):
    if not request.headers.get(TEAM_MEMBER_HEADER):
        return True
    member = resolve_team_member(request)
    return member is not None and member.is_active and member.has_any_role(roles)


class TeamRolePermission(BasePermission):
    roles = ()
    methods = None  # None: every method is checked
    message = 'Your team role does not allow this action.'

    def has_permission(self, request, view):
        if self.methods is not None and request.method not in self.methods:
            return True
        if not request.user or not request.user.is_authenticated:
            return False
        return has_team_role(request, self.roles)


class CanEdit(TeamRolePermission):
    roles = EDIT_ROLES
    methods = ('POST', 'PUT', 'PATCH')


class CanDelete(TeamRolePermission):
    roles = DELETE_ROLES
    methods = ('DELETE',)


class HasDeleteRole(TeamRolePermission):
    """Delete role on every method, for bulk-delete style POST endpoints"""
    roles = DELETE_ROLES


class IsTeamAdmin(TeamRolePermission):
    roles = ('admin',)
    methods = ('POST', 'PUT', 'PATCH', 'DELETE')
