import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.contrib.auth.hashers import check_password, make_password
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.crypto import get_random_string
from bizbox.core.utils import create_audit_log, tenant_for
from .models import TeamMember, ROLE_CHOICES, APP_CHOICES
from .permissions import IsTeamAdmin
from .serializers import TeamMemberSerializer, PasswordUpdateSerializer

logger = logging.getLogger(__name__)


def other_active_admins(client_identifier, exclude=None):
    queryset = TeamMember.objects.filter(client_identifier=client_identifier, is_active=True)
    if exclude is not None:
        queryset = queryset.exclude(pk=exclude.pk)
    return [member for member in queryset if 'admin' in (member.roles or [])]


def admin_required_error(message):
    return Response({'error': message}, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsTeamAdmin])
def team_member_list_create(request):
    """List team members or create one (the first member must be an admin)"""
    client_identifier = tenant_for(request)

    if request.method == 'GET':
        members = TeamMember.objects.filter(client_identifier=client_identifier)
        search = request.query_params.get('search')
        if search:
            members = members.filter(
                Q(first_name__icontains=search) | Q(last_name__icontains=search) | Q(email__icontains=search)
            )
        is_active = request.query_params.get('is_active')
        if is_active in ('true', 'false'):
            members = members.filter(is_active=is_active == 'true')
        role = request.query_params.get('role')
        data = TeamMemberSerializer(members, many=True).data
        if role:
            data = [member for member in data if role in member['roles']]
        return Response(data)

    serializer = TeamMemberSerializer(data=request.data, context={'client_identifier': client_identifier})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if 'admin' not in serializer.validated_data['roles'] and not other_active_admins(client_identifier):
        return admin_required_error('The first team member must have the admin role.')

    member = serializer.save(client_identifier=client_identifier)
    logger.info(f"Welcome email queued for team member {member.email} (tenant {client_identifier})")
    create_audit_log(
        request=request,
        action='team_change',
        model_name='TeamMember',
        object_id=str(member.id),
        object_name=member.full_name,
        object_reference=member.email,
        changes={'event': 'created', 'roles': member.roles}
    )
    return Response(TeamMemberSerializer(member).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsTeamAdmin])
def team_member_detail(request, pk):
    """Retrieve, update or delete a team member"""
    client_identifier = tenant_for(request)
    member = get_object_or_404(TeamMember, pk=pk, client_identifier=client_identifier)
    is_last_admin = 'admin' in (member.roles or []) and member.is_active and not other_active_admins(client_identifier, exclude=member)

    if request.method == 'GET':
        return Response(TeamMemberSerializer(member).data)

    if request.method == 'DELETE':
        if is_last_admin:
            return admin_required_error('At least one active admin must remain.')
        create_audit_log(
            request=request,
            action='team_change',
            model_name='TeamMember',
            object_id=str(member.id),
            object_name=member.full_name,
            object_reference=member.email,
            changes={'event': 'deleted'}
        )
        member.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = TeamMemberSerializer(
        member, data=request.data, partial=request.method == 'PATCH',
        context={'client_identifier': client_identifier}
    )
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    if is_last_admin and 'admin' not in serializer.validated_data.get('roles', member.roles):
        return admin_required_error('At least one active admin must remain.')

    old_roles = list(member.roles)
    member = serializer.save()
    if old_roles != member.roles:
        create_audit_log(
            request=request,
            action='team_change',
            model_name='TeamMember',
            object_id=str(member.id),
            object_name=member.full_name,
            object_reference=member.email,
            changes={'roles': {'old': old_roles, 'new': member.roles}}
        )
    return Response(TeamMemberSerializer(member).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsTeamAdmin])
def team_member_toggle_status(request, pk):
    """Activate or deactivate a team member"""
    client_identifier = tenant_for(request)
    member = get_object_or_404(TeamMember, pk=pk, client_identifier=client_identifier)

    if member.is_active and 'admin' in (member.roles or []) and not other_active_admins(client_identifier, exclude=member):
        return admin_required_error('At least one active admin must remain.')

    member.is_active = not member.is_active
    member.save(update_fields=['is_active', 'updated_at'])
    create_audit_log(
        request=request,
        action='team_change',
        model_name='TeamMember',
        object_id=str(member.id),
        object_name=member.full_name,
        object_reference=member.email,
        changes={'is_active': member.is_active}
    )
    return Response(TeamMemberSerializer(member).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsTeamAdmin])
def team_member_reset_password(request, pk):
    """Replace the password with a random 12-character one"""
    member = get_object_or_404(TeamMember, pk=pk, client_identifier=tenant_for(request))
    new_password = get_random_string(12)
    member.password = make_password(new_password)
    member.last_password_change = timezone.now()
    member.save(update_fields=['password', 'last_password_change', 'updated_at'])

    logger.info(f"Password reset email queued for team member {member.email}")
    create_audit_log(
        request=request,
        action='password_reset',
        model_name='TeamMember',
        object_id=str(member.id),
        object_name=member.full_name,
        object_reference=member.email,
    )
    return Response({
        'message': 'Password reset successfully',
        'temporary_password': new_password,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def team_member_update_password(request, pk):
    """Change a team member's password after checking the current one"""
    member = get_object_or_404(TeamMember, pk=pk, client_identifier=tenant_for(request))
    serializer = PasswordUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if not check_password(serializer.validated_data['current_password'], member.password):
        return Response(
            {'current_password': ['The current password is incorrect.']},
            status=status.HTTP_400_BAD_REQUEST
        )

    member.password = make_password(serializer.validated_data['password'])
    member.last_password_change = timezone.now()
    member.save(update_fields=['password', 'last_password_change', 'updated_at'])
    return Response({'message': 'Password updated successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def team_options(request):
    """Roles and apps that can be assigned to team members"""
    return Response({
        'roles': [{'value': value, 'label': label} for value, label in ROLE_CHOICES],
        'apps': [{'value': value, 'label': label} for value, label in APP_CHOICES],
    })
