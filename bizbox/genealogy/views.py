import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.db.models import Q
from django.shortcuts import get_object_or_404
from bizbox.core.exceptions import ServiceError
from bizbox.core.utils import tenant_for, create_audit_log
from bizbox.teams.permissions import CanEdit, CanDelete
from .models import FamilyMember, FamilyRelationship, EditRequest
from .serializers import (
    FamilyMemberSerializer, AddRelationshipSerializer, RelationshipSerializer, ImportSerializer,
    EditRequestSerializer, EditRequestCreateSerializer, PublicFamilyMemberSerializer
)
from . import services

logger = logging.getLogger(__name__)


def tenant_members(request):
    return FamilyMember.objects.filter(client_identifier=tenant_for(request))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def member_list_create(request):
    """Family members; search by name"""
    if request.method == 'GET':
        members = tenant_members(request).prefetch_related('relationships__to_member')
        search = request.query_params.get('search')
        if search:
            members = members.filter(Q(first_name__icontains=search) | Q(last_name__icontains=search))
        serializer = FamilyMemberSerializer(members, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = FamilyMemberSerializer(data=request.data)
        if serializer.is_valid():
            member = serializer.save(client_identifier=tenant_for(request))
            create_audit_log(request=request, action='create', model_name='FamilyMember',
                             object_id=member.id, object_name=member.full_name)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def member_detail(request, pk):
    member = get_object_or_404(tenant_members(request), pk=pk)

    if request.method == 'GET':
        serializer = FamilyMemberSerializer(member)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = FamilyMemberSerializer(member, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='FamilyMember',
                         object_id=member.id, object_name=member.full_name)
        member.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def relationship_create(request):
    serializer = AddRelationshipSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    from_member = get_object_or_404(tenant_members(request), pk=data['from_member_id'])
    to_member = get_object_or_404(tenant_members(request), pk=data['to_member_id'])
    try:
        relationship = services.add_relationship(from_member, to_member, data['relationship_type'])
    except ServiceError as e:
        return e.to_response()
    return Response(RelationshipSerializer(relationship).data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, CanDelete])
def relationship_delete(request, pk):
    """Remove a relationship and its reciprocal"""
    relationship = get_object_or_404(
        FamilyRelationship, pk=pk, from_member__client_identifier=tenant_for(request)
    )
    services.remove_relationship(relationship)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def tree_export(request):
    return Response(services.export_tree(tenant_for(request)))


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def tree_import(request):
    serializer = ImportSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    result = services.import_tree(tenant_for(request), data['family_members'], mode=data['import_mode'])
    return Response({'message': 'Family tree imported successfully', **result})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def tree_visualization(request):
    return Response(services.visualization_data(tenant_for(request)))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def tree_widget_stats(request):
    return Response(services.widget_stats(tenant_for(request)))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def edit_request_list(request):
    """Edit requests sent from the public tree; filter by status"""
    edit_requests = EditRequest.objects.filter(client_identifier=tenant_for(request)).select_related('member')
    request_status = request.query_params.get('status')
    if request_status:
        edit_requests = edit_requests.filter(status=request_status)
    return Response(EditRequestSerializer(edit_requests, many=True).data)


def review(request, pk, accept):
    edit_request = get_object_or_404(
        EditRequest.objects.select_related('member'), pk=pk, client_identifier=tenant_for(request)
    )
    try:
        services.review_edit_request(edit_request, accept)
    except ServiceError as e:
        return e.to_response()
    return Response(EditRequestSerializer(edit_request).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def edit_request_accept(request, pk):
    return review(request, pk, accept=True)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def edit_request_reject(request, pk):
    return review(request, pk, accept=False)


@api_view(['GET'])
@permission_classes([AllowAny])
def public_tree(request, client_identifier):
    """Read-only family tree shared by its owner"""
    members = FamilyMember.objects.filter(client_identifier=client_identifier).prefetch_related('relationships')
    if not members.exists():
        return Response({'error': 'Family tree not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(PublicFamilyMemberSerializer(members, many=True).data)


@api_view(['POST'])
@permission_classes([AllowAny])
def public_edit_request(request, client_identifier):
    """Propose a change to a member; the owner accepts or rejects it"""
    serializer = EditRequestCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = dict(serializer.validated_data)
    member = FamilyMember.objects.filter(pk=data.pop('member_id'), client_identifier=client_identifier).first()
    if member is None:
        return Response({'error': 'Member not found'}, status=status.HTTP_404_NOT_FOUND)

    edit_request = EditRequest.objects.create(client_identifier=client_identifier, member=member, **data)
    logger.info(f"Edit request {edit_request.id} received for member {member.id}")
    return Response({
        'message': 'Edit request has been sent to the account owner for approval.',
        'id': edit_request.id,
    }, status=status.HTTP_201_CREATED)
