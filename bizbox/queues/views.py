import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from django.utils import timezone
from bizbox.core.exceptions import ServiceError
from bizbox.core.utils import tenant_for
from bizbox.teams.permissions import CanEdit, CanDelete
from .models import QueueType
from .serializers import (
    QueueTypeSerializer, QueueTypeDetailSerializer, QueueNumberSerializer, IssueNumberSerializer,
    DisplayNumberSerializer
)
from .ticket_generator import generate_ticket_image
from . import services

logger = logging.getLogger(__name__)


def tenant_queue_type(request, pk):
    return get_object_or_404(QueueType, pk=pk, client_identifier=tenant_for(request))


def board_response(queue_types):
    board = services.display_board(queue_types)
    return Response({
        'counts': board['counts'],
        'current_serving': DisplayNumberSerializer(board['current_serving'], many=True).data,
        'called_numbers': DisplayNumberSerializer(board['called_numbers'], many=True).data,
        'next_waiting': DisplayNumberSerializer(board['next_waiting'], many=True).data,
    })


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def queue_type_list_create(request):
    if request.method == 'GET':
        queue_types = QueueType.objects.filter(client_identifier=tenant_for(request))
        is_active = request.query_params.get('is_active')
        if is_active is not None:
            queue_types = queue_types.filter(is_active=is_active.lower() == 'true')
        serializer = QueueTypeSerializer(queue_types, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = QueueTypeSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(client_identifier=tenant_for(request))
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def queue_type_detail(request, pk):
    """Retrieve (with today's numbers), update or delete a queue type"""
    queue_type = tenant_queue_type(request, pk)

    if request.method == 'GET':
        serializer = QueueTypeDetailSerializer(queue_type)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = QueueTypeSerializer(queue_type, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        queue_type.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def queue_issue_number(request, pk):
    """Issue the next number of a queue"""
    queue_type = tenant_queue_type(request, pk)
    serializer = IssueNumberSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        number = services.issue_number(queue_type, **serializer.validated_data)
    except ServiceError as e:
        return e.to_response()
    return Response(QueueNumberSerializer(number).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def queue_call_next(request, pk):
    queue_type = tenant_queue_type(request, pk)
    try:
        number = services.call_next(queue_type)
    except ServiceError as e:
        return e.to_response()
    return Response(QueueNumberSerializer(number).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def queue_reset_counter(request, pk):
    queue_type = services.reset_counter(tenant_queue_type(request, pk))
    return Response(QueueTypeSerializer(queue_type).data)


def number_transition(request, pk, new_status):
    try:
        number = services.get_queue_number(tenant_for(request), pk)
        number = services.change_status(number, new_status)
    except ServiceError as e:
        return e.to_response()
    return Response(QueueNumberSerializer(number).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def queue_number_start_serving(request, pk):
    return number_transition(request, pk, 'serving')


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def queue_number_complete(request, pk):
    return number_transition(request, pk, 'completed')


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def queue_number_cancel(request, pk):
    return number_transition(request, pk, 'cancelled')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def queue_number_ticket(request, pk):
    """Printable ticket for a queue number as a PNG data URL"""
    try:
        number = services.get_queue_number(tenant_for(request), pk)
    except ServiceError as e:
        return e.to_response()

    issued_at = timezone.localtime(number.created_at).strftime('%Y-%m-%d %H:%M')
    image = generate_ticket_image(
        number.queue_type.name,
        number.queue_number,
        issued_at=issued_at,
        barcode_value=f"Q{number.id:06d}",
        customer_name=number.customer_name or None,
    )
    return Response({'queue_number': number.queue_number, 'image': image})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def queue_display(request):
    """Display board of the tenant's queues; ?queue_type= narrows it to one"""
    queue_types = QueueType.objects.filter(client_identifier=tenant_for(request))
    queue_type_id = request.query_params.get('queue_type')
    if queue_type_id:
        queue_types = queue_types.filter(pk=queue_type_id)
    return board_response(queue_types)


@api_view(['GET'])
@permission_classes([AllowAny])
def public_queue_display(request, client_identifier):
    """Public display board for a business's active queues"""
    if not get_user_model().objects.filter(identifier=client_identifier, is_active=True).exists():
        return Response({'error': 'Business not found'}, status=status.HTTP_404_NOT_FOUND)

    queue_types = QueueType.objects.filter(client_identifier=client_identifier, is_active=True)
    queue_type_id = request.query_params.get('queue_type')
    if queue_type_id:
        queue_types = queue_types.filter(pk=queue_type_id)
    return board_response(queue_types)
