import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from django.db.models import Q
from django.shortcuts import get_object_or_404
from bizbox.core.exceptions import ServiceError
from bizbox.core.utils import create_audit_log
from bizbox.teams.permissions import IsTeamAdmin
from .models import SubscriptionPlan, UserSubscription
from .serializers import SubscriptionPlanSerializer, UserSubscriptionSerializer, SubscribeSerializer, CancelSerializer
from . import services

logger = logging.getLogger(__name__)

PERMISSION_DENIED = {'error': 'Permission denied'}


def active_subscribers(plan):
    return plan.subscriptions.filter(status='active').count()


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def plan_list_create(request):
    """Plans on offer; staff see inactive plans too and create new ones"""
    if request.method == 'GET':
        plans = SubscriptionPlan.objects.all()
        if not request.user.is_staff:
            plans = plans.filter(is_active=True)
        return Response(SubscriptionPlanSerializer(plans, many=True).data)

    if not request.user.is_staff:
        return Response(PERMISSION_DENIED, status=status.HTTP_403_FORBIDDEN)
    serializer = SubscriptionPlanSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def plan_detail(request, pk):
    plan = get_object_or_404(SubscriptionPlan, pk=pk)

    if request.method == 'GET':
        if not plan.is_active and not request.user.is_staff:
            return Response({'error': 'Plan not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(SubscriptionPlanSerializer(plan).data)

    if not request.user.is_staff:
        return Response(PERMISSION_DENIED, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        serializer = SubscriptionPlanSerializer(plan, data=request.data, partial=request.method == 'PATCH')
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        if plan.is_active and serializer.validated_data.get('is_active') is False and active_subscribers(plan):
            return Response({'error': 'Plan has active subscribers and cannot be deactivated'},
                            status=status.HTTP_409_CONFLICT)
        serializer.save()
        return Response(serializer.data)
    else:  # DELETE
        if plan.subscriptions.exists():
            if active_subscribers(plan):
                return Response({'error': 'Plan has active subscribers and cannot be deleted'},
                                status=status.HTTP_409_CONFLICT)
            return Response({'error': 'Plan has subscription history; deactivate it instead'},
                            status=status.HTTP_409_CONFLICT)
        plan.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsTeamAdmin])
def subscribe(request):
    serializer = SubscribeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    plan = get_object_or_404(SubscriptionPlan, pk=data['plan_id'])
    try:
        subscription = services.subscribe(request.user, plan, data['payment_method'], data['auto_renew'])
    except ServiceError as e:
        return e.to_response()

    create_audit_log(request=request, action='subscribe', model_name='UserSubscription',
                     object_id=subscription.id, object_name=plan.name,
                     object_reference=subscription.payment_reference or subscription.identifier)
    return Response(UserSubscriptionSerializer(subscription).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def current_subscription(request):
    subscription = services.current_subscription(request.user)
    if subscription is None:
        return Response({'subscription': None})
    return Response({'subscription': UserSubscriptionSerializer(subscription).data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def subscription_history(request):
    subscriptions = request.user.subscriptions.select_related('plan')
    return Response(UserSubscriptionSerializer(subscriptions, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsTeamAdmin])
def subscription_cancel(request, identifier):
    """Cancel one of the user's own pending or active subscriptions"""
    subscription = get_object_or_404(UserSubscription, identifier=identifier, user=request.user)
    serializer = CancelSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        services.cancel(subscription, serializer.validated_data['reason'])
    except ServiceError as e:
        return e.to_response()
    return Response(UserSubscriptionSerializer(subscription).data)


@api_view(['GET'])
@permission_classes([IsAdminUser])
def admin_subscription_list(request):
    """All subscriptions; filter by status or plan, search by user or reference"""
    subscriptions = UserSubscription.objects.select_related('plan', 'user')
    subscription_status = request.query_params.get('status')
    if subscription_status:
        subscriptions = subscriptions.filter(status=subscription_status)
    plan_id = request.query_params.get('plan')
    if plan_id:
        subscriptions = subscriptions.filter(plan_id=plan_id)
    search = request.query_params.get('search')
    if search:
        subscriptions = subscriptions.filter(
            Q(user__username__icontains=search) | Q(user__email__icontains=search) |
            Q(payment_reference__icontains=search)
        )
    return Response(UserSubscriptionSerializer(subscriptions, many=True).data)


@api_view(['POST'])
@permission_classes([IsAdminUser])
def admin_mark_paid(request, identifier):
    """Record the cash or bank payment of a pending subscription"""
    subscription = get_object_or_404(UserSubscription.objects.select_related('plan', 'user'), identifier=identifier)
    try:
        services.mark_paid(subscription)
    except ServiceError as e:
        return e.to_response()
    create_audit_log(request=request, action='subscription_paid', model_name='UserSubscription',
                     object_id=subscription.id, object_name=subscription.plan.name,
                     object_reference=subscription.payment_reference,
                     client_identifier=subscription.user.identifier)
    return Response(UserSubscriptionSerializer(subscription).data)


@api_view(['POST'])
@permission_classes([IsAdminUser])
def admin_cancel(request, identifier):
    subscription = get_object_or_404(UserSubscription, identifier=identifier)
    serializer = CancelSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        services.cancel(subscription, serializer.validated_data['reason'] or 'Cancelled by staff')
    except ServiceError as e:
        return e.to_response()
    return Response(UserSubscriptionSerializer(subscription).data)
