import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from bizbox.cart.models import Cart
from bizbox.core.exceptions import ServiceError
from bizbox.core.utils import apply_date_range, create_audit_log, tenant_for
from bizbox.teams.permissions import CanEdit, CanDelete
from .models import ProductOrder
from .serializers import (
    ProductOrderSerializer, ProductOrderListSerializer, CheckoutSerializer, PublicCheckoutSerializer,
    ProcessPaymentSerializer
)
from . import services

logger = logging.getLogger(__name__)

User = get_user_model()


def tenant_orders(request):
    return ProductOrder.objects.filter(client_identifier=tenant_for(request))


def audit_order(request, order, action, changes=None, client_identifier=None):
    create_audit_log(
        request=request,
        action=action,
        model_name='ProductOrder',
        object_id=str(order.id),
        object_name=order.customer_name,
        object_reference=order.order_number,
        changes=changes,
        client_identifier=client_identifier
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_list(request):
    """List orders; filter by order_status, payment_status, search and date range"""
    orders = tenant_orders(request).prefetch_related('items')
    order_status = request.query_params.get('order_status')
    if order_status:
        orders = orders.filter(order_status=order_status)
    payment_status = request.query_params.get('payment_status')
    if payment_status:
        orders = orders.filter(payment_status=payment_status)
    search = request.query_params.get('search')
    if search:
        orders = orders.filter(
            Q(order_number__icontains=search) |
            Q(customer_name__icontains=search) |
            Q(customer_email__icontains=search)
        )
    orders = apply_date_range(orders, request.query_params)
    serializer = ProductOrderListSerializer(orders, many=True)
    return Response(serializer.data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def order_detail(request, pk):
    """Retrieve, update or delete an order"""
    order = get_object_or_404(tenant_orders(request), pk=pk)

    if request.method == 'GET':
        serializer = ProductOrderSerializer(order)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProductOrderSerializer(order, data=request.data, partial=request.method == 'PATCH')
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        old_status = order.order_status
        new_status = serializer.validated_data.pop('order_status', old_status)
        try:
            with transaction.atomic():
                order = serializer.save()
                if new_status != old_status:
                    order = services.change_status(order, new_status, user=request.user)
        except ServiceError as e:
            return e.to_response()

        if new_status != old_status:
            audit_order(request, order, 'order_status', {'order_status': {'old': old_status, 'new': new_status}})
        return Response(ProductOrderSerializer(order).data)
    else:  # DELETE
        order_id = order.id
        try:
            services.delete_order(order, user=request.user)
        except ServiceError as e:
            return e.to_response()
        order.id = order_id
        audit_order(request, order, 'delete')
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def order_checkout(request):
    """Check out a shop cart into a product order"""
    serializer = CheckoutSerializer(data=request.data, context={'client_identifier': tenant_for(request)})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    cart = get_object_or_404(Cart, pk=data['cart_id'], client_identifier=tenant_for(request))
    try:
        order = services.checkout_cart(cart, data, user=request.user)
    except ServiceError as e:
        return e.to_response()

    audit_order(request, order, 'cart_checkout', {'cart_number': cart.cart_number, 'total_amount': str(order.total_amount)})
    return Response(ProductOrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def order_process_payment(request, pk):
    """Record payment for an order"""
    order = get_object_or_404(tenant_orders(request), pk=pk)
    serializer = ProcessPaymentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        order = services.process_payment(order, user=request.user, **serializer.validated_data)
    except ServiceError as e:
        return e.to_response()

    audit_order(request, order, 'order_payment', {
        'amount': str(order.total_amount),
        'payment_method': order.payment_method,
        'payment_reference': order.payment_reference,
    })
    return Response(ProductOrderSerializer(order).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_statistics(request):
    orders = apply_date_range(tenant_orders(request), request.query_params)
    return Response(services.order_statistics(orders))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_recent(request):
    """The five newest orders"""
    orders = tenant_orders(request).prefetch_related('items').order_by('-created_at')[:5]
    serializer = ProductOrderListSerializer(orders, many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([AllowAny])
def public_checkout(request):
    """Storefront checkout without an account"""
    serializer = PublicCheckoutSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    if not User.objects.filter(identifier=data['client_identifier'], is_active=True).exists():
        return Response({'error': 'Store not found'}, status=status.HTTP_404_NOT_FOUND)

    try:
        order = services.public_checkout(data['client_identifier'], data['order_items'], data)
    except ServiceError as e:
        return e.to_response()

    audit_order(request, order, 'order_create', {'source': 'storefront', 'total_amount': str(order.total_amount)},
                client_identifier=order.client_identifier)
    logger.info(f"Storefront order {order.order_number} placed for tenant {order.client_identifier}")
    return Response(ProductOrderSerializer(order).data, status=status.HTTP_201_CREATED)
