import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from bizbox.core.exceptions import ServiceError
from bizbox.core.utils import create_audit_log, tenant_for
from .models import Cart
from .serializers import (
    CartSerializer, CartListSerializer, CartCreateSerializer, CartItemAddSerializer, CartItemUpdateSerializer
)
from . import services

logger = logging.getLogger(__name__)


def tenant_cart(request, pk):
    return get_object_or_404(Cart, pk=pk, client_identifier=tenant_for(request))


def cart_response(cart, status_code=status.HTTP_200_OK, **extra):
    cart = Cart.objects.select_related('restaurant').prefetch_related('items').get(pk=cart.pk)
    data = CartSerializer(cart).data
    data.update(extra)
    return Response(data, status=status_code)


def audit_cart(request, cart, action, changes=None):
    create_audit_log(
        request=request,
        action=action,
        model_name='Cart',
        object_id=str(cart.id),
        object_name=cart.cart_number,
        object_reference=cart.cart_number,
        changes=changes
    )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def cart_list_create(request):
    """List open carts (or filter by ?status=) or start a new cart"""
    if request.method == 'GET':
        carts = Cart.objects.filter(client_identifier=tenant_for(request)).prefetch_related('items')
        cart_status = request.query_params.get('status')
        if cart_status:
            carts = carts.filter(status=cart_status)
        else:
            carts = carts.filter(status__in=('active', 'held'))
        channel = request.query_params.get('channel')
        if channel:
            carts = carts.filter(channel=channel)
        serializer = CartListSerializer(carts, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = CartCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        cart = services.create_cart(request.user, **serializer.validated_data)
        return cart_response(cart, status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def cart_detail(request, pk):
    """Retrieve a cart with its summary; DELETE abandons it"""
    cart = tenant_cart(request, pk)

    if request.method == 'GET':
        return cart_response(cart)
    else:  # DELETE
        try:
            services.abandon_cart(cart)
        except ServiceError as e:
            return e.to_response()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_add_item(request, pk):
    """Add an item; adding an item already in the cart increases its quantity"""
    cart = tenant_cart(request, pk)
    serializer = CartItemAddSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        cart, line = services.add_item(cart, serializer.validated_data)
    except ServiceError as e:
        return e.to_response()

    audit_cart(request, cart, 'cart_add', {
        'item': line.name,
        'kind': line.key.kind,
        'item_id': line.key.item_id,
        'variant_id': line.key.variant_id,
        'added': serializer.validated_data['quantity'],
        'quantity': line.quantity,
    })
    return cart_response(cart, status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def cart_item_detail(request, pk, item_id):
    """Change the quantity of a cart line (0 removes it) or remove it"""
    cart = tenant_cart(request, pk)

    try:
        if request.method == 'PATCH':
            serializer = CartItemUpdateSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
            quantity = serializer.validated_data['quantity']
            cart, line = services.update_item_quantity(cart, item_id, quantity)
            audit_cart(request, cart, 'cart_update' if line else 'cart_remove', {
                'item_id': item_id,
                'quantity': quantity,
            })
        else:  # DELETE
            cart, removed = services.remove_item(cart, item_id)
            if removed is not None:
                audit_cart(request, cart, 'cart_remove', {'item': removed.name, 'quantity': removed.quantity})
    except ServiceError as e:
        return e.to_response()

    return cart_response(cart)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_clear(request, pk):
    """Remove every line from the cart"""
    cart = tenant_cart(request, pk)
    try:
        cart = services.clear_cart(cart)
    except ServiceError as e:
        return e.to_response()
    audit_cart(request, cart, 'cart_clear')
    return cart_response(cart)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_reconcile(request, pk):
    """Bring quantities and prices in line with the current catalog"""
    cart = tenant_cart(request, pk)
    try:
        cart, adjustments = services.reconcile_cart(cart)
    except ServiceError as e:
        return e.to_response()
    return cart_response(cart, adjustments=[adjustment.to_dict() for adjustment in adjustments])


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_merge(request, pk):
    """
    Merge a cart saved on the device (``{"cart": [...]}`` or a bare list)
    into this cart. Lines that could not be merged come back in `rejected`.
    """
    cart = tenant_cart(request, pk)
    try:
        cart, merged, rejected = services.merge_payload(cart, request.data)
    except ServiceError as e:
        return e.to_response()

    audit_cart(request, cart, 'cart_merge', {'merged': len(merged), 'rejected': len(rejected)})
    return cart_response(cart, merged=len(merged), rejected=rejected)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_hold(request, pk):
    """Park an active cart"""
    cart = tenant_cart(request, pk)
    try:
        cart = services.hold_cart(cart)
    except ServiceError as e:
        return e.to_response()
    return cart_response(cart)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_resume(request, pk):
    cart = tenant_cart(request, pk)
    try:
        cart = services.resume_cart(cart)
    except ServiceError as e:
        return e.to_response()
    return cart_response(cart)
