import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.shortcuts import get_object_or_404
from bizbox.cart.models import Cart
from bizbox.core.exceptions import ServiceError
from bizbox.core.utils import apply_date_range, create_audit_log, tenant_for
from bizbox.teams.permissions import CanEdit, CanDelete
from .models import Restaurant, MenuCategory, MenuItem, DeliveryOrder
from .serializers import (
    RestaurantSerializer, MenuCategorySerializer, MenuItemSerializer, DeliveryOrderSerializer,
    PlaceDeliveryOrderSerializer, OrderStatusUpdateSerializer, AssignDriverSerializer,
    PublicDeliveryOrderSerializer
)
from . import services

logger = logging.getLogger(__name__)


def tenant_restaurant(request, pk):
    return get_object_or_404(Restaurant, pk=pk, client_identifier=tenant_for(request))


# Restaurant views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def restaurant_list_create(request):
    """List all restaurants or create a new restaurant"""
    if request.method == 'GET':
        restaurants = Restaurant.objects.filter(client_identifier=tenant_for(request))
        restaurant_status = request.query_params.get('status')
        if restaurant_status:
            restaurants = restaurants.filter(status=restaurant_status)
        serializer = RestaurantSerializer(restaurants, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = RestaurantSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(client_identifier=tenant_for(request))
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def restaurant_detail(request, pk):
    """Retrieve, update or delete a restaurant"""
    restaurant = tenant_restaurant(request, pk)

    if request.method == 'GET':
        serializer = RestaurantSerializer(restaurant)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = RestaurantSerializer(restaurant, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if restaurant.orders.exists():
            return Response(
                {'error': 'Restaurant has delivery orders', 'detail': 'Set the restaurant inactive instead.'},
                status=status.HTTP_409_CONFLICT
            )
        restaurant.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def restaurant_toggle_open(request, pk):
    """Open or close a restaurant for new orders"""
    restaurant = tenant_restaurant(request, pk)
    restaurant.is_open = not restaurant.is_open
    restaurant.save(update_fields=['is_open', 'updated_at'])
    logger.info(f"Restaurant {restaurant.slug} is now {'open' if restaurant.is_open else 'closed'}")
    return Response(RestaurantSerializer(restaurant).data)


# Menu category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def menu_category_list_create(request, pk):
    """List or create menu categories of a restaurant"""
    restaurant = tenant_restaurant(request, pk)

    if request.method == 'GET':
        serializer = MenuCategorySerializer(restaurant.menu_categories.all(), many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = MenuCategorySerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(restaurant=restaurant)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def menu_category_detail(request, pk):
    """Retrieve, update or delete a menu category"""
    category = get_object_or_404(MenuCategory, pk=pk, restaurant__client_identifier=tenant_for(request))

    if request.method == 'GET':
        serializer = MenuCategorySerializer(category)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = MenuCategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Menu item views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def menu_item_list_create(request, pk):
    """List or create menu items of a restaurant"""
    restaurant = tenant_restaurant(request, pk)

    if request.method == 'GET':
        items = restaurant.menu_items.select_related('category')
        category = request.query_params.get('category')
        if category:
            items = items.filter(category_id=category)
        is_available = request.query_params.get('is_available')
        if is_available in ('true', 'false'):
            items = items.filter(is_available=is_available == 'true')
        serializer = MenuItemSerializer(items, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = MenuItemSerializer(data=request.data, context={'restaurant': restaurant})
        if serializer.is_valid():
            serializer.save(restaurant=restaurant)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def menu_item_detail(request, pk):
    """Retrieve, update or delete a menu item"""
    item = get_object_or_404(
        MenuItem.objects.select_related('restaurant', 'category'),
        pk=pk, restaurant__client_identifier=tenant_for(request)
    )

    if request.method == 'GET':
        serializer = MenuItemSerializer(item)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = MenuItemSerializer(
            item, data=request.data, partial=request.method == 'PATCH',
            context={'restaurant': item.restaurant}
        )
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        item.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def menu_item_toggle_availability(request, pk):
    """Mark a menu item available or sold out"""
    item = get_object_or_404(MenuItem, pk=pk, restaurant__client_identifier=tenant_for(request))
    item.is_available = not item.is_available
    item.save(update_fields=['is_available', 'updated_at'])
    return Response(MenuItemSerializer(item).data)


# Delivery order views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def delivery_order_list(request):
    """List delivery orders; filter by status, restaurant and date range"""
    orders = DeliveryOrder.objects.filter(
        client_identifier=tenant_for(request)
    ).select_related('restaurant').prefetch_related('items')
    order_status = request.query_params.get('status')
    if order_status:
        orders = orders.filter(order_status=order_status)
    restaurant = request.query_params.get('restaurant')
    if restaurant:
        orders = orders.filter(restaurant_id=restaurant)
    orders = apply_date_range(orders, request.query_params)
    serializer = DeliveryOrderSerializer(orders, many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def delivery_order_place(request):
    """Place a delivery order from a food delivery cart"""
    serializer = PlaceDeliveryOrderSerializer(data=request.data, context={'client_identifier': tenant_for(request)})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    cart = get_object_or_404(Cart, pk=data['cart_id'], client_identifier=tenant_for(request))
    try:
        order = services.place_order(cart, data, user=request.user)
    except ServiceError as e:
        return e.to_response()

    create_audit_log(
        request=request,
        action='order_create',
        model_name='DeliveryOrder',
        object_id=str(order.id),
        object_name=order.customer_name,
        object_reference=order.order_reference,
        changes={'cart_number': cart.cart_number, 'total_amount': str(order.total_amount)}
    )
    return Response(DeliveryOrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def delivery_order_detail(request, pk):
    order = get_object_or_404(DeliveryOrder, pk=pk, client_identifier=tenant_for(request))
    return Response(DeliveryOrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def delivery_order_update_status(request, pk):
    """Move a delivery order to its next status"""
    order = get_object_or_404(DeliveryOrder, pk=pk, client_identifier=tenant_for(request))
    serializer = OrderStatusUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = order.order_status
    try:
        order = services.change_order_status(
            order, serializer.validated_data['order_status'],
            cancellation_reason=serializer.validated_data['cancellation_reason']
        )
    except ServiceError as e:
        return e.to_response()

    create_audit_log(
        request=request,
        action='order_status',
        model_name='DeliveryOrder',
        object_id=str(order.id),
        object_name=order.customer_name,
        object_reference=order.order_reference,
        changes={'order_status': {'old': old_status, 'new': order.order_status}}
    )
    return Response(DeliveryOrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def delivery_order_assign_driver(request, pk):
    order = get_object_or_404(DeliveryOrder, pk=pk, client_identifier=tenant_for(request))
    serializer = AssignDriverSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        order = services.assign_driver(order, **serializer.validated_data)
    except ServiceError as e:
        return e.to_response()
    return Response(DeliveryOrderSerializer(order).data)


# Public views
@api_view(['GET'])
@permission_classes([AllowAny])
def public_restaurant_list(request):
    """Active restaurants, optionally for one business (?client_identifier=)"""
    return Response(services.public_restaurant_list(request.query_params.get('client_identifier') or None))


@api_view(['GET'])
@permission_classes([AllowAny])
def public_restaurant_menu(request, slug):
    data = services.public_restaurant_menu(slug)
    if data is None:
        return Response({'error': 'Restaurant not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(data)


@api_view(['GET'])
@permission_classes([AllowAny])
def public_order_track(request, reference):
    """Track a delivery order by its reference"""
    order = get_object_or_404(
        DeliveryOrder.objects.select_related('restaurant').prefetch_related('items'),
        order_reference=reference
    )
    return Response(PublicDeliveryOrderSerializer(order).data)
