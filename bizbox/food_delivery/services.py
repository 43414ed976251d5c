"""
Delivery order placement and the order status flow.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from bizbox.cart.services import lock_cart, require_active, mark_checked_out
from bizbox.core.cache_utils import cached_query, PUBLIC_MENU_CACHE_TTL
from bizbox.core.exceptions import ServiceError, ConflictError
from bizbox.core.utils import format_currency, generate_reference
from .models import DeliveryOrder, DeliveryOrderItem, Restaurant

logger = logging.getLogger(__name__)

ORDER_TRANSITIONS = {
    'pending': ('accepted', 'cancelled'),
    'accepted': ('preparing', 'cancelled'),
    'preparing': ('ready', 'cancelled'),
    'ready': ('assigned', 'cancelled'),
    'assigned': ('out_for_delivery', 'cancelled'),
    'out_for_delivery': ('delivered', 'cancelled'),
}

STATUS_TIMESTAMPS = {
    'accepted': 'accepted_at',
    'preparing': 'preparing_at',
    'ready': 'ready_at',
    'assigned': 'assigned_at',
    'out_for_delivery': 'out_for_delivery_at',
    'delivered': 'delivered_at',
    'cancelled': 'cancelled_at',
}


def allowed_transitions(order):
    return ORDER_TRANSITIONS.get(order.order_status, ())


def change_order_status(order, new_status, cancellation_reason=''):
    """Move an order one step along the status flow and stamp the time"""
    if new_status not in dict(DeliveryOrder.ORDER_STATUS_CHOICES):
        raise ServiceError(f"Invalid order status: {new_status}")
    if new_status not in allowed_transitions(order):
        raise ConflictError(
            f"Cannot change order status from {order.order_status} to {new_status}",
            allowed=list(allowed_transitions(order)),
        )

    old_status = order.order_status
    order.order_status = new_status
    update_fields = ['order_status', STATUS_TIMESTAMPS[new_status], 'updated_at']
    setattr(order, STATUS_TIMESTAMPS[new_status], timezone.now())

    if new_status == 'cancelled':
        order.cancellation_reason = cancellation_reason or ''
        update_fields.append('cancellation_reason')
    elif new_status == 'delivered' and order.payment_method == 'cash_on_delivery':
        order.payment_status = 'paid'
        update_fields.append('payment_status')

    order.save(update_fields=update_fields)
    logger.info(f"Delivery order {order.order_reference}: {old_status} -> {new_status}")
    return order


def assign_driver(order, driver_name, driver_phone=''):
    if order.order_status != 'ready':
        raise ConflictError(
            'A driver can only be assigned when the order is ready for pickup',
            order_status=order.order_status,
        )
    order.driver_name = driver_name
    order.driver_phone = driver_phone or ''
    order.save(update_fields=['driver_name', 'driver_phone', 'updated_at'])
    return change_order_status(order, 'assigned')


@transaction.atomic
def place_order(cart, data, user=None):
    """
    Turn a food delivery cart into a DeliveryOrder.

    Prices come from the menu at the moment of ordering. The restaurant has
    to be active and open, every item available, and subtotal plus delivery
    fee must reach the restaurant's minimum order amount.
    """
    cart = lock_cart(cart)
    require_active(cart)
    if cart.channel != 'food_delivery':
        raise ServiceError('Only food delivery carts can be placed as delivery orders')

    items = list(cart.items.select_related('menu_item'))
    if not items:
        raise ServiceError('Cart is empty')

    restaurant = Restaurant.objects.filter(pk=cart.restaurant_id).first()
    if restaurant is None:
        raise ServiceError('Cart has no restaurant')
    if not restaurant.accepts_orders:
        raise ConflictError('Restaurant is not accepting orders right now.')

    unavailable = [item.name for item in items if item.menu_item is None or not item.menu_item.is_available]
    if unavailable:
        raise ServiceError('Some items are no longer available', items=unavailable)

    subtotal = sum((item.menu_item.effective_price * item.quantity for item in items), Decimal('0.00'))
    delivery_fee = restaurant.delivery_fee
    total_amount = subtotal + delivery_fee
    if total_amount < restaurant.minimum_order_amount:
        raise ServiceError(
            f"Minimum order amount is {format_currency(restaurant.minimum_order_amount)}",
            minimum_order_amount=str(restaurant.minimum_order_amount),
            total_amount=str(total_amount),
        )

    customer = data.get('customer')
    order = DeliveryOrder.objects.create(
        order_reference=generate_reference('FD', DeliveryOrder, 'order_reference', length=6),
        client_identifier=cart.client_identifier,
        restaurant=restaurant,
        cart_number=cart.cart_number,
        customer=customer,
        customer_name=data['customer_name'],
        customer_phone=data['customer_phone'],
        customer_email=data.get('customer_email', ''),
        customer_address=data['customer_address'],
        delivery_latitude=data.get('delivery_latitude'),
        delivery_longitude=data.get('delivery_longitude'),
        payment_method=data.get('payment_method', 'cash_on_delivery'),
        special_instructions=data.get('special_instructions', ''),
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        total_amount=total_amount,
        created_by=user,
    )
    DeliveryOrderItem.objects.bulk_create([
        DeliveryOrderItem(
            order=order,
            menu_item=item.menu_item,
            item_name=item.menu_item.name,
            item_price=item.menu_item.effective_price,
            quantity=item.quantity,
            special_instructions=item.special_instructions,
            line_total=item.menu_item.effective_price * item.quantity,
        )
        for item in items
    ])

    if order.payment_method == 'wallet':
        if customer is None:
            raise ServiceError('Wallet payment requires a customer')
        from bizbox.wallets.services import debit
        debit(customer, total_amount, description=f'Delivery order {order.order_reference}',
              reference=order.order_reference, user=user)
        order.payment_status = 'paid'
        order.save(update_fields=['payment_status', 'updated_at'])

    mark_checked_out(cart)
    logger.info(f"Delivery order placed: {order.order_reference} restaurant={restaurant.slug} total={total_amount}")
    return order


def public_restaurants_queryset(client_identifier=None):
    restaurants = Restaurant.objects.filter(status='active')
    if client_identifier:
        restaurants = restaurants.filter(client_identifier=client_identifier)
    return restaurants


@cached_query(cache_ttl=PUBLIC_MENU_CACHE_TTL, key_prefix="public_restaurants")
def public_restaurant_list(client_identifier=None):
    from .serializers import PublicRestaurantSerializer
    return PublicRestaurantSerializer(public_restaurants_queryset(client_identifier), many=True).data


@cached_query(cache_ttl=PUBLIC_MENU_CACHE_TTL, key_prefix="public_menu")
def public_restaurant_menu(slug):
    """Restaurant with its active categories and available items, or None"""
    from .serializers import PublicRestaurantSerializer, PublicMenuItemSerializer
    restaurant = public_restaurants_queryset().filter(slug=slug).first()
    if restaurant is None:
        return None

    items = list(restaurant.menu_items.filter(is_available=True).select_related('category'))
    categories = []
    for category in restaurant.menu_categories.filter(is_active=True):
        categories.append({
            'id': category.id,
            'name': category.name,
            'items': PublicMenuItemSerializer([item for item in items if item.category_id == category.id], many=True).data,
        })
    uncategorised = [item for item in items if item.category_id is None or not item.category.is_active]
    if uncategorised:
        categories.append({
            'id': None,
            'name': 'Other',
            'items': PublicMenuItemSerializer(uncategorised, many=True).data,
        })

    data = dict(PublicRestaurantSerializer(restaurant).data)
    data['categories'] = categories
    return data
