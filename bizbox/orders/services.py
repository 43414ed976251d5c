"""
Product order checkout, status flow and payments.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from bizbox.cart.engine import CartState, PRODUCT
from bizbox.cart.services import lock_cart, require_active, load_state, price_state, mark_checked_out
from bizbox.catalog.stock import decrement_stock, restore_stock
from bizbox.core.exceptions import ServiceError, ConflictError
from bizbox.core.utils import generate_reference, money_string
from .models import ProductOrder, OrderItem

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')

ORDER_TRANSITIONS = {
    'pending': ('confirmed', 'cancelled'),
    'confirmed': ('processing', 'cancelled'),
    'processing': ('shipped', 'cancelled'),
    'shipped': ('delivered',),
    'delivered': ('refunded',),
}

CUSTOMER_FIELDS = ('customer_name', 'customer_email', 'customer_phone', 'shipping_address',
                   'billing_address', 'payment_method', 'notes')
CHARGE_FIELDS = ('tax_amount', 'shipping_fee', 'discount_amount')


def create_order(client_identifier, state: CartState, data, cart=None, user=None):
    """
    Create an order from a cart state and take its items out of stock.

    Lines are re-priced from the catalog first; the caller must already be
    inside a transaction.
    """
    state = CartState([line for line in state if line.key.kind == PRODUCT])
    if not len(state):
        raise ServiceError('Cart is empty')

    priced, resolved = price_state(client_identifier, state)
    subtotal = priced.subtotal
    charges = {field: data.get(field) or ZERO for field in CHARGE_FIELDS}
    total_amount = subtotal + charges['tax_amount'] + charges['shipping_fee'] - charges['discount_amount']

    order = ProductOrder.objects.create(
        order_number=generate_reference('ORD', ProductOrder, 'order_number', length=6),
        client_identifier=client_identifier,
        cart=cart,
        contact=data.get('contact'),
        subtotal=subtotal,
        total_amount=max(total_amount, ZERO),
        created_by=user,
        **charges,
        **{field: data.get(field) or '' for field in CUSTOMER_FIELDS},
    )

    for line in priced:
        match = resolved[line.key]
        decrement_stock(match.product, match.variant, line.quantity, movement_type='order',
                        reference=order.order_number, user=user)
        OrderItem.objects.create(
            order=order,
            product=match.product,
            variant=match.variant,
            name=line.name,
            attributes=dict(match.variant.attributes) if match.variant is not None else {},
            quantity=line.quantity,
            price=line.unit_price,
            line_total=line.subtotal,
        )

    logger.info(f"Product order created: {order.order_number} items={priced.item_count} total={order.total_amount}")
    return order


@transaction.atomic
def checkout_cart(cart, data, user=None):
    """Check out a shop cart; stock is re-verified and taken atomically"""
    cart = lock_cart(cart)
    require_active(cart)
    if cart.channel != 'shop':
        raise ServiceError('Only shop carts can be checked out as product orders')

    order = create_order(cart.client_identifier, load_state(cart), data, cart=cart, user=user)
    mark_checked_out(cart)
    return order


@transaction.atomic
def public_checkout(client_identifier, order_items, data):
    """
    Anonymous checkout from a storefront.

    `order_items` is whatever the storefront persisted; it goes through the
    same normalisation as a saved cart and only item ids and quantities are
    kept. Prices always come from the catalog.
    """
    state = CartState.from_payload(order_items)
    data = {field: data.get(field) for field in CUSTOMER_FIELDS}
    return create_order(client_identifier, state, data)


def restore_order_stock(order, movement_type, user=None):
    if order.stock_restored:
        return
    for item in order.items.select_related('product', 'variant'):
        if item.product is not None:
            restore_stock(item.product, item.variant, item.quantity, movement_type=movement_type,
                          reference=order.order_number, user=user)
    order.stock_restored = True
    order.save(update_fields=['stock_restored', 'updated_at'])


@transaction.atomic
def change_status(order, new_status, user=None):
    """Move an order along the status flow; cancelling or refunding restocks once"""
    order = ProductOrder.objects.select_for_update().get(pk=order.pk)
    if new_status == order.order_status:
        return order
    if new_status not in ORDER_TRANSITIONS.get(order.order_status, ()):
        raise ConflictError(
            f"Cannot change order status from {order.order_status} to {new_status}",
            allowed=list(ORDER_TRANSITIONS.get(order.order_status, ())),
        )

    old_status = order.order_status
    order.order_status = new_status
    update_fields = ['order_status', 'updated_at']
    if new_status == 'refunded' and order.payment_status == 'paid':
        order.payment_status = 'refunded'
        update_fields.append('payment_status')
    order.save(update_fields=update_fields)

    if new_status in ('cancelled', 'refunded'):
        restore_order_stock(order, 'cancellation' if new_status == 'cancelled' else 'return', user=user)

    logger.info(f"Product order {order.order_number}: {old_status} -> {new_status}")
    return order


@transaction.atomic
def process_payment(order, payment_method=None, payment_reference='', user=None):
    """Mark an order paid; a pending order is confirmed at the same time"""
    order = ProductOrder.objects.select_for_update().get(pk=order.pk)
    if order.payment_status == 'paid':
        raise ConflictError('Order is already paid')
    if order.order_status in ('cancelled', 'refunded'):
        raise ConflictError(f"Cannot take payment for a {order.order_status} order")

    order.payment_status = 'paid'
    order.paid_at = timezone.now()
    if payment_method:
        order.payment_method = payment_method
    if payment_reference:
        order.payment_reference = payment_reference
    if order.order_status == 'pending':
        order.order_status = 'confirmed'
    order.save()
    logger.info(f"Payment recorded for order {order.order_number}: {order.total_amount}")
    return order


@transaction.atomic
def delete_order(order, user=None):
    if order.order_status not in ('pending', 'cancelled'):
        raise ConflictError('Only pending or cancelled orders can be deleted', order_status=order.order_status)
    if order.order_status == 'pending':
        restore_order_stock(order, 'cancellation', user=user)
    order.delete()


def order_statistics(orders):
    """Counts per status, paid revenue and average order value"""
    counts = dict(orders.order_by().values_list('order_status').annotate(count=Count('id')))
    paid = orders.filter(payment_status='paid').aggregate(revenue=Sum('total_amount'), count=Count('id'))
    revenue = paid['revenue'] or ZERO
    average = (revenue / paid['count']).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP) if paid['count'] else ZERO
    return {
        'total_orders': orders.count(),
        'by_status': {value: counts.get(value, 0) for value, _ in ProductOrder.ORDER_STATUS_CHOICES},
        'paid_orders': paid['count'],
        'pending_payment': orders.filter(payment_status='pending').exclude(order_status='cancelled').count(),
        'total_revenue': money_string(revenue),
        'average_order_value': money_string(average),
    }
