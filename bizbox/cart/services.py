"""
Persisted cart operations.

Every mutation locks the cart row, loads it into a CartState, applies one
engine operation and writes the result back, so concurrent requests against
the same cart are serialised.
"""
import logging
from decimal import Decimal
from typing import NamedTuple, Optional

from django.db import transaction

from bizbox.catalog.models import Product
from bizbox.catalog.stock import available_quantity
from bizbox.core.exceptions import ServiceError, NotFoundError, ConflictError
from bizbox.core.utils import generate_reference
from bizbox.food_delivery.models import MenuItem
from bizbox.pricing.engine import best_discount
from bizbox.pricing.models import Discount
from .engine import (
    CartError, CartLine, CartState, LineKey, LineNotFound, PRODUCT, MENU_ITEM, parse_int
)
from .models import Cart, CartItem

logger = logging.getLogger(__name__)

STATUS_TRANSITIONS = {
    'active': ('held', 'checked_out', 'abandoned'),
    'held': ('active', 'abandoned'),
}


class ResolvedLine(NamedTuple):
    """A cart line priced from the catalog, with what it was priced from"""
    line: CartLine
    available: Optional[int]
    product: Optional[Product] = None
    variant: object = None
    menu_item: Optional[MenuItem] = None


def to_service_error(error: CartError) -> ServiceError:
    details = {key: value for key, value in error.details.items() if key != 'key'}
    if isinstance(error, LineNotFound):
        return NotFoundError(error.message, **details)
    return ServiceError(error.message, **details)


def is_truthy(value):
    if isinstance(value, str):
        return value.lower() in ('true', '1', 'yes')
    return bool(value)


# Catalog resolution

def resolve_product_line(client_identifier, product_id, variant_id=None, quantity=1) -> ResolvedLine:
    """Price a product (or variant) line from the catalog"""
    product_id = parse_int(product_id, None)
    if product_id is None:
        raise ServiceError('product_id is required')
    product = Product.objects.select_related('category').filter(
        pk=product_id, client_identifier=client_identifier, is_active=True
    ).first()
    if product is None:
        raise NotFoundError('Product not found', detail=f'Product with id {product_id} is not available')

    variant = None
    variant_id = parse_int(variant_id, None) if variant_id not in (None, '') else None
    if variant_id is not None:
        variant = product.variants.filter(pk=variant_id, is_active=True).first()
        if variant is None:
            raise NotFoundError('Variant not found', detail=f'Variant with id {variant_id} is not available')

    line = CartLine(
        key=LineKey(PRODUCT, product.id, variant.id if variant else None),
        name=variant.display_name if variant else product.name,
        unit_price=variant.effective_price if variant else product.effective_price,
        quantity=parse_int(quantity, 1),
        meta={'category_id': product.category_id},
    )
    return ResolvedLine(line, available_quantity(product, variant), product=product, variant=variant)


def resolve_menu_line(client_identifier, menu_item_id, quantity=1, special_instructions='') -> ResolvedLine:
    """Price a menu item line; unavailable items have nothing available"""
    menu_item_id = parse_int(menu_item_id, None)
    if menu_item_id is None:
        raise ServiceError('menu_item_id is required')
    menu_item = MenuItem.objects.select_related('restaurant').filter(
        pk=menu_item_id, restaurant__client_identifier=client_identifier
    ).first()
    if menu_item is None:
        raise NotFoundError('Menu item not found', detail=f'Menu item with id {menu_item_id} does not exist')

    line = CartLine(
        key=LineKey(MENU_ITEM, menu_item.id, None),
        name=menu_item.name,
        unit_price=menu_item.effective_price,
        quantity=parse_int(quantity, 1),
        special_instructions=special_instructions or '',
        meta={'restaurant_id': menu_item.restaurant_id},
    )
    return ResolvedLine(line, None if menu_item.is_available else 0, menu_item=menu_item)


def resolve_line(cart, data) -> ResolvedLine:
    quantity = data.get('quantity', 1)
    if cart.channel == 'food_delivery':
        return resolve_menu_line(
            cart.client_identifier, data.get('menu_item_id'), quantity, data.get('special_instructions', '')
        )
    return resolve_product_line(cart.client_identifier, data.get('product_id'), data.get('variant_id'), quantity)


def resolve_key(client_identifier, key: LineKey, quantity=1, special_instructions='') -> ResolvedLine:
    if key.kind == MENU_ITEM:
        return resolve_menu_line(client_identifier, key.item_id, quantity, special_instructions)
    return resolve_product_line(client_identifier, key.item_id, key.variant_id, quantity)


def price_state(client_identifier, state: CartState):
    """
    Re-price every line of `state` from the catalog and re-check stock.

    Client-supplied prices are never trusted: the returned state carries
    current catalog prices. Raises when a line is gone or over-stocked.
    Returns the new state and the resolved lines keyed by line key.
    """
    priced = CartState(restaurant_id=state.restaurant_id)
    resolved = {}
    for line in state:
        result = resolve_key(client_identifier, line.key, line.quantity, line.special_instructions)
        try:
            priced.add(result.line, result.available)
        except CartError as e:
            raise to_service_error(e)
        resolved[line.key] = result
    return priced, resolved


# Persistence

def create_cart(user, channel='shop', restaurant=None, notes=''):
    cart = Cart.objects.create(
        cart_number=generate_reference('CART', Cart, 'cart_number'),
        client_identifier=user.identifier,
        channel=channel,
        restaurant=restaurant,
        notes=notes or '',
        created_by=user,
    )
    logger.info(f"Cart created: {cart.cart_number} channel={channel} tenant={user.identifier}")
    return cart


def lock_cart(cart):
    return Cart.objects.select_for_update().get(pk=cart.pk)


def require_active(cart):
    if cart.status != 'active':
        raise ConflictError(
            'Cart is not active',
            detail=f'Cart {cart.cart_number} is {cart.get_status_display().lower()}',
            status=cart.status,
        )


def load_state(cart) -> CartState:
    items = cart.items.select_related('product')
    lines = [
        CartLine(
            key=item.line_key,
            name=item.name,
            unit_price=item.unit_price,
            quantity=item.quantity,
            special_instructions=item.special_instructions,
            meta={'category_id': item.product.category_id} if item.product_id else {},
        )
        for item in items
    ]
    return CartState(lines, restaurant_id=cart.restaurant_id)


def persist_state(cart, state: CartState):
    """Write `state` back: update changed rows, create new ones, delete dropped ones"""
    existing = {item.line_key: item for item in cart.items.all()}

    for line in state:
        item = existing.pop(line.key, None)
        if item is None:
            CartItem.objects.create(
                cart=cart,
                product_id=line.key.item_id if line.key.kind == PRODUCT else None,
                variant_id=line.key.variant_id if line.key.kind == PRODUCT else None,
                menu_item_id=line.key.item_id if line.key.kind == MENU_ITEM else None,
                name=line.name,
                unit_price=line.unit_price,
                quantity=line.quantity,
                special_instructions=line.special_instructions,
            )
            continue
        changed = (item.quantity, item.unit_price, item.name, item.special_instructions) != (
            line.quantity, line.unit_price, line.name, line.special_instructions
        )
        if changed:
            item.quantity = line.quantity
            item.unit_price = line.unit_price
            item.name = line.name
            item.special_instructions = line.special_instructions
            item.save(update_fields=['quantity', 'unit_price', 'name', 'special_instructions', 'updated_at'])

    if existing:
        CartItem.objects.filter(pk__in=[item.pk for item in existing.values()]).delete()

    if cart.channel == 'food_delivery' and not len(state):
        cart.restaurant_id = None
    cart.save(update_fields=['restaurant', 'updated_at'])


def availability_for_item(item):
    if item.menu_item_id:
        return None if item.menu_item.is_available else 0
    if item.product is None or not item.product.is_active:
        return 0
    if item.variant is not None and not item.variant.is_active:
        return 0
    return available_quantity(item.product, item.variant)


# Operations

def _switch_restaurant(cart, state, restaurant_id, replace):
    if cart.restaurant_id and cart.restaurant_id != restaurant_id and len(state):
        if not replace:
            raise ConflictError(
                'Your cart contains items from another restaurant.',
                detail='Send replace=true to clear the cart and order from this restaurant.',
                restaurant_id=cart.restaurant_id,
            )
        state.clear()
    cart.restaurant_id = restaurant_id
    state.restaurant_id = restaurant_id


@transaction.atomic
def add_item(cart, data):
    """Add an item, merging with an existing line for the same item"""
    cart = lock_cart(cart)
    require_active(cart)
    resolved = resolve_line(cart, data)
    state = load_state(cart)

    if cart.channel == 'food_delivery':
        if not resolved.menu_item.restaurant.accepts_orders:
            raise ConflictError('Restaurant is not accepting orders right now.')
        _switch_restaurant(cart, state, resolved.line.meta['restaurant_id'], is_truthy(data.get('replace', False)))

    try:
        line = state.add(resolved.line, resolved.available)
    except CartError as e:
        raise to_service_error(e)

    persist_state(cart, state)
    return cart, line


@transaction.atomic
def update_item_quantity(cart, item_id, quantity):
    """Set a line's quantity; zero or less removes it"""
    cart = lock_cart(cart)
    require_active(cart)
    item = cart.items.select_related('product', 'variant', 'menu_item').filter(pk=item_id).first()
    if item is None:
        raise NotFoundError('Cart item not found', detail=f'Cart item with id {item_id} does not exist')

    quantity = parse_int(quantity, None)
    if quantity is None:
        raise ServiceError('quantity must be a whole number')

    state = load_state(cart)
    try:
        line = state.update_quantity(item.line_key, quantity, availability_for_item(item))
    except CartError as e:
        raise to_service_error(e)

    persist_state(cart, state)
    return cart, line


@transaction.atomic
def remove_item(cart, item_id):
    """Remove a line; an item that is not in the cart is ignored"""
    cart = lock_cart(cart)
    require_active(cart)
    item = cart.items.filter(pk=item_id).first()
    state = load_state(cart)
    removed = state.remove(item.line_key) if item is not None else None
    if removed is not None:
        persist_state(cart, state)
    return cart, removed


@transaction.atomic
def clear_cart(cart):
    cart = lock_cart(cart)
    require_active(cart)
    state = load_state(cart)
    state.clear()
    persist_state(cart, state)
    return cart


@transaction.atomic
def reconcile_cart(cart):
    """
    Clamp lines to current stock and refresh prices from the catalog.

    Returns the quantity adjustments that were made.
    """
    cart = lock_cart(cart)
    require_active(cart)
    items = list(cart.items.select_related('product', 'variant', 'menu_item'))
    state = load_state(cart)

    availability = {item.line_key: availability_for_item(item) for item in items}
    adjustments = state.reconcile(availability)

    for item in items:
        line = state.get(item.line_key)
        if line is None:
            continue
        if item.menu_item_id:
            line.unit_price = item.menu_item.effective_price
        else:
            line.unit_price = item.variant.effective_price if item.variant_id else item.product.effective_price

    persist_state(cart, state)
    if adjustments:
        logger.info(f"Cart {cart.cart_number} reconciled: {len(adjustments)} line(s) adjusted")
    return cart, adjustments


@transaction.atomic
def merge_payload(cart, payload):
    """
    Merge a locally saved cart into this cart.

    Each incoming line is re-priced from the catalog and merged through the
    same add path as a normal add; lines that cannot be merged are reported
    instead of failing the whole merge.
    """
    cart = lock_cart(cart)
    require_active(cart)
    incoming = CartState.from_payload(payload)
    state = load_state(cart)
    merged = []
    rejected = []

    for line in incoming:
        try:
            resolved = resolve_key(cart.client_identifier, line.key, line.quantity, line.special_instructions)
            if line.key.kind == MENU_ITEM:
                if cart.channel != 'food_delivery':
                    raise ServiceError('Menu items can only be added to food delivery carts')
                if not resolved.menu_item.restaurant.accepts_orders:
                    raise ConflictError('Restaurant is not accepting orders right now.')
                restaurant_id = resolved.line.meta['restaurant_id']
                if len(state) and cart.restaurant_id and cart.restaurant_id != restaurant_id:
                    raise ConflictError('Item belongs to another restaurant')
                state.add(resolved.line, resolved.available)
                cart.restaurant_id = restaurant_id
                state.restaurant_id = restaurant_id
            elif cart.channel == 'food_delivery':
                raise ServiceError('Products cannot be added to food delivery carts')
            else:
                state.add(resolved.line, resolved.available)
            merged.append(line.key)
        except CartError as e:
            rejected.append({**line.to_dict(), 'error': e.message})
        except ServiceError as e:
            rejected.append({**line.to_dict(), 'error': e.message})

    persist_state(cart, state)
    return cart, merged, rejected


def change_status(cart, new_status):
    allowed = STATUS_TRANSITIONS.get(cart.status, ())
    if new_status not in allowed:
        raise ConflictError(
            f'Cannot change cart from {cart.status} to {new_status}',
            status=cart.status,
        )
    cart.status = new_status
    cart.save(update_fields=['status', 'updated_at'])
    return cart


@transaction.atomic
def hold_cart(cart):
    return change_status(lock_cart(cart), 'held')


@transaction.atomic
def resume_cart(cart):
    return change_status(lock_cart(cart), 'active')


@transaction.atomic
def abandon_cart(cart):
    return change_status(lock_cart(cart), 'abandoned')


def mark_checked_out(cart):
    """Close a cart after checkout; caller holds the row lock"""
    return change_status(cart, 'checked_out')


def summarize(cart):
    """Totals for display; POS carts include the best automatic discount"""
    state = load_state(cart)
    subtotal = state.subtotal
    summary = {
        'subtotal': str(subtotal),
        'item_count': state.item_count,
        'line_count': state.line_count,
    }
    total = subtotal

    if cart.channel == 'pos':
        applied = best_discount(state.lines, Discount.current_rules(cart.client_identifier), subtotal)
        summary['discount'] = applied.as_dict()
        total = subtotal - applied.amount
    elif cart.channel == 'food_delivery' and cart.restaurant is not None:
        delivery_fee = cart.restaurant.delivery_fee
        total = subtotal + delivery_fee
        summary['delivery_fee'] = str(delivery_fee)
        summary['minimum_order_amount'] = str(cart.restaurant.minimum_order_amount)
        summary['meets_minimum_order'] = total >= cart.restaurant.minimum_order_amount

    summary['total'] = str(max(total, Decimal('0.00')))
    return summary
