"""
Stock helpers shared by carts, orders and sales.

Stock lives on the variant when one is given, on the product otherwise.
Products that do not track inventory have unlimited availability (None).
"""
import logging

from django.db import transaction
from django.db.models import F

from bizbox.core.exceptions import ServiceError
from .models import StockMovement

logger = logging.getLogger(__name__)

ADJUSTMENT_TYPES = ('add', 'subtract', 'set')


class InsufficientStockError(ServiceError):
    def __init__(self, name, requested, available):
        super().__init__(
            f"Insufficient stock for {name}",
            detail='Cannot add more items than available in inventory.',
            requested=requested,
            available=available,
        )


def _holder(product, variant=None):
    return variant if variant is not None else product


def _holder_name(product, variant=None):
    return variant.display_name if variant is not None else product.name


def available_quantity(product, variant=None):
    """Quantity that can still be sold, or None when stock is not tracked"""
    if not product.track_inventory:
        return None
    return max(_holder(product, variant).quantity, 0)


def record_movement(product, variant, movement_type, quantity_change, quantity_after,
                    reference='', reason='', user=None):
    return StockMovement.objects.create(
        client_identifier=product.client_identifier,
        product=product,
        variant=variant,
        movement_type=movement_type,
        quantity_change=quantity_change,
        quantity_after=quantity_after,
        reference=reference or '',
        reason=reason or '',
        created_by=user if user is not None and user.is_authenticated else None,
    )


def decrement_stock(product, variant, quantity, movement_type='sale', reference='', user=None):
    """
    Atomically take `quantity` out of stock.

    The conditional update never lets stock go negative; when fewer units
    are left than requested InsufficientStockError is raised and nothing
    changes.
    """
    if not product.track_inventory:
        return None

    holder = _holder(product, variant)
    updated = type(holder).objects.filter(pk=holder.pk, quantity__gte=quantity).update(
        quantity=F('quantity') - quantity
    )
    holder.refresh_from_db(fields=['quantity'])
    if not updated:
        raise InsufficientStockError(_holder_name(product, variant), quantity, max(holder.quantity, 0))

    logger.info(f"Stock decremented: product={product.id} variant={getattr(variant, 'id', None)} "
                f"qty={quantity} remaining={holder.quantity} ref={reference}")
    return record_movement(product, variant, movement_type, -quantity, holder.quantity, reference, user=user)


def restore_stock(product, variant, quantity, movement_type='cancellation', reference='', user=None):
    """Put `quantity` back into stock (cancellations, refunds, deleted sales)"""
    if not product.track_inventory:
        return None

    holder = _holder(product, variant)
    type(holder).objects.filter(pk=holder.pk).update(quantity=F('quantity') + quantity)
    holder.refresh_from_db(fields=['quantity'])
    return record_movement(product, variant, movement_type, quantity, holder.quantity, reference, user=user)


def adjust_stock(product, variant, adjustment_type, quantity, reason='', user=None):
    """Manual stock adjustment: add, subtract or set an absolute quantity"""
    if adjustment_type not in ADJUSTMENT_TYPES:
        raise ServiceError(f"adjustment_type must be one of: {', '.join(ADJUSTMENT_TYPES)}")
    if quantity < 0 or (quantity == 0 and adjustment_type != 'set'):
        raise ServiceError('Quantity must be greater than zero')

    with transaction.atomic():
        holder = _holder(product, variant)
        holder = type(holder).objects.select_for_update().get(pk=holder.pk)
        old_quantity = holder.quantity

        if adjustment_type == 'add':
            new_quantity = old_quantity + quantity
        elif adjustment_type == 'subtract':
            if quantity > old_quantity:
                raise ServiceError(
                    'Cannot subtract more than the current stock',
                    current_quantity=old_quantity,
                )
            new_quantity = old_quantity - quantity
        else:
            new_quantity = quantity

        holder.quantity = new_quantity
        holder.save(update_fields=['quantity', 'updated_at'])
        movement = record_movement(
            product, variant,
            'restock' if adjustment_type == 'add' else 'adjustment',
            new_quantity - old_quantity, new_quantity,
            reason=reason, user=user,
        )

    if variant is not None:
        variant.quantity = new_quantity
    else:
        product.quantity = new_quantity
    return movement
