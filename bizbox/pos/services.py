"""
Sale completion at the point of sale.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Sum

from bizbox.cart.engine import CartState, PRODUCT
from bizbox.cart.services import lock_cart, require_active, load_state, price_state, mark_checked_out
from bizbox.catalog.stock import decrement_stock, restore_stock
from bizbox.core.exceptions import ServiceError
from bizbox.core.utils import format_currency, generate_reference, money_string
from bizbox.pricing.engine import best_discount
from bizbox.pricing.models import Discount
from .models import Sale, SaleItem

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
TOP_ITEMS = 10


@transaction.atomic
def complete_sale(client_identifier, data, user=None, team_member=None):
    """
    Complete a sale from a POS cart or a direct list of items.

    Every line is re-priced and re-checked against stock, the best active
    discount is worked out here rather than trusted from the till, and
    cash sales must cover the total.
    """
    cart = data.get('cart')
    if cart is not None:
        cart = lock_cart(cart)
        require_active(cart)
        if cart.channel != 'pos':
            raise ServiceError('Only POS carts can be completed as sales')
        state = load_state(cart)
    else:
        state = CartState.from_payload(data.get('items') or [])

    state = CartState([line for line in state if line.key.kind == PRODUCT])
    if not len(state):
        raise ServiceError('Cart is empty')

    priced, resolved = price_state(client_identifier, state)
    subtotal = priced.subtotal
    applied = best_discount(priced.lines, Discount.current_rules(client_identifier), subtotal)
    total_amount = max(subtotal - applied.amount, ZERO)

    payment_method = data.get('payment_method') or 'cash'
    cash_received = data.get('cash_received')
    change_amount = ZERO
    if payment_method == 'cash':
        if cash_received is None or cash_received < total_amount:
            raise ServiceError(
                'Cash received is less than the total amount',
                total_amount=str(total_amount),
                cash_received=str(cash_received) if cash_received is not None else None,
            )
        change_amount = cash_received - total_amount

    sale = Sale.objects.create(
        sale_number=generate_reference('SALE', Sale, 'sale_number'),
        client_identifier=client_identifier,
        cart=cart,
        subtotal=subtotal,
        discount_id=applied.rule.id if applied.rule else None,
        discount_name=applied.rule.name if applied.rule else '',
        discount_amount=applied.amount,
        total_amount=total_amount,
        payment_method=payment_method,
        cash_received=cash_received,
        change_amount=change_amount,
        team_member=team_member,
        created_by=user,
    )

    for line in priced:
        match = resolved[line.key]
        decrement_stock(match.product, match.variant, line.quantity, movement_type='sale',
                        reference=sale.sale_number, user=user)
        SaleItem.objects.create(
            sale=sale,
            product=match.product,
            variant=match.variant,
            name=line.name,
            quantity=line.quantity,
            price=line.unit_price,
            line_total=line.subtotal,
        )

    if cart is not None:
        mark_checked_out(cart)

    logger.info(f"Sale completed: {sale.sale_number} total={total_amount} discount={applied.amount}")
    return sale


@transaction.atomic
def delete_sale(sale, user=None):
    """Delete a sale and put its items back into stock"""
    for item in sale.items.select_related('product', 'variant'):
        if item.product is not None:
            restore_stock(item.product, item.variant, item.quantity, movement_type='return',
                          reference=sale.sale_number, user=user)
    logger.info(f"Sale deleted: {sale.sale_number}")
    sale.delete()


def sales_summary(sales):
    totals = sales.aggregate(
        count=Count('id'),
        revenue=Sum('total_amount'),
        discounts=Sum('discount_amount'),
    )
    by_payment_method = {
        method: {'count': count, 'revenue': money_string(revenue)}
        for method, count, revenue in sales.order_by().values_list('payment_method').annotate(
            count=Count('id'), revenue=Sum('total_amount')
        )
    }
    top_items = SaleItem.objects.filter(sale__in=sales).values('name').annotate(
        quantity_sold=Sum('quantity'), revenue=Sum('line_total')
    ).order_by('-quantity_sold', 'name')[:TOP_ITEMS]
    return {
        'total_sales': totals['count'],
        'total_revenue': money_string(totals['revenue']),
        'total_discounts': money_string(totals['discounts']),
        'by_payment_method': by_payment_method,
        'top_items': [
            {'name': item['name'], 'quantity_sold': item['quantity_sold'],
             'revenue': money_string(item['revenue'])}
            for item in top_items
        ],
    }


def build_receipt(sale, currency=None, business_name=''):
    """Printable receipt with amounts formatted in the business currency"""
    def money(amount):
        return format_currency(amount, currency)

    return {
        'business_name': business_name,
        'sale_number': sale.sale_number,
        'date': sale.created_at.isoformat(),
        'cashier': sale.cashier_name,
        'items': [
            {
                'name': item.name,
                'quantity': item.quantity,
                'price': money(item.price),
                'line_total': money(item.line_total),
            }
            for item in sale.items.all()
        ],
        'subtotal': money(sale.subtotal),
        'discount': {'name': sale.discount_name, 'amount': money(sale.discount_amount)} if sale.discount_amount else None,
        'total': money(sale.total_amount),
        'payment_method': sale.get_payment_method_display(),
        'cash_received': money(sale.cash_received) if sale.cash_received is not None else None,
        'change': money(sale.change_amount),
    }
