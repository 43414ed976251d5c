"""
Discount selection for carts and sales.

Exactly one discount is applied per sale: every (line, discount) pair is
evaluated and the pair worth the most wins. Ties keep the pair found first.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

ZERO = Decimal('0.00')
TWO_PLACES = Decimal('0.01')

PERCENTAGE = 'percentage'
FIXED = 'fixed'
BUY_X_GET_Y = 'buy_x_get_y'


@dataclass(frozen=True)
class DiscountRule:
    id: int
    name: str
    discount_type: str
    value: Decimal
    min_quantity: int = 0
    min_purchase_amount: Decimal = ZERO
    buy_quantity: int = 0
    get_quantity: int = 0
    product_ids: frozenset = field(default_factory=frozenset)
    category_ids: frozenset = field(default_factory=frozenset)

    @property
    def is_restricted(self):
        return bool(self.product_ids or self.category_ids)

    def applies_to(self, product_id, category_id=None):
        if not self.is_restricted:
            return True
        return product_id in self.product_ids or (category_id is not None and category_id in self.category_ids)


@dataclass(frozen=True)
class AppliedDiscount:
    rule: Optional[DiscountRule]
    amount: Decimal
    line_key: Optional[tuple] = None

    def as_dict(self):
        if self.rule is None:
            return {'discount_id': None, 'name': None, 'discount_type': None, 'amount': str(ZERO)}
        return {
            'discount_id': self.rule.id,
            'name': self.rule.name,
            'discount_type': self.rule.discount_type,
            'amount': str(self.amount),
        }


NO_DISCOUNT = AppliedDiscount(rule=None, amount=ZERO)


def discount_amount(rule: DiscountRule, unit_price: Decimal, quantity: int) -> Decimal:
    """Amount `rule` takes off a single line"""
    line_total = unit_price * quantity
    if rule.discount_type == PERCENTAGE:
        amount = line_total * rule.value / Decimal('100')
    elif rule.discount_type == FIXED:
        amount = min(rule.value, line_total)
    elif rule.discount_type == BUY_X_GET_Y:
        bundle = rule.buy_quantity + rule.get_quantity
        if bundle <= 0 or rule.get_quantity <= 0:
            return ZERO
        amount = (quantity // bundle) * rule.get_quantity * unit_price
    else:
        return ZERO
    return max(amount, ZERO).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def best_discount(lines: Iterable, rules: Iterable[DiscountRule], subtotal: Optional[Decimal] = None) -> AppliedDiscount:
    """
    Pick the single most valuable discount for a cart.

    `lines` expose `key`, `product_id`, `category_id`, `unit_price` and
    `quantity`; `subtotal` defaults to the sum of the line totals.
    """
    lines = list(lines)
    rules = list(rules)
    if subtotal is None:
        subtotal = sum((line.unit_price * line.quantity for line in lines), ZERO)

    best = NO_DISCOUNT
    for line in lines:
        if line.product_id is None:
            continue
        for rule in rules:
            if not rule.applies_to(line.product_id, line.category_id):
                continue
            if line.quantity < rule.min_quantity:
                continue
            if subtotal < rule.min_purchase_amount:
                continue
            amount = discount_amount(rule, line.unit_price, line.quantity)
            if amount > best.amount:
                best = AppliedDiscount(rule=rule, amount=amount, line_key=line.key)
    return best
