"""
In-memory cart state machine.

A cart is an ordered set of lines keyed by (kind, item id, variant id).
Adding a line whose key is already present merges into the existing line
instead of duplicating it, and quantities never exceed what the caller says
is available. The engine knows nothing about the database: services load a
persisted cart into a CartState, apply one operation and write it back.

Availability is passed per call: an int is the most units that may be in the
cart for that line, None means unlimited (untracked stock, services).
"""
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Dict, List, NamedTuple, Optional

PRODUCT = 'product'
MENU_ITEM = 'menu_item'
LINE_KINDS = (PRODUCT, MENU_ITEM)

ZERO = Decimal('0.00')


class CartError(Exception):
    message = 'Cart operation failed.'

    def __init__(self, message=None, **details):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details


class InvalidQuantity(CartError):
    message = 'Quantity must be at least 1.'


class OutOfStock(CartError):
    message = 'This product is out of stock.'


class InsufficientStock(CartError):
    message = 'Cannot add more items than available in inventory.'


class LineNotFound(CartError):
    message = 'Item is not in the cart.'


class LineKey(NamedTuple):
    kind: str
    item_id: int
    variant_id: Optional[int] = None


@dataclass
class CartLine:
    key: LineKey
    name: str
    unit_price: Decimal
    quantity: int = 1
    special_instructions: str = ''
    meta: Dict = field(default_factory=dict)

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def product_id(self):
        return self.key.item_id if self.key.kind == PRODUCT else None

    @property
    def category_id(self):
        return self.meta.get('category_id')

    def to_dict(self):
        return {
            'kind': self.key.kind,
            'id': self.key.item_id,
            'variant_id': self.key.variant_id,
            'name': self.name,
            'price': str(self.unit_price),
            'quantity': self.quantity,
            'subtotal': str(self.subtotal),
            'special_instructions': self.special_instructions,
        }


@dataclass(frozen=True)
class Adjustment:
    """A line whose quantity had to change to match current availability"""
    key: LineKey
    name: str
    old_quantity: int
    new_quantity: int

    @property
    def removed(self):
        return self.new_quantity == 0

    def to_dict(self):
        return {
            'kind': self.key.kind,
            'id': self.key.item_id,
            'variant_id': self.key.variant_id,
            'name': self.name,
            'old_quantity': self.old_quantity,
            'new_quantity': self.new_quantity,
            'removed': self.removed,
        }


def parse_price(value) -> Optional[Decimal]:
    if value is None or value == '' or isinstance(value, bool):
        return None
    try:
        price = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not price.is_finite():
        return None
    return price


def resolve_price(effective_price=None, discount_price=None, price=None) -> Decimal:
    """First parseable price in precedence order; 0 when none parses"""
    for candidate in (effective_price, discount_price, price):
        parsed = parse_price(candidate)
        if parsed is not None:
            return parsed
    return ZERO


def parse_int(value, default=1) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(Decimal(str(value)))
    except (InvalidOperation, TypeError, ValueError, OverflowError):
        return default


def _check_available(key, name, quantity, available):
    if available is None:
        return
    if available <= 0:
        raise OutOfStock(key=key, name=name, available=0)
    if quantity > available:
        raise InsufficientStock(key=key, name=name, requested=quantity, available=available)


class CartState:
    """Ordered lines of one cart plus the context they were loaded with"""

    def __init__(self, lines=None, restaurant_id=None):
        self._lines: Dict[LineKey, CartLine] = {}
        self.restaurant_id = restaurant_id
        for line in lines or []:
            self._lines[line.key] = line

    def __iter__(self):
        return iter(list(self._lines.values()))

    def __len__(self):
        return len(self._lines)

    def __contains__(self, key):
        return key in self._lines

    def get(self, key) -> Optional[CartLine]:
        return self._lines.get(key)

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    @property
    def subtotal(self) -> Decimal:
        return sum((line.subtotal for line in self._lines.values()), ZERO)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def add(self, line: CartLine, available: Optional[int] = None) -> CartLine:
        """
        Add `line`, merging into an existing line with the same key.

        The merged quantity is checked against `available`; on failure the
        cart is left untouched.
        """
        if line.quantity < 1:
            raise InvalidQuantity(key=line.key, name=line.name)

        existing = self._lines.get(line.key)
        new_quantity = line.quantity + (existing.quantity if existing else 0)
        _check_available(line.key, line.name, new_quantity, available)

        if existing:
            existing.quantity = new_quantity
            return existing
        line = replace(line, meta=dict(line.meta))
        self._lines[line.key] = line
        return line

    def update_quantity(self, key: LineKey, quantity: int, available: Optional[int] = None) -> Optional[CartLine]:
        """Set a line's quantity; zero or less removes the line"""
        line = self._lines.get(key)
        if line is None:
            raise LineNotFound(key=key)
        if quantity <= 0:
            del self._lines[key]
            return None
        _check_available(key, line.name, quantity, available)
        line.quantity = quantity
        return line

    def remove(self, key: LineKey) -> Optional[CartLine]:
        """Remove a line; removing an absent line does nothing"""
        return self._lines.pop(key, None)

    def clear(self):
        self._lines.clear()

    def reconcile(self, availability: Dict[LineKey, Optional[int]]) -> List[Adjustment]:
        """
        Clamp every line to current availability.

        Keys missing from `availability` are treated as no longer sellable and
        their lines are dropped. Returns the lines that changed.
        """
        adjustments = []
        for key, line in list(self._lines.items()):
            available = availability.get(key, 0)
            if available is None or line.quantity <= available:
                continue
            new_quantity = max(available, 0)
            adjustments.append(Adjustment(key, line.name, line.quantity, new_quantity))
            if new_quantity == 0:
                del self._lines[key]
            else:
                line.quantity = new_quantity
        return adjustments

    def to_payload(self):
        payload = {'cart': [line.to_dict() for line in self._lines.values()]}
        if self.restaurant_id is not None:
            payload['restaurant_id'] = self.restaurant_id
        return payload

    @classmethod
    def from_payload(cls, data) -> 'CartState':
        """
        Rebuild a cart from its persisted form.

        Accepts a bare list of lines or ``{'cart': [...], 'restaurant_id': ...}``
        (``items`` and ``restaurantId`` are read too). Quantities that do not
        parse become 1, prices that do not parse become 0, subtotals are
        recomputed, and entries without an item id or with a quantity below 1
        are skipped. Duplicate keys are merged.
        """
        restaurant_id = None
        entries = data
        if isinstance(data, dict):
            entries = data.get('cart', data.get('items', []))
            restaurant_id = data.get('restaurant_id', data.get('restaurantId'))
        if not isinstance(entries, list):
            entries = []

        state = cls(restaurant_id=parse_int(restaurant_id, None) if restaurant_id is not None else None)
        for entry in entries:
            line = line_from_dict(entry)
            if line is not None:
                state.add(line)
        return state


def line_from_dict(entry) -> Optional[CartLine]:
    """One persisted line, or None when the entry is unusable"""
    if not isinstance(entry, dict):
        return None

    kind = entry.get('kind')
    if kind not in LINE_KINDS:
        kind = MENU_ITEM if entry.get('menu_item_id') is not None else PRODUCT

    raw_id = entry.get('id')
    if raw_id is None:
        raw_id = entry.get('menu_item_id') if kind == MENU_ITEM else entry.get('product_id')
    item_id = parse_int(raw_id, None)
    if item_id is None or item_id <= 0:
        return None

    variant_id = parse_int(entry.get('variant_id'), None) if entry.get('variant_id') is not None else None
    quantity = parse_int(entry.get('quantity', 1), 1)
    if quantity < 1:
        return None

    price = resolve_price(
        entry.get('effective_price'),
        entry.get('discount_price'),
        entry.get('price', entry.get('item_price', entry.get('unit_price'))),
    )
    name = entry.get('name') or entry.get('item_name') or ''
    return CartLine(
        key=LineKey(kind, item_id, variant_id),
        name=str(name),
        unit_price=price,
        quantity=quantity,
        special_instructions=str(entry.get('special_instructions') or ''),
        meta={'attributes': entry['attributes']} if isinstance(entry.get('attributes'), dict) else {},
    )
