from django.conf import settings
from django.db import models
from decimal import Decimal
from bizbox.catalog.models import Product, ProductVariant
from bizbox.food_delivery.models import MenuItem, Restaurant
from .engine import LineKey, PRODUCT, MENU_ITEM


class Cart(models.Model):
    """Server-side cart for the shop, the POS counter or a food delivery order"""
    CHANNEL_CHOICES = [
        ('shop', 'Online Shop'),
        ('pos', 'Point of Sale'),
        ('food_delivery', 'Food Delivery'),
    ]

    STATUS_CHOICES = [
        ('active', 'Active'),
        ('held', 'Held'),
        ('checked_out', 'Checked Out'),
        ('abandoned', 'Abandoned'),
    ]

    cart_number = models.CharField(max_length=100, unique=True)
    client_identifier = models.CharField(max_length=64, db_index=True)
    channel = models.CharField(max_length=20, choices=CHANNEL_CHOICES, default='shop')
    restaurant = models.ForeignKey(Restaurant, on_delete=models.SET_NULL, null=True, blank=True, related_name='carts')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active', db_index=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='carts')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.cart_number

    @property
    def is_open(self):
        return self.status in ('active', 'held')

    class Meta:
        db_table = 'carts'
        ordering = ['-updated_at']


class CartItem(models.Model):
    """One line of a cart; at most one row per (product, variant) or menu item"""
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, null=True, blank=True, related_name='cart_items')
    variant = models.ForeignKey(ProductVariant, on_delete=models.CASCADE, null=True, blank=True, related_name='cart_items')
    menu_item = models.ForeignKey(MenuItem, on_delete=models.CASCADE, null=True, blank=True, related_name='cart_items')
    name = models.CharField(max_length=255)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    quantity = models.PositiveIntegerField(default=1)
    special_instructions = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def line_key(self):
        if self.menu_item_id:
            return LineKey(MENU_ITEM, self.menu_item_id, None)
        return LineKey(PRODUCT, self.product_id, self.variant_id)

    @property
    def subtotal(self):
        return self.unit_price * self.quantity

    class Meta:
        db_table = 'cart_items'
        ordering = ['id']
