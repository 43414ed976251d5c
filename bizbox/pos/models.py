from django.conf import settings
from django.db import models
from decimal import Decimal
from bizbox.cart.models import Cart
from bizbox.catalog.models import Product, ProductVariant
from bizbox.pricing.models import Discount
from bizbox.teams.models import TeamMember


class Sale(models.Model):
    """Completed retail sale at the counter"""
    PAYMENT_METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('card', 'Card'),
    ]

    sale_number = models.CharField(max_length=50, unique=True)
    client_identifier = models.CharField(max_length=64, db_index=True)
    cart = models.ForeignKey(Cart, on_delete=models.SET_NULL, null=True, blank=True, related_name='sales')
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    discount = models.ForeignKey(Discount, on_delete=models.SET_NULL, null=True, blank=True, related_name='sales')
    discount_name = models.CharField(max_length=200, blank=True)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='cash')
    cash_received = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    change_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    team_member = models.ForeignKey(TeamMember, on_delete=models.SET_NULL, null=True, blank=True, related_name='sales')
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='sales')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.sale_number

    @property
    def cashier_name(self):
        if self.team_member is not None:
            return self.team_member.full_name
        if self.created_by is not None:
            return self.created_by.get_full_name() or self.created_by.username
        return ''

    class Meta:
        db_table = 'sales'
        ordering = ['-created_at']


class SaleItem(models.Model):
    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.SET_NULL, null=True, blank=True, related_name='sale_items')
    variant = models.ForeignKey(ProductVariant, on_delete=models.SET_NULL, null=True, blank=True, related_name='sale_items')
    name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=12, decimal_places=2)
    line_total = models.DecimalField(max_digits=12, decimal_places=2)

    def __str__(self):
        return f"{self.sale.sale_number} - {self.name} x {self.quantity}"

    class Meta:
        db_table = 'sale_items'
        ordering = ['id']
