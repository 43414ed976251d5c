from django.db import models
from django.db.models import Q
from django.utils import timezone
from decimal import Decimal
from bizbox.catalog.models import Category, Product
from .engine import DiscountRule


class Discount(models.Model):
    """Automatic discounts evaluated at POS checkout"""
    DISCOUNT_TYPE_CHOICES = [
        ('percentage', 'Percentage'),
        ('fixed', 'Fixed Amount'),
        ('buy_x_get_y', 'Buy X Get Y'),
    ]

    client_identifier = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    discount_type = models.CharField(max_length=20, choices=DISCOUNT_TYPE_CHOICES)
    value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    min_quantity = models.PositiveIntegerField(default=0)
    min_purchase_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    buy_quantity = models.PositiveIntegerField(default=0)
    get_quantity = models.PositiveIntegerField(default=0)
    applicable_products = models.ManyToManyField(Product, related_name='discounts', blank=True)
    applicable_categories = models.ManyToManyField(Category, related_name='discounts', blank=True)
    starts_at = models.DateTimeField(null=True, blank=True)
    ends_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def as_rule(self):
        return DiscountRule(
            id=self.id,
            name=self.name,
            discount_type=self.discount_type,
            value=self.value,
            min_quantity=self.min_quantity,
            min_purchase_amount=self.min_purchase_amount,
            buy_quantity=self.buy_quantity,
            get_quantity=self.get_quantity,
            product_ids=frozenset(product.id for product in self.applicable_products.all()),
            category_ids=frozenset(category.id for category in self.applicable_categories.all()),
        )

    @classmethod
    def current(cls, client_identifier, now=None):
        """Active discounts of a tenant whose validity window includes `now`"""
        now = now or timezone.now()
        return cls.objects.filter(
            client_identifier=client_identifier,
            is_active=True,
        ).filter(
            Q(starts_at__isnull=True) | Q(starts_at__lte=now),
            Q(ends_at__isnull=True) | Q(ends_at__gte=now),
        ).prefetch_related('applicable_products', 'applicable_categories')

    @classmethod
    def current_rules(cls, client_identifier, now=None):
        return [discount.as_rule() for discount in cls.current(client_identifier, now)]

    class Meta:
        db_table = 'discounts'
        ordering = ['name']
