from django.conf import settings
from django.db import models
from decimal import Decimal


class Category(models.Model):
    """Product categories"""
    client_identifier = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['name']


class Product(models.Model):
    """Product master"""
    PRODUCT_TYPE_CHOICES = [
        ('physical', 'Physical'),
        ('digital', 'Digital'),
        ('service', 'Service'),
        ('subscription', 'Subscription'),
    ]

    client_identifier = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=200, db_index=True)
    sku = models.CharField(max_length=100, blank=True, db_index=True)
    barcode = models.CharField(max_length=100, blank=True, db_index=True)
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    product_type = models.CharField(max_length=20, choices=PRODUCT_TYPE_CHOICES, default='physical')
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    discount_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    quantity = models.IntegerField(default=0)
    track_inventory = models.BooleanField(default=True)
    low_stock_threshold = models.IntegerField(default=0)
    image_url = models.URLField(blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.sku or 'NO-SKU'})"

    @property
    def effective_price(self):
        """Selling price: the discount price when it undercuts the list price"""
        if self.discount_price is not None and self.discount_price < self.price:
            return self.discount_price
        return self.price

    @property
    def is_low_stock(self):
        return self.track_inventory and 0 < self.quantity <= self.low_stock_threshold

    class Meta:
        db_table = 'products'
        ordering = ['name']


class ProductVariant(models.Model):
    """Product variants (size, colour, ...); price and stock override the parent"""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='variants')
    sku = models.CharField(max_length=100, blank=True, db_index=True)
    barcode = models.CharField(max_length=100, blank=True, db_index=True)
    attributes = models.JSONField(default=dict, blank=True)  # e.g., {"size": "L", "color": "Red"}
    price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    quantity = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.display_name

    @property
    def display_name(self):
        if not self.attributes:
            return self.product.name
        attrs = ', '.join(f"{key}: {value}" for key, value in self.attributes.items())
        return f"{self.product.name} ({attrs})"

    @property
    def effective_price(self):
        if self.price is not None:
            return self.price
        return self.product.effective_price

    class Meta:
        db_table = 'product_variants'
        ordering = ['id']


class StockMovement(models.Model):
    """Every change to a product or variant quantity"""
    MOVEMENT_TYPE_CHOICES = [
        ('sale', 'Sale'),
        ('order', 'Order'),
        ('adjustment', 'Adjustment'),
        ('restock', 'Restock'),
        ('cancellation', 'Cancellation'),
        ('return', 'Return'),
    ]

    client_identifier = models.CharField(max_length=64, db_index=True)
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='stock_movements')
    variant = models.ForeignKey(ProductVariant, on_delete=models.CASCADE, null=True, blank=True, related_name='stock_movements')
    movement_type = models.CharField(max_length=20, choices=MOVEMENT_TYPE_CHOICES)
    quantity_change = models.IntegerField()
    quantity_after = models.IntegerField()
    reference = models.CharField(max_length=100, blank=True)
    reason = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_movements')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'stock_movements'
        ordering = ['-created_at', '-id']
