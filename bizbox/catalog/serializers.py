from rest_framework import serializers
from bizbox.core.serializers import TenantScopedModelSerializer
from .models import Category, Product, ProductVariant, StockMovement
from .stock import ADJUSTMENT_TYPES


class CategorySerializer(serializers.ModelSerializer):
    product_count = serializers.IntegerField(source='products.count', read_only=True)

    class Meta:
        model = Category
        fields = ['id', 'name', 'description', 'is_active', 'product_count', 'created_at', 'updated_at']


class ProductVariantSerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(read_only=True)
    effective_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = ProductVariant
        fields = ['id', 'product', 'display_name', 'sku', 'barcode', 'attributes', 'price', 'effective_price',
                  'quantity', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['product']

    def validate_attributes(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('Attributes must be an object of name/value pairs')
        return value

    def validate_quantity(self, value):
        if value < 0:
            raise serializers.ValidationError('Quantity cannot be negative')
        return value


class ProductSerializer(TenantScopedModelSerializer):
    tenant_fields = ('category',)

    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    effective_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)
    variants = ProductVariantSerializer(many=True, read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'sku', 'barcode', 'category', 'category_name', 'product_type', 'description',
                  'price', 'discount_price', 'effective_price', 'cost', 'quantity', 'track_inventory',
                  'low_stock_threshold', 'is_low_stock', 'image_url', 'is_active', 'variants',
                  'created_at', 'updated_at']

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError('Price cannot be negative')
        return value

    def validate_quantity(self, value):
        if value < 0:
            raise serializers.ValidationError('Quantity cannot be negative')
        return value

    def validate(self, attrs):
        attrs = super().validate(attrs)
        price = attrs.get('price', getattr(self.instance, 'price', None))
        discount_price = attrs.get('discount_price', getattr(self.instance, 'discount_price', None))
        if discount_price is not None and price is not None and discount_price > price:
            raise serializers.ValidationError({'discount_price': 'Discount price cannot exceed the price'})
        return attrs


class ProductListSerializer(serializers.ModelSerializer):
    """Lightweight product rows for lists and search"""
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    effective_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'sku', 'barcode', 'category', 'category_name', 'product_type', 'price',
                  'discount_price', 'effective_price', 'quantity', 'track_inventory', 'is_active']


class StockMovementSerializer(serializers.ModelSerializer):
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = StockMovement
        fields = ['id', 'product', 'variant', 'movement_type', 'quantity_change', 'quantity_after',
                  'reference', 'reason', 'created_by', 'created_by_username', 'created_at']


class StockAdjustmentSerializer(serializers.Serializer):
    variant = serializers.IntegerField(required=False, allow_null=True)
    adjustment_type = serializers.ChoiceField(choices=ADJUSTMENT_TYPES)
    quantity = serializers.IntegerField(min_value=0)
    reason = serializers.CharField(required=False, allow_blank=True, default='')
