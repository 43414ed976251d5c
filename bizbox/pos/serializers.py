from decimal import Decimal
from rest_framework import serializers
from .models import Sale, SaleItem


class SaleItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleItem
        fields = ['id', 'product', 'variant', 'name', 'quantity', 'price', 'line_total']


class SaleSerializer(serializers.ModelSerializer):
    items = SaleItemSerializer(many=True, read_only=True)
    cart_number = serializers.CharField(source='cart.cart_number', read_only=True, default=None)
    cashier_name = serializers.CharField(read_only=True)

    class Meta:
        model = Sale
        fields = ['id', 'sale_number', 'cart', 'cart_number', 'subtotal', 'discount', 'discount_name',
                  'discount_amount', 'total_amount', 'payment_method', 'cash_received', 'change_amount',
                  'team_member', 'cashier_name', 'items', 'created_at']
        read_only_fields = fields


class CompleteSaleSerializer(serializers.Serializer):
    cart_id = serializers.IntegerField(required=False, allow_null=True)
    items = serializers.JSONField(required=False)
    payment_method = serializers.ChoiceField(choices=Sale.PAYMENT_METHOD_CHOICES, default='cash')
    cash_received = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'),
                                             required=False, allow_null=True)

    def validate(self, attrs):
        if not attrs.get('cart_id') and not attrs.get('items'):
            raise serializers.ValidationError('Either cart_id or items is required.')
        return attrs


class BulkDeleteSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
