from rest_framework import serializers
from .models import Discount


class DiscountSerializer(serializers.ModelSerializer):
    discount_type_display = serializers.CharField(source='get_discount_type_display', read_only=True)

    class Meta:
        model = Discount
        fields = ['id', 'name', 'description', 'discount_type', 'discount_type_display', 'value',
                  'min_quantity', 'min_purchase_amount', 'buy_quantity', 'get_quantity',
                  'applicable_products', 'applicable_categories', 'starts_at', 'ends_at',
                  'is_active', 'created_at', 'updated_at']

    def validate(self, attrs):
        def current(name):
            return attrs.get(name, getattr(self.instance, name, None))

        tenant = self.context.get('client_identifier')
        for field in ('applicable_products', 'applicable_categories'):
            for related in attrs.get(field, []):
                if tenant and related.client_identifier != tenant:
                    raise serializers.ValidationError({field: ['Invalid pk - object does not exist.']})

        discount_type = current('discount_type')
        value = current('value')
        if value is not None and value < 0:
            raise serializers.ValidationError({'value': 'Value cannot be negative'})
        if discount_type == 'percentage' and value is not None and value > 100:
            raise serializers.ValidationError({'value': 'Percentage discounts cannot exceed 100'})
        if discount_type == 'buy_x_get_y' and (not current('buy_quantity') or not current('get_quantity')):
            raise serializers.ValidationError(
                {'buy_quantity': 'Buy X Get Y discounts need both buy_quantity and get_quantity'}
            )

        starts_at, ends_at = current('starts_at'), current('ends_at')
        if starts_at and ends_at and ends_at < starts_at:
            raise serializers.ValidationError({'ends_at': 'End date must be after the start date'})
        return attrs
