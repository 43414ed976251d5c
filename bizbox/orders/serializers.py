from decimal import Decimal
from rest_framework import serializers
from bizbox.contacts.models import Contact
from .models import ProductOrder, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'variant', 'name', 'attributes', 'quantity', 'price', 'line_total']


class ProductOrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    cart_number = serializers.CharField(source='cart.cart_number', read_only=True, default=None)
    order_status_display = serializers.CharField(source='get_order_status_display', read_only=True)
    payment_status_display = serializers.CharField(source='get_payment_status_display', read_only=True)

    class Meta:
        model = ProductOrder
        fields = ['id', 'order_number', 'cart', 'cart_number', 'contact', 'customer_name', 'customer_email',
                  'customer_phone', 'shipping_address', 'billing_address', 'subtotal', 'tax_amount',
                  'shipping_fee', 'discount_amount', 'total_amount', 'order_status', 'order_status_display',
                  'payment_status', 'payment_status_display', 'payment_method', 'payment_reference', 'notes',
                  'items', 'paid_at', 'created_at', 'updated_at']
        read_only_fields = ['order_number', 'cart', 'contact', 'subtotal', 'tax_amount', 'shipping_fee',
                            'discount_amount', 'total_amount', 'payment_status', 'paid_at',
                            'created_at', 'updated_at']


class ProductOrderListSerializer(serializers.ModelSerializer):
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = ProductOrder
        fields = ['id', 'order_number', 'customer_name', 'customer_email', 'total_amount', 'order_status',
                  'payment_status', 'payment_method', 'item_count', 'created_at']

    def get_item_count(self, obj):
        return sum(item.quantity for item in obj.items.all())


class CheckoutSerializer(serializers.Serializer):
    cart_id = serializers.IntegerField()
    contact_id = serializers.IntegerField(required=False, allow_null=True)
    customer_name = serializers.CharField(max_length=200)
    customer_email = serializers.EmailField()
    customer_phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    shipping_address = serializers.CharField(required=False, allow_blank=True, default='')
    billing_address = serializers.CharField(required=False, allow_blank=True, default='')
    payment_method = serializers.ChoiceField(choices=ProductOrder.PAYMENT_METHOD_CHOICES, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    tax_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), default=Decimal('0.00'))
    shipping_fee = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), default=Decimal('0.00'))
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'), default=Decimal('0.00'))

    def validate(self, attrs):
        contact_id = attrs.pop('contact_id', None)
        attrs['contact'] = None
        if contact_id:
            contact = Contact.objects.filter(pk=contact_id, client_identifier=self.context.get('client_identifier')).first()
            if contact is None:
                raise serializers.ValidationError({'contact_id': ['Invalid pk - object does not exist.']})
            attrs['contact'] = contact
        return attrs


class PublicCheckoutSerializer(serializers.Serializer):
    client_identifier = serializers.CharField(max_length=64)
    order_items = serializers.JSONField()
    customer_name = serializers.CharField(max_length=200)
    customer_email = serializers.EmailField()
    customer_phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    shipping_address = serializers.CharField(required=False, allow_blank=True, default='')
    billing_address = serializers.CharField(required=False, allow_blank=True, default='')
    payment_method = serializers.ChoiceField(choices=ProductOrder.PAYMENT_METHOD_CHOICES, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_order_items(self, value):
        if not isinstance(value, (list, dict)) or not value:
            raise serializers.ValidationError('order_items must be a non-empty list of items.')
        return value


class ProcessPaymentSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=ProductOrder.PAYMENT_METHOD_CHOICES, required=False)
    payment_reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
