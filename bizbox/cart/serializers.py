from rest_framework import serializers
from .models import Cart, CartItem
from .services import summarize


class CartItemSerializer(serializers.ModelSerializer):
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = ['id', 'product', 'variant', 'menu_item', 'name', 'unit_price', 'quantity',
                  'special_instructions', 'subtotal', 'created_at', 'updated_at']
        read_only_fields = fields


class CartSerializer(serializers.ModelSerializer):
    items = CartItemSerializer(many=True, read_only=True)
    restaurant_name = serializers.CharField(source='restaurant.name', read_only=True, default=None)
    summary = serializers.SerializerMethodField()

    class Meta:
        model = Cart
        fields = ['id', 'cart_number', 'channel', 'restaurant', 'restaurant_name', 'status', 'notes',
                  'items', 'summary', 'created_at', 'updated_at']
        read_only_fields = fields

    def get_summary(self, obj):
        return summarize(obj)


class CartListSerializer(serializers.ModelSerializer):
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Cart
        fields = ['id', 'cart_number', 'channel', 'restaurant', 'status', 'item_count', 'created_at', 'updated_at']

    def get_item_count(self, obj):
        return sum(item.quantity for item in obj.items.all())


class CartCreateSerializer(serializers.Serializer):
    channel = serializers.ChoiceField(choices=Cart.CHANNEL_CHOICES, default='shop')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class CartItemAddSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(required=False)
    variant_id = serializers.IntegerField(required=False, allow_null=True)
    menu_item_id = serializers.IntegerField(required=False)
    quantity = serializers.IntegerField(default=1)
    special_instructions = serializers.CharField(required=False, allow_blank=True, default='')
    replace = serializers.BooleanField(default=False)

    def validate_quantity(self, value):
        if value < 1:
            raise serializers.ValidationError('Quantity must be at least 1.')
        return value

    def validate(self, attrs):
        if not attrs.get('product_id') and not attrs.get('menu_item_id'):
            raise serializers.ValidationError('Either product_id or menu_item_id is required.')
        return attrs


class CartItemUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()
