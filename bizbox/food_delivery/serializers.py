from rest_framework import serializers
from bizbox.contacts.models import Contact
from .models import Restaurant, MenuCategory, MenuItem, DeliveryOrder, DeliveryOrderItem


class RestaurantSerializer(serializers.ModelSerializer):
    accepts_orders = serializers.BooleanField(read_only=True)
    menu_item_count = serializers.IntegerField(source='menu_items.count', read_only=True)

    class Meta:
        model = Restaurant
        fields = ['id', 'name', 'slug', 'description', 'address', 'phone', 'email', 'logo_url',
                  'delivery_fee', 'minimum_order_amount', 'estimated_prep_minutes', 'status', 'is_open',
                  'accepts_orders', 'menu_item_count', 'created_at', 'updated_at']

    def validate_delivery_fee(self, value):
        if value < 0:
            raise serializers.ValidationError('Delivery fee cannot be negative')
        return value

    def validate_minimum_order_amount(self, value):
        if value < 0:
            raise serializers.ValidationError('Minimum order amount cannot be negative')
        return value


class MenuCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = MenuCategory
        fields = ['id', 'restaurant', 'name', 'sort_order', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['restaurant']


class MenuItemSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    effective_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = MenuItem
        fields = ['id', 'restaurant', 'category', 'category_name', 'name', 'description', 'price',
                  'discount_price', 'effective_price', 'image_url', 'is_available', 'is_featured',
                  'created_at', 'updated_at']
        read_only_fields = ['restaurant']

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError('Price cannot be negative')
        return value

    def validate(self, attrs):
        restaurant = self.context.get('restaurant') or getattr(self.instance, 'restaurant', None)
        category = attrs.get('category')
        if category is not None and restaurant is not None and category.restaurant_id != restaurant.id:
            raise serializers.ValidationError({'category': ['Category belongs to another restaurant.']})

        price = attrs.get('price', getattr(self.instance, 'price', None))
        discount_price = attrs.get('discount_price', getattr(self.instance, 'discount_price', None))
        if discount_price is not None and price is not None and discount_price > price:
            raise serializers.ValidationError({'discount_price': ['Discount price cannot exceed price.']})
        return attrs


class DeliveryOrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = DeliveryOrderItem
        fields = ['id', 'menu_item', 'item_name', 'item_price', 'quantity', 'special_instructions', 'line_total']


class DeliveryOrderSerializer(serializers.ModelSerializer):
    items = DeliveryOrderItemSerializer(many=True, read_only=True)
    restaurant_name = serializers.CharField(source='restaurant.name', read_only=True)
    order_status_display = serializers.CharField(source='get_order_status_display', read_only=True)

    class Meta:
        model = DeliveryOrder
        fields = ['id', 'order_reference', 'restaurant', 'restaurant_name', 'cart_number', 'customer',
                  'customer_name', 'customer_phone', 'customer_email', 'customer_address',
                  'delivery_latitude', 'delivery_longitude', 'payment_method', 'payment_status',
                  'order_status', 'order_status_display', 'driver_name', 'driver_phone', 'subtotal',
                  'delivery_fee', 'service_charge', 'discount', 'total_amount', 'special_instructions',
                  'cancellation_reason', 'items', 'accepted_at', 'preparing_at', 'ready_at', 'assigned_at',
                  'out_for_delivery_at', 'delivered_at', 'cancelled_at', 'created_at', 'updated_at']
        read_only_fields = fields


class PlaceDeliveryOrderSerializer(serializers.Serializer):
    cart_id = serializers.IntegerField()
    customer_id = serializers.IntegerField(required=False, allow_null=True)
    customer_name = serializers.CharField(max_length=200)
    customer_phone = serializers.CharField(max_length=20)
    customer_email = serializers.EmailField(required=False, allow_blank=True, default='')
    customer_address = serializers.CharField()
    delivery_latitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True)
    delivery_longitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True)
    payment_method = serializers.ChoiceField(choices=DeliveryOrder.PAYMENT_METHOD_CHOICES, default='cash_on_delivery')
    special_instructions = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_customer_address(self, value):
        if not value.strip():
            raise serializers.ValidationError('Delivery address is required')
        return value.strip()

    def validate(self, attrs):
        customer_id = attrs.pop('customer_id', None)
        attrs['customer'] = None
        if customer_id:
            customer = Contact.objects.filter(
                pk=customer_id, client_identifier=self.context.get('client_identifier')
            ).first()
            if customer is None:
                raise serializers.ValidationError({'customer_id': ['Invalid pk - object does not exist.']})
            attrs['customer'] = customer
        return attrs


class OrderStatusUpdateSerializer(serializers.Serializer):
    order_status = serializers.ChoiceField(choices=DeliveryOrder.ORDER_STATUS_CHOICES)
    cancellation_reason = serializers.CharField(required=False, allow_blank=True, default='')


class AssignDriverSerializer(serializers.Serializer):
    driver_name = serializers.CharField(max_length=200)
    driver_phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')


class PublicMenuItemSerializer(serializers.ModelSerializer):
    effective_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = MenuItem
        fields = ['id', 'name', 'description', 'price', 'discount_price', 'effective_price', 'image_url', 'is_featured']


class PublicRestaurantSerializer(serializers.ModelSerializer):
    accepts_orders = serializers.BooleanField(read_only=True)

    class Meta:
        model = Restaurant
        fields = ['id', 'name', 'slug', 'description', 'address', 'phone', 'logo_url', 'delivery_fee',
                  'minimum_order_amount', 'estimated_prep_minutes', 'is_open', 'accepts_orders']


class PublicDeliveryOrderSerializer(serializers.ModelSerializer):
    """What a customer sees when tracking an order by reference"""
    items = DeliveryOrderItemSerializer(many=True, read_only=True)
    restaurant_name = serializers.CharField(source='restaurant.name', read_only=True)
    order_status_display = serializers.CharField(source='get_order_status_display', read_only=True)

    class Meta:
        model = DeliveryOrder
        fields = ['order_reference', 'restaurant_name', 'customer_name', 'order_status', 'order_status_display',
                  'payment_status', 'driver_name', 'subtotal', 'delivery_fee', 'total_amount', 'items',
                  'accepted_at', 'preparing_at', 'ready_at', 'assigned_at', 'out_for_delivery_at',
                  'delivered_at', 'cancelled_at', 'created_at']
