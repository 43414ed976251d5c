from django.contrib import admin
from .models import Restaurant, MenuCategory, MenuItem, DeliveryOrder, DeliveryOrderItem


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'status', 'is_open', 'delivery_fee', 'minimum_order_amount', 'client_identifier']
    list_filter = ['status', 'is_open']
    search_fields = ['name', 'slug', 'client_identifier']
    prepopulated_fields = {'slug': ('name',)}


@admin.register(MenuCategory)
class MenuCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'restaurant', 'sort_order', 'is_active']
    list_filter = ['is_active', 'restaurant']


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'restaurant', 'category', 'price', 'discount_price', 'is_available', 'is_featured']
    list_filter = ['is_available', 'is_featured', 'restaurant']
    search_fields = ['name']


class DeliveryOrderItemInline(admin.TabularInline):
    model = DeliveryOrderItem
    extra = 0


@admin.register(DeliveryOrder)
class DeliveryOrderAdmin(admin.ModelAdmin):
    list_display = ['order_reference', 'restaurant', 'customer_name', 'order_status', 'payment_status', 'total_amount', 'created_at']
    list_filter = ['order_status', 'payment_status', 'payment_method', 'created_at']
    search_fields = ['order_reference', 'customer_name', 'customer_phone']
    readonly_fields = ['order_reference', 'created_at', 'updated_at']
    inlines = [DeliveryOrderItemInline]
