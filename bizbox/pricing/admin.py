from django.contrib import admin
from .models import Discount


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    list_display = ['name', 'discount_type', 'value', 'min_quantity', 'min_purchase_amount', 'starts_at', 'ends_at', 'is_active']
    list_filter = ['discount_type', 'is_active']
    search_fields = ['name', 'client_identifier']
    filter_horizontal = ['applicable_products', 'applicable_categories']
    ordering = ['name']
