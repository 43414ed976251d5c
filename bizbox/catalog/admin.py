from django.contrib import admin
from .models import Category, Product, ProductVariant, StockMovement


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'client_identifier', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'client_identifier']
    ordering = ['name']


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'sku', 'category', 'product_type', 'price', 'discount_price', 'quantity', 'track_inventory', 'is_active']
    list_filter = ['product_type', 'track_inventory', 'is_active', 'category']
    search_fields = ['name', 'sku', 'barcode', 'client_identifier']
    ordering = ['name']
    inlines = [ProductVariantInline]


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ['product', 'variant', 'movement_type', 'quantity_change', 'quantity_after', 'reference', 'created_at']
    list_filter = ['movement_type', 'created_at']
    search_fields = ['product__name', 'reference']
    ordering = ['-created_at']
    readonly_fields = ['created_at']
