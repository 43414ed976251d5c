from django.contrib import admin
from .models import Cart, CartItem


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ['cart_number', 'channel', 'status', 'restaurant', 'created_by', 'updated_at']
    list_filter = ['channel', 'status', 'created_at']
    search_fields = ['cart_number', 'client_identifier']
    ordering = ['-updated_at']
    readonly_fields = ['cart_number', 'created_at', 'updated_at']
    inlines = [CartItemInline]
