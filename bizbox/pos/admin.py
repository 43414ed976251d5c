from django.contrib import admin
from .models import Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ['sale_number', 'total_amount', 'discount_amount', 'payment_method', 'team_member', 'created_at']
    list_filter = ['payment_method', 'created_at']
    search_fields = ['sale_number', 'client_identifier']
    readonly_fields = ['sale_number', 'created_at']
    inlines = [SaleItemInline]
