from django.contrib import admin
from .models import Wallet, WalletTransaction


@admin.register(Wallet)
class WalletAdmin(admin.ModelAdmin):
    list_display = ['contact', 'balance', 'currency', 'client_identifier', 'updated_at']
    search_fields = ['contact__first_name', 'contact__last_name', 'contact__contact_number']
    readonly_fields = ['balance', 'created_at', 'updated_at']


@admin.register(WalletTransaction)
class WalletTransactionAdmin(admin.ModelAdmin):
    list_display = ['reference', 'wallet', 'transaction_type', 'status', 'amount', 'balance_after', 'transaction_at']
    list_filter = ['transaction_type', 'status', 'transaction_at']
    search_fields = ['reference', 'description']
    ordering = ['-transaction_at']
