from django.conf import settings
from django.db import models
from django.utils import timezone
from decimal import Decimal
from bizbox.contacts.models import Contact


def default_currency():
    return settings.BIZBOX_DEFAULT_CURRENCY['code']


class Wallet(models.Model):
    """Stored balance of a contact"""
    contact = models.OneToOneField(Contact, on_delete=models.CASCADE, related_name='wallet')
    client_identifier = models.CharField(max_length=64, db_index=True)
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3, default=default_currency)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.contact.full_name} - {self.balance} {self.currency}"

    class Meta:
        db_table = 'wallets'


class WalletTransaction(models.Model):
    """Ledger of wallet movements; balance_after is the balance once applied"""
    TRANSACTION_TYPE_CHOICES = [
        ('credit', 'Credit'),
        ('debit', 'Debit'),
    ]

    STATUS_CHOICES = [
        ('completed', 'Completed'),
        ('failed', 'Failed'),
    ]

    wallet = models.ForeignKey(Wallet, on_delete=models.CASCADE, related_name='transactions')
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPE_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='completed')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    reference = models.CharField(max_length=100, db_index=True)
    description = models.TextField(blank=True)
    balance_after = models.DecimalField(max_digits=12, decimal_places=2)
    transaction_at = models.DateTimeField(default=timezone.now)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='wallet_transactions')

    def __str__(self):
        return f"{self.reference} - {self.transaction_type} - {self.amount}"

    class Meta:
        db_table = 'wallet_transactions'
        ordering = ['-transaction_at', '-id']
