import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models


def generate_identifier():
    """Tenant key stamped on every row a user owns"""
    return uuid.uuid4().hex


def default_app_currency():
    return dict(settings.BIZBOX_DEFAULT_CURRENCY)


class User(AbstractUser):
    """Account owner; every tenant-scoped row carries the owner's identifier"""
    identifier = models.CharField(max_length=64, unique=True, default=generate_identifier, editable=False)
    contact_number = models.CharField(max_length=20, blank=True, null=True)
    app_currency = models.JSONField(default=default_app_currency, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'


class Setting(models.Model):
    """System settings"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key

    class Meta:
        db_table = 'settings'


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('stock_adjust', 'Stock Adjustment'),
        ('cart_add', 'Add to Cart'),
        ('cart_update', 'Cart Update'),
        ('cart_remove', 'Remove from Cart'),
        ('cart_clear', 'Cart Cleared'),
        ('cart_merge', 'Cart Merged'),
        ('cart_checkout', 'Cart Checkout'),
        ('sale_complete', 'Sale Completed'),
        ('sale_delete', 'Sale Deleted'),
        ('order_create', 'Order Created'),
        ('order_status', 'Order Status Changed'),
        ('order_payment', 'Order Payment'),
        ('wallet_credit', 'Wallet Credit'),
        ('wallet_debit', 'Wallet Debit'),
        ('wallet_transfer', 'Wallet Transfer'),
        ('team_change', 'Team Change'),
        ('password_reset', 'Password Reset'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    client_identifier = models.CharField(max_length=64, blank=True, db_index=True)
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., product name, sale number)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., cart number, order number)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_3f1b2c_idx'),
            models.Index(fields=['action'], name='audit_logs_action_8d6e4a_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_5b7c9d_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_object__2e4f6a_idx'),
        ]
