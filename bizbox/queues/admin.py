from django.contrib import admin
from .models import QueueType, QueueNumber


@admin.register(QueueType)
class QueueTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'prefix', 'current_number', 'is_active', 'client_identifier', 'updated_at']
    list_filter = ['is_active']
    search_fields = ['name', 'client_identifier']


@admin.register(QueueNumber)
class QueueNumberAdmin(admin.ModelAdmin):
    list_display = ['queue_number', 'queue_type', 'customer_name', 'status', 'created_at', 'called_at']
    list_filter = ['status', 'queue_type', 'created_at']
    search_fields = ['queue_number', 'customer_name', 'customer_contact']
    ordering = ['-created_at']
