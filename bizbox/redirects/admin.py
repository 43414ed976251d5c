from django.contrib import admin
from .models import SubdomainRedirect


@admin.register(SubdomainRedirect)
class SubdomainRedirectAdmin(admin.ModelAdmin):
    list_display = ['subdomain', 'destination_url', 'http_status', 'is_active', 'updated_at']
    list_filter = ['http_status', 'is_active']
    search_fields = ['subdomain', 'destination_url', 'notes']
