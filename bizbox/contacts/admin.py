from django.contrib import admin
from .models import Contact


@admin.register(Contact)
class ContactAdmin(admin.ModelAdmin):
    list_display = ['first_name', 'last_name', 'email', 'contact_number', 'client_identifier', 'created_at']
    search_fields = ['first_name', 'last_name', 'email', 'contact_number', 'client_identifier']
    ordering = ['first_name', 'last_name']
