from django.contrib import admin
from .models import TeamMember


@admin.register(TeamMember)
class TeamMemberAdmin(admin.ModelAdmin):
    list_display = ['first_name', 'last_name', 'email', 'client_identifier', 'is_active', 'last_password_change']
    list_filter = ['is_active', 'language']
    search_fields = ['first_name', 'last_name', 'email', 'client_identifier']
    ordering = ['first_name', 'last_name']
    readonly_fields = ['identifier', 'password', 'last_password_change', 'created_at', 'updated_at']
