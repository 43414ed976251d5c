from django.contrib import admin
from .models import FamilyMember, FamilyRelationship, EditRequest


@admin.register(FamilyMember)
class FamilyMemberAdmin(admin.ModelAdmin):
    list_display = ['first_name', 'last_name', 'gender', 'birth_date', 'death_date', 'client_identifier']
    list_filter = ['gender']
    search_fields = ['first_name', 'last_name']


@admin.register(FamilyRelationship)
class FamilyRelationshipAdmin(admin.ModelAdmin):
    list_display = ['from_member', 'relationship_type', 'to_member', 'created_at']
    list_filter = ['relationship_type']


@admin.register(EditRequest)
class EditRequestAdmin(admin.ModelAdmin):
    list_display = ['member', 'requester_name', 'status', 'created_at', 'reviewed_at']
    list_filter = ['status']
    search_fields = ['member__first_name', 'member__last_name', 'requester_email']
