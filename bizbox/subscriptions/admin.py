from django.contrib import admin
from .models import SubscriptionPlan, UserSubscription


@admin.register(SubscriptionPlan)
class SubscriptionPlanAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'price', 'duration_in_days', 'is_popular', 'is_active']
    list_filter = ['is_active', 'is_popular']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}


@admin.register(UserSubscription)
class UserSubscriptionAdmin(admin.ModelAdmin):
    list_display = ['user', 'plan', 'status', 'payment_method', 'payment_reference', 'start_date', 'end_date']
    list_filter = ['status', 'payment_method', 'plan']
    search_fields = ['user__username', 'user__email', 'payment_reference', 'identifier']
