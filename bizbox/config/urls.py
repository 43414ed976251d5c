"""
URL configuration for the bizbox project.

Every app exposes its API under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Bizbox Admin Panel"
admin.site.site_title = "Bizbox Admin Portal"
admin.site.index_title = "Welcome to the Bizbox Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('bizbox.core.urls')),
    path('api/v1/', include('bizbox.catalog.urls')),
    path('api/v1/', include('bizbox.pricing.urls')),
    path('api/v1/', include('bizbox.cart.urls')),
    path('api/v1/', include('bizbox.orders.urls')),
    path('api/v1/', include('bizbox.pos.urls')),
    path('api/v1/', include('bizbox.food_delivery.urls')),
    path('api/v1/', include('bizbox.queues.urls')),
    path('api/v1/', include('bizbox.contacts.urls')),
    path('api/v1/', include('bizbox.wallets.urls')),
    path('api/v1/', include('bizbox.redirects.urls')),
    path('api/v1/', include('bizbox.teams.urls')),
    path('api/v1/', include('bizbox.jobs.urls')),
    path('api/v1/', include('bizbox.courses.urls')),
    path('api/v1/', include('bizbox.genealogy.urls')),
    path('api/v1/', include('bizbox.payroll.urls')),
    path('api/v1/', include('bizbox.content.urls')),
    path('api/v1/', include('bizbox.subscriptions.urls')),
]
