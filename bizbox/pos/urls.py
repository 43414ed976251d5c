from django.urls import path
from . import views

urlpatterns = [
    path('sales/', views.sale_list, name='sale-list'),
    path('sales/complete/', views.sale_complete, name='sale-complete'),
    path('sales/summary/', views.sale_summary, name='sale-summary'),
    path('sales/bulk-delete/', views.sale_bulk_delete, name='sale-bulk-delete'),
    path('sales/<int:pk>/', views.sale_detail, name='sale-detail'),
    path('sales/<int:pk>/receipt/', views.sale_receipt, name='sale-receipt'),
]
