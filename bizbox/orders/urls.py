from django.urls import path
from . import views

urlpatterns = [
    path('product-orders/', views.order_list, name='product-order-list'),
    path('product-orders/checkout/', views.order_checkout, name='product-order-checkout'),
    path('product-orders/statistics/', views.order_statistics, name='product-order-statistics'),
    path('product-orders/recent/', views.order_recent, name='product-order-recent'),
    path('product-orders/<int:pk>/', views.order_detail, name='product-order-detail'),
    path('product-orders/<int:pk>/process-payment/', views.order_process_payment, name='product-order-process-payment'),

    # Public endpoints
    path('public/product-orders/checkout/', views.public_checkout, name='public-product-order-checkout'),
]
