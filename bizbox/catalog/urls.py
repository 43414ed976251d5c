from django.urls import path
from . import views

urlpatterns = [
    # Category endpoints
    path('categories/', views.category_list_create, name='category-list-create'),
    path('categories/<int:pk>/', views.category_detail, name='category-detail'),

    # Product endpoints
    path('products/', views.product_list_create, name='product-list-create'),
    path('products/lookup/', views.product_lookup, name='product-lookup'),
    path('products/<int:pk>/', views.product_detail, name='product-detail'),
    path('products/<int:pk>/variants/', views.product_variants, name='product-variants'),
    path('products/<int:pk>/adjust-stock/', views.product_adjust_stock, name='product-adjust-stock'),
    path('products/<int:pk>/stock-history/', views.product_stock_history, name='product-stock-history'),

    # Variant endpoints
    path('variants/<int:pk>/', views.product_variant_detail, name='product-variant-detail'),
]
