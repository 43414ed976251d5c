from django.urls import path
from . import views

urlpatterns = [
    # Restaurant endpoints
    path('restaurants/', views.restaurant_list_create, name='restaurant-list-create'),
    path('restaurants/<int:pk>/', views.restaurant_detail, name='restaurant-detail'),
    path('restaurants/<int:pk>/toggle-open/', views.restaurant_toggle_open, name='restaurant-toggle-open'),
    path('restaurants/<int:pk>/menu-categories/', views.menu_category_list_create, name='menu-category-list-create'),
    path('restaurants/<int:pk>/menu-items/', views.menu_item_list_create, name='menu-item-list-create'),

    # Menu endpoints
    path('menu-categories/<int:pk>/', views.menu_category_detail, name='menu-category-detail'),
    path('menu-items/<int:pk>/', views.menu_item_detail, name='menu-item-detail'),
    path('menu-items/<int:pk>/toggle-availability/', views.menu_item_toggle_availability, name='menu-item-toggle-availability'),

    # Delivery order endpoints
    path('delivery-orders/', views.delivery_order_list, name='delivery-order-list'),
    path('delivery-orders/place/', views.delivery_order_place, name='delivery-order-place'),
    path('delivery-orders/<int:pk>/', views.delivery_order_detail, name='delivery-order-detail'),
    path('delivery-orders/<int:pk>/status/', views.delivery_order_update_status, name='delivery-order-update-status'),
    path('delivery-orders/<int:pk>/assign-driver/', views.delivery_order_assign_driver, name='delivery-order-assign-driver'),

    # Public endpoints
    path('public/restaurants/', views.public_restaurant_list, name='public-restaurant-list'),
    path('public/restaurants/<slug:slug>/', views.public_restaurant_menu, name='public-restaurant-menu'),
    path('public/delivery-orders/<str:reference>/', views.public_order_track, name='public-order-track'),
]
