from django.urls import path
from . import views

urlpatterns = [
    path('discounts/', views.discount_list_create, name='discount-list-create'),
    path('discounts/active/', views.discount_active, name='discount-active'),
    path('discounts/<int:pk>/', views.discount_detail, name='discount-detail'),
]
