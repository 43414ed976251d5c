from django.urls import path
from . import views

urlpatterns = [
    path('carts/', views.cart_list_create, name='cart-list-create'),
    path('carts/<int:pk>/', views.cart_detail, name='cart-detail'),
    path('carts/<int:pk>/items/', views.cart_add_item, name='cart-add-item'),
    path('carts/<int:pk>/items/<int:item_id>/', views.cart_item_detail, name='cart-item-detail'),
    path('carts/<int:pk>/clear/', views.cart_clear, name='cart-clear'),
    path('carts/<int:pk>/reconcile/', views.cart_reconcile, name='cart-reconcile'),
    path('carts/<int:pk>/merge/', views.cart_merge, name='cart-merge'),
    path('carts/<int:pk>/hold/', views.cart_hold, name='cart-hold'),
    path('carts/<int:pk>/resume/', views.cart_resume, name='cart-resume'),
]
