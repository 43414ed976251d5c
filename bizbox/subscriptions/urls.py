from django.urls import path
from . import views

urlpatterns = [
    path('subscription-plans/', views.plan_list_create, name='subscription-plan-list-create'),
    path('subscription-plans/<int:pk>/', views.plan_detail, name='subscription-plan-detail'),
    path('subscriptions/subscribe/', views.subscribe, name='subscription-subscribe'),
    path('subscriptions/current/', views.current_subscription, name='subscription-current'),
    path('subscriptions/history/', views.subscription_history, name='subscription-history'),
    path('subscriptions/<str:identifier>/cancel/', views.subscription_cancel, name='subscription-cancel'),
    path('admin-subscriptions/', views.admin_subscription_list, name='admin-subscription-list'),
    path('admin-subscriptions/<str:identifier>/mark-paid/', views.admin_mark_paid, name='admin-subscription-mark-paid'),
    path('admin-subscriptions/<str:identifier>/cancel/', views.admin_cancel, name='admin-subscription-cancel'),
]
