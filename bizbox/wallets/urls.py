from django.urls import path
from . import views

urlpatterns = [
    path('contacts/<int:pk>/wallet/', views.wallet_balance, name='wallet-balance'),
    path('contacts/<int:pk>/wallet/transactions/', views.wallet_transactions, name='wallet-transactions'),
    path('contacts/<int:pk>/wallet/add-funds/', views.wallet_add_funds, name='wallet-add-funds'),
    path('contacts/<int:pk>/wallet/deduct-funds/', views.wallet_deduct_funds, name='wallet-deduct-funds'),
    path('wallets/transfer/', views.wallet_transfer, name='wallet-transfer'),
    path('wallets/lookup/', views.wallet_lookup, name='wallet-lookup'),
    path('wallets/top-up/', views.wallet_top_up, name='wallet-top-up'),
]
