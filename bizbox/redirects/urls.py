from django.urls import path
from . import views

urlpatterns = [
    path('subdomain-redirects/', views.redirect_list_create, name='subdomain-redirect-list-create'),
    path('subdomain-redirects/<int:pk>/', views.redirect_detail, name='subdomain-redirect-detail'),
]
