from django.urls import path
from . import views

urlpatterns = [
    path('posts/', views.post_list_create, name='post-list-create'),
    path('posts/bulk-delete/', views.post_bulk_delete, name='post-bulk-delete'),
    path('posts/<int:pk>/', views.post_detail, name='post-detail'),
    path('posts/<int:pk>/status/', views.post_status, name='post-status'),
    path('public/content/<str:client_identifier>/', views.public_post_list, name='public-post-list'),
    path('public/content/<str:client_identifier>/<slug:slug>/', views.public_post_detail,
         name='public-post-detail'),
]
