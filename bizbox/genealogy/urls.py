from django.urls import path
from . import views

urlpatterns = [
    path('family-members/', views.member_list_create, name='family-member-list-create'),
    path('family-members/<int:pk>/', views.member_detail, name='family-member-detail'),
    path('family-relationships/', views.relationship_create, name='family-relationship-create'),
    path('family-relationships/<int:pk>/', views.relationship_delete, name='family-relationship-delete'),
    path('family-tree/export/', views.tree_export, name='family-tree-export'),
    path('family-tree/import/', views.tree_import, name='family-tree-import'),
    path('family-tree/visualization/', views.tree_visualization, name='family-tree-visualization'),
    path('family-tree/widget-stats/', views.tree_widget_stats, name='family-tree-widget-stats'),
    path('family-edit-requests/', views.edit_request_list, name='family-edit-request-list'),
    path('family-edit-requests/<int:pk>/accept/', views.edit_request_accept, name='family-edit-request-accept'),
    path('family-edit-requests/<int:pk>/reject/', views.edit_request_reject, name='family-edit-request-reject'),
    path('public/family-tree/<str:client_identifier>/', views.public_tree, name='public-family-tree'),
    path('public/family-tree/<str:client_identifier>/edit-requests/', views.public_edit_request,
         name='public-family-edit-request'),
]
