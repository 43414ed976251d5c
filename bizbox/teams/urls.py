from django.urls import path
from . import views

urlpatterns = [
    path('team-members/', views.team_member_list_create, name='team-member-list-create'),
    path('team-members/options/', views.team_options, name='team-options'),
    path('team-members/<int:pk>/', views.team_member_detail, name='team-member-detail'),
    path('team-members/<int:pk>/toggle-status/', views.team_member_toggle_status, name='team-member-toggle-status'),
    path('team-members/<int:pk>/reset-password/', views.team_member_reset_password, name='team-member-reset-password'),
    path('team-members/<int:pk>/password/', views.team_member_update_password, name='team-member-update-password'),
]
