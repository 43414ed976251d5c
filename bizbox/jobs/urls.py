from django.urls import path
from . import views

urlpatterns = [
    path('job-boards/', views.job_board_list_create, name='job-board-list-create'),
    path('job-boards/<int:pk>/', views.job_board_detail, name='job-board-detail'),
    path('job-boards/<int:pk>/jobs/', views.job_list_create, name='job-list-create'),
    path('jobs/<int:pk>/', views.job_detail, name='job-detail'),
    path('jobs/<int:pk>/publish/', views.job_publish, name='job-publish'),
    path('jobs/<int:pk>/close/', views.job_close, name='job-close'),
    path('jobs/<int:pk>/applications/', views.job_applications, name='job-applications'),
    path('job-applications/<int:pk>/', views.job_application_detail, name='job-application-detail'),
    path('public/job-boards/<slug:slug>/', views.public_job_board, name='public-job-board'),
    path('public/jobs/<int:pk>/', views.public_job_detail, name='public-job-detail'),
    path('public/jobs/<int:pk>/apply/', views.public_job_apply, name='public-job-apply'),
]
