from django.urls import path
from . import views

urlpatterns = [
    path('courses/', views.course_list_create, name='course-list-create'),
    path('courses/<int:pk>/', views.course_detail, name='course-detail'),
    path('courses/<int:pk>/lessons/', views.lesson_list_create, name='lesson-list-create'),
    path('courses/<int:pk>/enrollments/', views.enrollment_list_create, name='enrollment-list-create'),
    path('lessons/<int:pk>/', views.lesson_detail, name='lesson-detail'),
    path('enrollments/<int:pk>/', views.enrollment_detail, name='enrollment-detail'),
    path('enrollments/<int:pk>/lessons/<int:lesson_id>/start/', views.enrollment_start_lesson,
         name='enrollment-start-lesson'),
    path('enrollments/<int:pk>/lessons/<int:lesson_id>/complete/', views.enrollment_complete_lesson,
         name='enrollment-complete-lesson'),
]
