from django.urls import path
from . import views

urlpatterns = [
    path('queue-types/', views.queue_type_list_create, name='queue-type-list-create'),
    path('queue-types/<int:pk>/', views.queue_type_detail, name='queue-type-detail'),
    path('queue-types/<int:pk>/issue/', views.queue_issue_number, name='queue-issue-number'),
    path('queue-types/<int:pk>/call-next/', views.queue_call_next, name='queue-call-next'),
    path('queue-types/<int:pk>/reset/', views.queue_reset_counter, name='queue-reset-counter'),
    path('queue-numbers/<int:pk>/start-serving/', views.queue_number_start_serving, name='queue-number-start-serving'),
    path('queue-numbers/<int:pk>/complete/', views.queue_number_complete, name='queue-number-complete'),
    path('queue-numbers/<int:pk>/cancel/', views.queue_number_cancel, name='queue-number-cancel'),
    path('queue-numbers/<int:pk>/ticket/', views.queue_number_ticket, name='queue-number-ticket'),
    path('queues/display/', views.queue_display, name='queue-display'),
    path('public/queues/<str:client_identifier>/display/', views.public_queue_display, name='public-queue-display'),
]
