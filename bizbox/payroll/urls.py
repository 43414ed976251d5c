from django.urls import path
from . import views

urlpatterns = [
    path('employees/', views.employee_list_create, name='employee-list-create'),
    path('employees/bulk-delete/', views.employee_bulk_delete, name='employee-bulk-delete'),
    path('employees/<int:pk>/', views.employee_detail, name='employee-detail'),
    path('employees/<int:pk>/salary-history/', views.employee_salary_history, name='employee-salary-history'),
    path('employees/<int:pk>/time-entries/', views.time_entry_list_create, name='time-entry-list-create'),
    path('salary-history/', views.salary_history_list, name='salary-history-list'),
    path('payroll-periods/', views.period_list_create, name='payroll-period-list-create'),
    path('payroll-periods/<int:pk>/', views.period_detail, name='payroll-period-detail'),
    path('payroll-periods/<int:pk>/process/', views.period_process, name='payroll-period-process'),
    path('payroll-periods/<int:pk>/mark-paid/', views.period_mark_paid, name='payroll-period-mark-paid'),
    path('payroll-periods/<int:pk>/cancel/', views.period_cancel, name='payroll-period-cancel'),
    path('payslips/<int:pk>/', views.payslip_adjust, name='payslip-adjust'),
]
