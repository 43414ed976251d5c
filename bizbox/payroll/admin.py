from django.contrib import admin
from .models import Employee, SalaryHistory, TimeEntry, PayrollPeriod, Payslip


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ['employee_id', 'first_name', 'last_name', 'position', 'department', 'salary', 'status']
    list_filter = ['status', 'department']
    search_fields = ['employee_id', 'first_name', 'last_name', 'email']


@admin.register(SalaryHistory)
class SalaryHistoryAdmin(admin.ModelAdmin):
    list_display = ['employee', 'previous_salary', 'new_salary', 'effective_date']


@admin.register(TimeEntry)
class TimeEntryAdmin(admin.ModelAdmin):
    list_display = ['employee', 'work_date', 'hours_worked', 'overtime_hours']
    list_filter = ['work_date']


class PayslipInline(admin.TabularInline):
    model = Payslip
    extra = 0
    readonly_fields = ['employee', 'base_salary', 'overtime_pay', 'gross_pay', 'net_pay']


@admin.register(PayrollPeriod)
class PayrollPeriodAdmin(admin.ModelAdmin):
    list_display = ['name', 'start_date', 'end_date', 'status', 'total_net', 'client_identifier']
    list_filter = ['status']
    inlines = [PayslipInline]
