import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from bizbox.core.exceptions import ServiceError, ConflictError
from bizbox.core.utils import TWO_PLACES
from .models import Employee, SalaryHistory, TimeEntry, Payslip

logger = logging.getLogger(__name__)

STANDARD_MONTHLY_HOURS = Decimal('176')
OVERTIME_RATE = Decimal('1.25')


def record_salary_change(employee, previous_salary, reason=''):
    """Keep a history row whenever an employee's salary moves"""
    if previous_salary == employee.salary:
        return None
    entry = SalaryHistory.objects.create(
        employee=employee,
        previous_salary=previous_salary,
        new_salary=employee.salary,
        effective_date=timezone.localdate(),
        reason=reason or '',
    )
    logger.info(f"Salary changed for employee {employee.employee_id}: {previous_salary} -> {employee.salary}")
    return entry


def delete_employee(employee):
    if employee.payslips.exists():
        raise ConflictError('Employee has payslips; set the employee inactive instead')
    employee.delete()


def overtime_pay(salary, overtime_hours):
    hourly_rate = salary / STANDARD_MONTHLY_HOURS
    return (hourly_rate * OVERTIME_RATE * overtime_hours).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def compute_payslip(payslip):
    payslip.gross_pay = payslip.base_salary + payslip.overtime_pay + payslip.allowances
    payslip.net_pay = payslip.gross_pay - payslip.deductions
    return payslip


def refresh_totals(period):
    totals = period.payslips.aggregate(gross=Sum('gross_pay'), net=Sum('net_pay'))
    period.total_gross = totals['gross'] or Decimal('0.00')
    period.total_net = totals['net'] or Decimal('0.00')
    period.save(update_fields=['total_gross', 'total_net', 'updated_at'])


@transaction.atomic
def process_period(period):
    """
    Generate one payslip per active employee hired by the period end:
    the monthly salary plus overtime recorded inside the period.
    """
    if period.status != 'draft':
        raise ConflictError(f'Only draft payroll periods can be processed (current: {period.status})')

    employees = Employee.objects.filter(
        client_identifier=period.client_identifier, status='active', hire_date__lte=period.end_date
    )
    for employee in employees:
        hours = TimeEntry.objects.filter(
            employee=employee, work_date__gte=period.start_date, work_date__lte=period.end_date
        ).aggregate(total=Sum('overtime_hours'))['total'] or Decimal('0.00')
        payslip = Payslip(
            period=period,
            employee=employee,
            base_salary=employee.salary,
            overtime_hours=hours,
            overtime_pay=overtime_pay(employee.salary, hours),
        )
        compute_payslip(payslip).save()

    period.status = 'processed'
    period.processed_at = timezone.now()
    period.save(update_fields=['status', 'processed_at', 'updated_at'])
    refresh_totals(period)
    logger.info(f"Payroll period {period.id} processed: {employees.count()} payslips, net {period.total_net}")
    return period


@transaction.atomic
def adjust_payslip(payslip, allowances=None, deductions=None):
    period = payslip.period
    if period.status != 'processed':
        raise ConflictError('Payslips can only be adjusted while the period is processed')
    if allowances is not None:
        payslip.allowances = allowances
    if deductions is not None:
        payslip.deductions = deductions
    compute_payslip(payslip)
    if payslip.net_pay < 0:
        raise ServiceError('Deductions cannot exceed gross pay')
    payslip.save()
    refresh_totals(period)
    return payslip


def mark_paid(period):
    if period.status != 'processed':
        raise ConflictError('Only processed payroll periods can be marked as paid')
    period.status = 'paid'
    period.paid_at = timezone.now()
    if period.pay_date is None:
        period.pay_date = timezone.localdate()
    period.save(update_fields=['status', 'paid_at', 'pay_date', 'updated_at'])
    logger.info(f"Payroll period {period.id} paid: {period.total_net}")
    return period


@transaction.atomic
def cancel_period(period):
    """Cancel an unpaid period; its payslips are discarded"""
    if period.status not in ('draft', 'processed'):
        raise ConflictError(f'Cannot cancel a {period.status} payroll period')
    period.payslips.all().delete()
    period.status = 'cancelled'
    period.save(update_fields=['status', 'updated_at'])
    refresh_totals(period)
    return period
