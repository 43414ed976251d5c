import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from bizbox.core.exceptions import ServiceError
from bizbox.core.utils import tenant_for, create_audit_log
from bizbox.teams.permissions import CanEdit, CanDelete, HasDeleteRole
from .models import Employee, SalaryHistory, PayrollPeriod, Payslip
from .serializers import (
    EmployeeSerializer, SalaryHistorySerializer, TimeEntrySerializer, PayrollPeriodSerializer,
    PayrollPeriodDetailSerializer, PayslipSerializer, PayslipAdjustSerializer, BulkDeleteSerializer
)
from . import services

logger = logging.getLogger(__name__)


def tenant_employees(request):
    return Employee.objects.filter(client_identifier=tenant_for(request))


def tenant_periods(request):
    return PayrollPeriod.objects.filter(client_identifier=tenant_for(request))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def employee_list_create(request):
    """Employees; filter by status or department, search by name or ID"""
    if request.method == 'GET':
        employees = tenant_employees(request)
        employee_status = request.query_params.get('status')
        if employee_status:
            employees = employees.filter(status=employee_status)
        department = request.query_params.get('department')
        if department:
            employees = employees.filter(department__iexact=department)
        search = request.query_params.get('search')
        if search:
            employees = employees.filter(
                Q(first_name__icontains=search) | Q(last_name__icontains=search) | Q(employee_id__icontains=search)
            )
        serializer = EmployeeSerializer(employees, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = EmployeeSerializer(data=request.data, context={'client_identifier': tenant_for(request)})
        if serializer.is_valid():
            serializer.validated_data.pop('salary_change_reason', None)
            employee = serializer.save(client_identifier=tenant_for(request))
            create_audit_log(request=request, action='create', model_name='Employee', object_id=employee.id,
                             object_name=str(employee), object_reference=employee.employee_id)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def employee_detail(request, pk):
    employee = get_object_or_404(tenant_employees(request), pk=pk)

    if request.method == 'GET':
        serializer = EmployeeSerializer(employee)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = EmployeeSerializer(employee, data=request.data, partial=request.method == 'PATCH',
                                        context={'client_identifier': tenant_for(request)})
        if serializer.is_valid():
            reason = serializer.validated_data.pop('salary_change_reason', '')
            previous_salary = employee.salary
            serializer.save()
            services.record_salary_change(employee, previous_salary, reason)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        try:
            services.delete_employee(employee)
        except ServiceError as e:
            return e.to_response()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasDeleteRole])
def employee_bulk_delete(request):
    """Delete several employees; those with payslips are kept and reported"""
    serializer = BulkDeleteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    deleted, kept = [], []
    for employee in tenant_employees(request).filter(pk__in=serializer.validated_data['ids']):
        try:
            services.delete_employee(employee)
            deleted.append(employee.employee_id)
        except ServiceError:
            kept.append(employee.employee_id)
    return Response({'deleted': len(deleted), 'kept': kept})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def employee_salary_history(request, pk):
    employee = get_object_or_404(tenant_employees(request), pk=pk)
    return Response(SalaryHistorySerializer(employee.salary_history.all(), many=True).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def time_entry_list_create(request, pk):
    """Time entries of an employee; `date_from` / `date_to` narrow the list"""
    employee = get_object_or_404(tenant_employees(request), pk=pk)

    if request.method == 'GET':
        entries = employee.time_entries.all()
        date_from = request.query_params.get('date_from')
        if date_from:
            entries = entries.filter(work_date__gte=date_from)
        date_to = request.query_params.get('date_to')
        if date_to:
            entries = entries.filter(work_date__lte=date_to)
        return Response(TimeEntrySerializer(entries, many=True).data)
    else:  # POST
        serializer = TimeEntrySerializer(data=request.data, context={'employee': employee})
        if serializer.is_valid():
            serializer.save(employee=employee)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def salary_history_list(request):
    history = SalaryHistory.objects.filter(
        employee__client_identifier=tenant_for(request)
    ).select_related('employee')
    return Response(SalaryHistorySerializer(history, many=True).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def period_list_create(request):
    if request.method == 'GET':
        periods = tenant_periods(request)
        period_status = request.query_params.get('status')
        if period_status:
            periods = periods.filter(status=period_status)
        return Response(PayrollPeriodSerializer(periods, many=True).data)
    else:  # POST
        serializer = PayrollPeriodSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(client_identifier=tenant_for(request))
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def period_detail(request, pk):
    """A payroll period with its payslips; only draft periods are edited"""
    period = get_object_or_404(tenant_periods(request), pk=pk)

    if request.method == 'GET':
        return Response(PayrollPeriodDetailSerializer(period).data)
    elif request.method in ('PUT', 'PATCH'):
        if period.status != 'draft':
            return Response({'error': 'Only draft payroll periods can be edited'}, status=status.HTTP_409_CONFLICT)
        serializer = PayrollPeriodSerializer(period, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if period.status not in ('draft', 'cancelled'):
            return Response({'error': f'Cannot delete a {period.status} payroll period'},
                            status=status.HTTP_409_CONFLICT)
        period.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


def period_action(request, pk, action):
    period = get_object_or_404(tenant_periods(request), pk=pk)
    try:
        action(period)
    except ServiceError as e:
        return e.to_response()
    create_audit_log(request=request, action=f'payroll_{period.status}', model_name='PayrollPeriod',
                     object_id=period.id, object_name=period.name, changes={'total_net': str(period.total_net)})
    return Response(PayrollPeriodDetailSerializer(period).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def period_process(request, pk):
    return period_action(request, pk, services.process_period)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def period_mark_paid(request, pk):
    return period_action(request, pk, services.mark_paid)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def period_cancel(request, pk):
    return period_action(request, pk, services.cancel_period)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, CanEdit])
def payslip_adjust(request, pk):
    """Set allowances or deductions on a payslip of a processed period"""
    payslip = get_object_or_404(
        Payslip.objects.select_related('period', 'employee'), pk=pk, period__client_identifier=tenant_for(request)
    )
    serializer = PayslipAdjustSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        services.adjust_payslip(payslip, **serializer.validated_data)
    except ServiceError as e:
        return e.to_response()
    return Response(PayslipSerializer(payslip).data)
