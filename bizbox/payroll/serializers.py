from decimal import Decimal
from rest_framework import serializers
from .models import Employee, SalaryHistory, TimeEntry, PayrollPeriod, Payslip


class EmployeeSerializer(serializers.ModelSerializer):
    full_name = serializers.SerializerMethodField()
    salary_change_reason = serializers.CharField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = Employee
        fields = ['id', 'employee_id', 'first_name', 'last_name', 'full_name', 'email', 'position', 'department',
                  'salary', 'hire_date', 'status', 'salary_change_reason', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_full_name(self, obj):
        return f"{obj.first_name} {obj.last_name}"

    def validate_employee_id(self, value):
        value = value.strip()
        queryset = Employee.objects.filter(client_identifier=self.context.get('client_identifier'), employee_id=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('An employee with this ID already exists.')
        return value


class SalaryHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = SalaryHistory
        fields = ['id', 'employee', 'previous_salary', 'new_salary', 'effective_date', 'reason', 'created_at']
        read_only_fields = fields


class TimeEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = TimeEntry
        fields = ['id', 'employee', 'work_date', 'hours_worked', 'overtime_hours', 'notes', 'created_at']
        read_only_fields = ['employee', 'created_at']

    def validate(self, attrs):
        employee = self.context.get('employee') or getattr(self.instance, 'employee', None)
        work_date = attrs.get('work_date', getattr(self.instance, 'work_date', None))
        queryset = TimeEntry.objects.filter(employee=employee, work_date=work_date)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError({'work_date': ['Time is already recorded for this date.']})
        return attrs


class PayslipSerializer(serializers.ModelSerializer):
    employee_name = serializers.SerializerMethodField()
    employee_code = serializers.CharField(source='employee.employee_id', read_only=True)

    class Meta:
        model = Payslip
        fields = ['id', 'period', 'employee', 'employee_code', 'employee_name', 'base_salary', 'overtime_hours',
                  'overtime_pay', 'allowances', 'deductions', 'gross_pay', 'net_pay', 'updated_at']
        read_only_fields = fields

    def get_employee_name(self, obj):
        return f"{obj.employee.first_name} {obj.employee.last_name}"


class PayslipAdjustSerializer(serializers.Serializer):
    allowances = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'),
                                          required=False)
    deductions = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'),
                                          required=False)


class PayrollPeriodSerializer(serializers.ModelSerializer):
    payslip_count = serializers.SerializerMethodField()

    class Meta:
        model = PayrollPeriod
        fields = ['id', 'name', 'start_date', 'end_date', 'pay_date', 'status', 'total_gross', 'total_net',
                  'payslip_count', 'processed_at', 'paid_at', 'created_at', 'updated_at']
        read_only_fields = ['status', 'total_gross', 'total_net', 'processed_at', 'paid_at', 'created_at',
                            'updated_at']

    def get_payslip_count(self, obj):
        return obj.payslips.count()

    def validate(self, attrs):
        start_date = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end_date = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start_date and end_date and end_date < start_date:
            raise serializers.ValidationError({'end_date': ['End date cannot be before the start date.']})
        return attrs


class PayrollPeriodDetailSerializer(PayrollPeriodSerializer):
    payslips = PayslipSerializer(many=True, read_only=True)

    class Meta(PayrollPeriodSerializer.Meta):
        fields = PayrollPeriodSerializer.Meta.fields + ['payslips']


class BulkDeleteSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
