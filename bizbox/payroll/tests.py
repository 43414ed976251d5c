"""
Tests for employees, salary history, time tracking and payroll periods
"""
from datetime import date
from decimal import Decimal
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.payroll.models import Employee, TimeEntry, Payslip
from bizbox.payroll.services import overtime_pay


class OvertimePayTests(SimpleTestCase):

    def test_overtime_rate(self):
        # 17,600 a month is 100 an hour over 176 hours
        self.assertEqual(overtime_pay(Decimal('17600.00'), Decimal('4')), Decimal('500.00'))

    def test_rounding(self):
        self.assertEqual(overtime_pay(Decimal('20000.00'), Decimal('1')), Decimal('142.05'))


class EmployeeAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_employee(self):
        response = self.client.post('/api/v1/employees/', {
            'employee_id': 'EMP-001', 'first_name': 'Ana', 'last_name': 'Reyes',
            'salary': '25000.00', 'hire_date': '2024-01-15', 'salary_change_reason': 'ignored on create'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['full_name'], 'Ana Reyes')
        self.assertEqual(response.data['status'], 'active')

    def test_employee_id_unique_per_tenant(self):
        TestDataFactory.create_employee(self.user, employee_id='EMP-001')
        TestDataFactory.create_employee(TestDataFactory.create_user(), employee_id='EMP-002')
        payload = {'first_name': 'Ana', 'last_name': 'Reyes', 'salary': '1.00', 'hire_date': '2024-01-15'}

        response = self.client.post('/api/v1/employees/', {**payload, 'employee_id': 'EMP-001'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('employee_id', response.data)

        response = self.client.post('/api/v1/employees/', {**payload, 'employee_id': 'EMP-002'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_salary_change_recorded(self):
        employee = TestDataFactory.create_employee(self.user, salary=Decimal('20000.00'))
        self.client.patch(f'/api/v1/employees/{employee.id}/', {'position': 'Cook'}, format='json')
        self.assertEqual(employee.salary_history.count(), 0)

        response = self.client.patch(f'/api/v1/employees/{employee.id}/', {
            'salary': '22000.00', 'salary_change_reason': 'Annual review'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.get(f'/api/v1/employees/{employee.id}/salary-history/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['previous_salary'], '20000.00')
        self.assertEqual(response.data[0]['new_salary'], '22000.00')
        self.assertEqual(response.data[0]['reason'], 'Annual review')

    def test_time_entry_once_per_day(self):
        employee = TestDataFactory.create_employee(self.user)
        url = f'/api/v1/employees/{employee.id}/time-entries/'
        payload = {'work_date': '2024-03-04', 'hours_worked': '8.00', 'overtime_hours': '2.00'}
        self.assertEqual(self.client.post(url, payload, format='json').status_code, status.HTTP_201_CREATED)
        response = self.client.post(url, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('work_date', response.data)

    def test_bulk_delete_keeps_paid_employees(self):
        paid = TestDataFactory.create_employee(self.user, employee_id='EMP-PAID')
        spare = TestDataFactory.create_employee(self.user, employee_id='EMP-SPARE')
        foreign = TestDataFactory.create_employee(TestDataFactory.create_user())
        period = TestDataFactory.create_payroll_period(self.user)
        Payslip.objects.create(period=period, employee=paid, base_salary=paid.salary)

        response = self.client.post('/api/v1/employees/bulk-delete/', {
            'ids': [paid.id, spare.id, foreign.id]
        }, format='json')
        self.assertEqual(response.data['deleted'], 1)
        self.assertEqual(response.data['kept'], ['EMP-PAID'])
        self.assertEqual(Employee.objects.filter(pk__in=[paid.id, foreign.id]).count(), 2)

    def test_user_role_cannot_bulk_delete(self):
        member = TestDataFactory.create_team_member(self.user, roles=['user'])
        employee = TestDataFactory.create_employee(self.user)
        self.client.as_team_member(member)
        response = self.client.post('/api/v1/employees/bulk-delete/', {'ids': [employee.id]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class PayrollPeriodTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.cook = TestDataFactory.create_employee(self.user, salary=Decimal('17600.00'), hire_date=date(2023, 1, 1))
        self.server = TestDataFactory.create_employee(self.user, salary=Decimal('20000.00'),
                                                      hire_date=date(2023, 6, 1))
        TestDataFactory.create_employee(self.user, status='inactive')
        TestDataFactory.create_employee(self.user, hire_date=date(2024, 4, 1))
        TimeEntry.objects.create(employee=self.cook, work_date=date(2024, 3, 4), hours_worked=Decimal('8'),
                                 overtime_hours=Decimal('3'))
        TimeEntry.objects.create(employee=self.cook, work_date=date(2024, 3, 5), hours_worked=Decimal('8'),
                                 overtime_hours=Decimal('1'))
        TimeEntry.objects.create(employee=self.cook, work_date=date(2024, 4, 2), hours_worked=Decimal('8'),
                                 overtime_hours=Decimal('5'))
        self.period = TestDataFactory.create_payroll_period(self.user, start_date=date(2024, 3, 1),
                                                           end_date=date(2024, 3, 31))

    def url(self, action=''):
        return f'/api/v1/payroll-periods/{self.period.id}/{action}'

    def test_end_before_start(self):
        response = self.client.post('/api/v1/payroll-periods/', {
            'name': 'Bad', 'start_date': '2024-03-31', 'end_date': '2024-03-01'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('end_date', response.data)

    def test_process_generates_payslips(self):
        response = self.client.post(self.url('process/'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'processed')
        self.assertEqual(response.data['payslip_count'], 2)

        cook_slip = Payslip.objects.get(period=self.period, employee=self.cook)
        self.assertEqual(cook_slip.overtime_hours, Decimal('4.00'))
        self.assertEqual(cook_slip.overtime_pay, Decimal('500.00'))
        self.assertEqual(cook_slip.net_pay, Decimal('18100.00'))
        self.assertEqual(response.data['total_net'], '38100.00')

        response = self.client.post(self.url('process/'))
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_adjust_payslip_updates_totals(self):
        self.client.post(self.url('process/'))
        slip = Payslip.objects.get(period=self.period, employee=self.server)
        response = self.client.patch(f'/api/v1/payslips/{slip.id}/', {
            'allowances': '1000.00', 'deductions': '2500.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['gross_pay'], '21000.00')
        self.assertEqual(response.data['net_pay'], '18500.00')
        self.period.refresh_from_db()
        self.assertEqual(self.period.total_net, Decimal('36600.00'))

        response = self.client.patch(f'/api/v1/payslips/{slip.id}/', {'deductions': '50000.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_paid_period_is_locked(self):
        self.client.post(self.url('process/'))
        response = self.client.post(self.url('mark-paid/'))
        self.assertEqual(response.data['status'], 'paid')
        self.assertIsNotNone(response.data['pay_date'])

        slip = Payslip.objects.filter(period=self.period).first()
        response = self.client.patch(f'/api/v1/payslips/{slip.id}/', {'allowances': '1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(self.client.post(self.url('cancel/')).status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(self.client.delete(self.url()).status_code, status.HTTP_409_CONFLICT)

    def test_mark_paid_requires_processing(self):
        response = self.client.post(self.url('mark-paid/'))
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_cancel_discards_payslips(self):
        self.client.post(self.url('process/'))
        response = self.client.post(self.url('cancel/'))
        self.assertEqual(response.data['status'], 'cancelled')
        self.assertEqual(response.data['total_net'], '0.00')
        self.assertFalse(Payslip.objects.filter(period=self.period).exists())
        self.assertEqual(self.client.delete(self.url()).status_code, status.HTTP_204_NO_CONTENT)

    def test_other_tenant_period(self):
        period = TestDataFactory.create_payroll_period(TestDataFactory.create_user())
        response = self.client.post(f'/api/v1/payroll-periods/{period.id}/process/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
