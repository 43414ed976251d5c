"""
Tests for authentication, tenancy helpers, settings and audit logs
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.core.models import AuditLog, Setting
from bizbox.core.utils import create_audit_log, format_currency, generate_reference, money_string
from bizbox.cart.models import Cart


class AuthAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register_returns_tokens_and_identifier(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'shopowner',
            'email': 'owner@test.com',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'Str0ng-pass-123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(len(response.data['user']['identifier']), 32)
        self.assertEqual(response.data['user']['app_currency']['code'], 'PHP')

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'shopowner',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'different-pass-123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login(self):
        TestDataFactory.create_user(username='cashier', password='testpass123')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'cashier', 'password': 'testpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_login_inactive_user(self):
        user = TestDataFactory.create_user(username='gone', password='testpass123')
        user.is_active = False
        user.save()
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'gone', 'password': 'testpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_update_currency(self):
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        currency = {'code': 'USD', 'symbol': '$', 'thousands_separator': ',', 'decimal_separator': '.'}
        response = self.client.patch('/api/v1/auth/me/', {'app_currency': currency}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['app_currency']['symbol'], '$')

    def test_me_rejects_incomplete_currency(self):
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        response = self.client.patch('/api/v1/auth/me/', {'app_currency': {'code': 'USD'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class UtilsTests(TestCase):

    def test_format_currency_default(self):
        self.assertEqual(format_currency(Decimal('1234567.5')), '₱1,234,567.50')

    def test_format_currency_custom_separators(self):
        currency = {'symbol': '€', 'thousands_separator': '.', 'decimal_separator': ','}
        self.assertEqual(format_currency('1234.5', currency), '€1.234,50')

    def test_format_currency_negative(self):
        self.assertEqual(format_currency('-5'), '-₱5.00')

    def test_money_string_scales_to_two_places(self):
        self.assertEqual(money_string(Decimal('200')), '200.00')
        self.assertEqual(money_string(Decimal('12.345')), '12.35')
        self.assertEqual(money_string(None), '0.00')

    def test_generate_reference(self):
        reference = generate_reference('CART', Cart, 'cart_number')
        prefix, date_part, suffix = reference.split('-')
        self.assertEqual(prefix, 'CART')
        self.assertEqual(len(date_part), 8)
        self.assertEqual(len(suffix), 8)

    def test_audit_log_requires_fields(self):
        self.assertIsNone(create_audit_log(action='create', model_name='Product'))
        self.assertFalse(AuditLog.objects.exists())


class SettingAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_only_staff_create(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.post('/api/v1/settings/', {'key': 'site_name', 'value': 'Bizbox'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(TestDataFactory.create_user(is_staff=True))
        response = self.client.post('/api/v1/settings/', {'key': 'site_name', 'value': 'Bizbox'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Setting.objects.filter(key='site_name').exists())


class AuditLogAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.own = create_audit_log(user=self.user, action='create', model_name='Product', object_id='1')
        self.foreign = create_audit_log(user=self.other, action='create', model_name='Product', object_id='2')

    def test_list_is_tenant_scoped(self):
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([log['id'] for log in response.data], [self.own.id])

    def test_other_tenant_log_not_found(self):
        response = self.client.get(f'/api/v1/audit-logs/{self.foreign.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_filter_by_action(self):
        response = self.client.get('/api/v1/audit-logs/', {'action': 'delete'})
        self.assertEqual(response.data, [])
