"""
Test suite for POS sales
Tests: sale completion, discounts, cash handling, receipts, deletion and summaries
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.cart import services as cart_services
from bizbox.pos.models import Sale


class SaleCompleteTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(self.user, price=Decimal('100.00'), quantity=10)

    def complete(self, **data):
        return self.client.post('/api/v1/sales/complete/', data, format='json')

    def test_complete_from_items(self):
        response = self.complete(items=[{'id': self.product.id, 'quantity': 3}], cash_received='500.00')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        sale = response.data['sale']
        self.assertTrue(sale['sale_number'].startswith('SALE-'))
        self.assertEqual(sale['total_amount'], '300.00')
        self.assertEqual(sale['change_amount'], '200.00')
        self.assertEqual(response.data['receipt']['total'], '₱300.00')
        self.assertEqual(response.data['receipt']['change'], '₱200.00')

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 7)

    def test_complete_from_pos_cart(self):
        cart = TestDataFactory.create_cart(self.user, channel='pos')
        cart_services.add_item(cart, {'product_id': self.product.id, 'quantity': 2})
        response = self.complete(cart_id=cart.id, payment_method='card')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['sale']['cart_number'], cart.cart_number)
        self.assertIsNone(response.data['receipt']['cash_received'])
        cart.refresh_from_db()
        self.assertEqual(cart.status, 'checked_out')

    def test_shop_cart_rejected(self):
        cart = TestDataFactory.create_cart(self.user, channel='shop')
        cart_services.add_item(cart, {'product_id': self.product.id, 'quantity': 1})
        response = self.complete(cart_id=cart.id, payment_method='card')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_best_discount_applied(self):
        TestDataFactory.create_discount(self.user, name='Ten percent', discount_type='percentage', value=Decimal('10'))
        TestDataFactory.create_discount(self.user, name='Fifty off', discount_type='fixed', value=Decimal('50'))
        response = self.complete(items=[{'id': self.product.id, 'quantity': 1}], payment_method='card')
        sale = response.data['sale']
        self.assertEqual(sale['discount_name'], 'Fifty off')
        self.assertEqual(sale['discount_amount'], '50.00')
        self.assertEqual(sale['total_amount'], '50.00')

    def test_client_price_ignored(self):
        response = self.complete(items=[{'id': self.product.id, 'quantity': 1, 'price': '1.00'}],
                                 payment_method='card')
        self.assertEqual(response.data['sale']['total_amount'], '100.00')

    def test_insufficient_cash(self):
        response = self.complete(items=[{'id': self.product.id, 'quantity': 1}], cash_received='50.00')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['total_amount'], '100.00')
        self.assertFalse(Sale.objects.exists())

    def test_insufficient_stock(self):
        response = self.complete(items=[{'id': self.product.id, 'quantity': 11}], payment_method='card')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 10)

    def test_needs_cart_or_items(self):
        self.assertEqual(self.complete(payment_method='card').status_code, status.HTTP_400_BAD_REQUEST)

    def test_team_member_is_cashier(self):
        member = TestDataFactory.create_team_member(self.user, roles=['user'])
        self.client.as_team_member(member)
        response = self.complete(items=[{'id': self.product.id, 'quantity': 1}], payment_method='card')
        self.assertEqual(response.data['sale']['cashier_name'], member.full_name)


class SaleManagementTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(self.user, name='Coffee', price=Decimal('80.00'), quantity=10)

    def make_sale(self, quantity=1, payment_method='card'):
        response = self.client.post('/api/v1/sales/complete/', {
            'items': [{'id': self.product.id, 'quantity': quantity}],
            'payment_method': payment_method,
            'cash_received': '1000.00',
        }, format='json')
        return Sale.objects.get(pk=response.data['sale']['id'])

    def test_delete_restores_stock(self):
        sale = self.make_sale(quantity=4)
        response = self.client.delete(f'/api/v1/sales/{sale.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 10)

    def test_delete_requires_delete_role(self):
        sale = self.make_sale()
        member = TestDataFactory.create_team_member(self.user, roles=['user'])
        self.client.as_team_member(member)
        self.assertEqual(self.client.delete(f'/api/v1/sales/{sale.id}/').status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.post('/api/v1/sales/bulk-delete/', {'ids': [sale.id]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_bulk_delete_skips_other_tenants(self):
        first, second = self.make_sale(), self.make_sale()
        other = TestDataFactory.create_user()
        other_client = AuthenticatedAPIClient().authenticate_user(other)
        other_product = TestDataFactory.create_product(other)
        response = other_client.post('/api/v1/sales/complete/', {
            'items': [{'id': other_product.id, 'quantity': 1}], 'payment_method': 'card'
        }, format='json')
        foreign_id = response.data['sale']['id']

        response = self.client.post('/api/v1/sales/bulk-delete/', {'ids': [first.id, second.id, foreign_id]},
                                    format='json')
        self.assertEqual(response.data, {'deleted': 2})
        self.assertTrue(Sale.objects.filter(pk=foreign_id).exists())

    def test_receipt(self):
        sale = self.make_sale(quantity=2, payment_method='cash')
        response = self.client.get(f'/api/v1/sales/{sale.id}/receipt/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'][0]['line_total'], '₱160.00')
        self.assertEqual(response.data['cash_received'], '₱1,000.00')
        self.assertEqual(response.data['change'], '₱840.00')
        self.assertIsNone(response.data['discount'])

    def test_summary(self):
        self.make_sale(quantity=2, payment_method='cash')
        self.make_sale(quantity=1, payment_method='card')
        response = self.client.get('/api/v1/sales/summary/', {'date_range': 'today'})
        self.assertEqual(response.data['total_sales'], 2)
        self.assertEqual(response.data['total_revenue'], '240.00')
        self.assertEqual(response.data['by_payment_method']['cash']['count'], 1)
        self.assertEqual(response.data['by_payment_method']['cash']['revenue'], '160.00')
        self.assertEqual(response.data['total_discounts'], '0.00')
        self.assertEqual(response.data['top_items'][0], {'name': 'Coffee', 'quantity_sold': 3, 'revenue': '240.00'})
