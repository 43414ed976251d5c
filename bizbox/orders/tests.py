"""
Tests for product order checkout, status flow, payments and statistics
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from bizbox.core.models import AuditLog
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.cart import services as cart_services
from bizbox.catalog.models import StockMovement
from bizbox.orders.models import ProductOrder


class OrderCheckoutTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(self.user, price=Decimal('100.00'), quantity=5)
        self.cart = TestDataFactory.create_cart(self.user)

    def checkout(self, **extra):
        data = {'cart_id': self.cart.id, 'customer_name': 'Juan', 'customer_email': 'juan@test.com'}
        data.update(extra)
        return self.client.post('/api/v1/product-orders/checkout/', data, format='json')

    def test_checkout_creates_order_and_takes_stock(self):
        cart_services.add_item(self.cart, {'product_id': self.product.id, 'quantity': 2})
        response = self.checkout(tax_amount='12.00', shipping_fee='50.00', discount_amount='2.00')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['order_number'].startswith('ORD-'))
        self.assertEqual(response.data['subtotal'], '200.00')
        self.assertEqual(response.data['total_amount'], '260.00')
        self.assertEqual(response.data['items'][0]['quantity'], 2)

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 3)
        self.cart.refresh_from_db()
        self.assertEqual(self.cart.status, 'checked_out')
        self.assertTrue(AuditLog.objects.filter(action='cart_checkout').exists())

    def test_checkout_reprices_from_catalog(self):
        cart_services.add_item(self.cart, {'product_id': self.product.id, 'quantity': 1})
        self.product.price = Decimal('150.00')
        self.product.save()
        response = self.checkout()
        self.assertEqual(response.data['subtotal'], '150.00')

    def test_checkout_rejects_when_stock_ran_out(self):
        cart_services.add_item(self.cart, {'product_id': self.product.id, 'quantity': 3})
        self.product.quantity = 1
        self.product.save()
        response = self.checkout()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(ProductOrder.objects.exists())
        self.cart.refresh_from_db()
        self.assertEqual(self.cart.status, 'active')

    def test_empty_cart(self):
        response = self.checkout()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cart is empty')

    def test_cart_checked_out_once(self):
        cart_services.add_item(self.cart, {'product_id': self.product.id, 'quantity': 1})
        self.assertEqual(self.checkout().status_code, status.HTTP_201_CREATED)
        self.assertEqual(self.checkout().status_code, status.HTTP_409_CONFLICT)

    def test_other_tenant_cart_not_found(self):
        self.cart = TestDataFactory.create_cart(TestDataFactory.create_user())
        self.assertEqual(self.checkout().status_code, status.HTTP_404_NOT_FOUND)


class PublicCheckoutTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(self.user, price=Decimal('80.00'), quantity=4)
        self.client = AuthenticatedAPIClient()

    def test_public_checkout_uses_catalog_prices(self):
        response = self.client.post('/api/v1/public/product-orders/checkout/', {
            'client_identifier': self.user.identifier,
            'order_items': [{'id': self.product.id, 'quantity': 2, 'price': '1.00'}],
            'customer_name': 'Guest',
            'customer_email': 'guest@test.com',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_amount'], '160.00')
        order = ProductOrder.objects.get()
        self.assertEqual(order.client_identifier, self.user.identifier)
        self.assertIsNone(order.created_by)

    def test_unknown_store(self):
        response = self.client.post('/api/v1/public/product-orders/checkout/', {
            'client_identifier': 'missing',
            'order_items': [{'id': self.product.id, 'quantity': 1}],
            'customer_name': 'Guest',
            'customer_email': 'guest@test.com',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_other_tenant_product_not_orderable(self):
        foreign = TestDataFactory.create_product(TestDataFactory.create_user())
        response = self.client.post('/api/v1/public/product-orders/checkout/', {
            'client_identifier': self.user.identifier,
            'order_items': [{'id': foreign.id, 'quantity': 1}],
            'customer_name': 'Guest',
            'customer_email': 'guest@test.com',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(ProductOrder.objects.exists())


class OrderLifecycleTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(self.user, price=Decimal('100.00'), quantity=5)
        cart = TestDataFactory.create_cart(self.user)
        cart_services.add_item(cart, {'product_id': self.product.id, 'quantity': 2})
        response = self.client.post('/api/v1/product-orders/checkout/', {
            'cart_id': cart.id, 'customer_name': 'Juan', 'customer_email': 'juan@test.com'
        }, format='json')
        self.order = ProductOrder.objects.get(pk=response.data['id'])
        self.url = f'/api/v1/product-orders/{self.order.id}/'

    def set_status(self, new_status):
        return self.client.patch(self.url, {'order_status': new_status}, format='json')

    def test_forward_transitions(self):
        for new_status in ('confirmed', 'processing', 'shipped', 'delivered'):
            response = self.set_status(new_status)
            self.assertEqual(response.status_code, status.HTTP_200_OK, new_status)
        self.assertEqual(AuditLog.objects.filter(action='order_status').count(), 4)

    def test_invalid_transition(self):
        response = self.set_status('shipped')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['allowed'], ['confirmed', 'cancelled'])

    def test_cancel_restores_stock_once(self):
        self.assertEqual(self.set_status('cancelled').status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 5)
        self.assertEqual(StockMovement.objects.filter(movement_type='cancellation').count(), 1)

        # Deleting a cancelled order must not restock again
        self.assertEqual(self.client.delete(self.url).status_code, status.HTTP_204_NO_CONTENT)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 5)

    def test_delete_pending_restores_stock(self):
        self.assertEqual(self.client.delete(self.url).status_code, status.HTTP_204_NO_CONTENT)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 5)

    def test_delete_confirmed_order_rejected(self):
        self.set_status('confirmed')
        self.assertEqual(self.client.delete(self.url).status_code, status.HTTP_409_CONFLICT)

    def test_process_payment(self):
        response = self.client.post(f'{self.url}process-payment/', {
            'payment_method': 'card', 'payment_reference': 'TXN-1'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['payment_status'], 'paid')
        self.assertEqual(response.data['order_status'], 'confirmed')
        self.assertIsNotNone(response.data['paid_at'])

        response = self.client.post(f'{self.url}process-payment/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_refund_marks_payment_refunded(self):
        self.client.post(f'{self.url}process-payment/', {'payment_method': 'cash'}, format='json')
        for new_status in ('processing', 'shipped', 'delivered', 'refunded'):
            self.set_status(new_status)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, 'refunded')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 5)

    def test_statistics(self):
        self.client.post(f'{self.url}process-payment/', {'payment_method': 'cash'}, format='json')
        response = self.client.get('/api/v1/product-orders/statistics/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_orders'], 1)
        self.assertEqual(response.data['by_status']['confirmed'], 1)
        self.assertEqual(response.data['total_revenue'], '200.00')
        self.assertEqual(response.data['average_order_value'], '200.00')

    def test_list_filters(self):
        response = self.client.get('/api/v1/product-orders/', {'order_status': 'pending'})
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['item_count'], 2)
        response = self.client.get('/api/v1/product-orders/', {'payment_status': 'paid'})
        self.assertEqual(response.data, [])
