"""
Test suite for the catalog
Tests: product CRUD, tenant scoping, filters, barcode lookup and stock movements
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.catalog.models import Product, StockMovement
from bizbox.catalog.stock import (
    available_quantity, decrement_stock, restore_stock, InsufficientStockError
)


class StockTests(TestCase):
    """Stock helpers used by checkout, POS and cancellations"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(self.user, quantity=5)

    def test_available_quantity(self):
        self.assertEqual(available_quantity(self.product), 5)
        untracked = TestDataFactory.create_product(self.user, quantity=0, track_inventory=False)
        self.assertIsNone(available_quantity(untracked))

    def test_variant_stock_is_separate(self):
        variant = TestDataFactory.create_variant(self.product, quantity=2)
        self.assertEqual(available_quantity(self.product, variant), 2)

    def test_decrement_records_movement(self):
        movement = decrement_stock(self.product, None, 3, movement_type='sale', reference='SALE-1')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 2)
        self.assertEqual(movement.quantity_change, -3)
        self.assertEqual(movement.quantity_after, 2)
        self.assertEqual(movement.reference, 'SALE-1')

    def test_decrement_never_goes_negative(self):
        with self.assertRaises(InsufficientStockError):
            decrement_stock(self.product, None, 6)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 5)
        self.assertFalse(StockMovement.objects.exists())

    def test_restore(self):
        restore_stock(self.product, None, 2, movement_type='return')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 7)
        self.assertEqual(StockMovement.objects.get().movement_type, 'return')

    def test_untracked_products_are_not_decremented(self):
        untracked = TestDataFactory.create_product(self.user, quantity=0, track_inventory=False)
        self.assertIsNone(decrement_stock(untracked, None, 10))


class ProductAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_product(self):
        category = TestDataFactory.create_category(self.user)
        response = self.client.post('/api/v1/products/', {
            'name': 'Bottled Water',
            'sku': 'WATER-500',
            'category': category.id,
            'price': '25.00',
            'discount_price': '20.00',
            'quantity': 40,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['effective_price'], '20.00')
        self.assertEqual(Product.objects.get(pk=response.data['id']).client_identifier, self.user.identifier)

    def test_discount_price_above_price(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Odd', 'price': '10.00', 'discount_price': '12.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_negative_quantity(self):
        response = self.client.post('/api/v1/products/', {'name': 'Odd', 'quantity': -1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_tenant_category_rejected(self):
        other = TestDataFactory.create_user()
        category = TestDataFactory.create_category(other)
        response = self.client.post('/api/v1/products/', {'name': 'Odd', 'category': category.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_is_tenant_scoped(self):
        mine = TestDataFactory.create_product(self.user)
        TestDataFactory.create_product(TestDataFactory.create_user())
        response = self.client.get('/api/v1/products/')
        self.assertEqual([p['id'] for p in response.data], [mine.id])

    def test_other_tenant_product_not_found(self):
        product = TestDataFactory.create_product(TestDataFactory.create_user())
        response = self.client.get(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_search_matches_every_word(self):
        TestDataFactory.create_product(self.user, name='Red Apple')
        TestDataFactory.create_product(self.user, name='Green Apple')
        response = self.client.get('/api/v1/products/', {'search': 'apple red'})
        self.assertEqual([p['name'] for p in response.data], ['Red Apple'])

    def test_stock_filters(self):
        TestDataFactory.create_product(self.user, name='Empty', quantity=0)
        TestDataFactory.create_product(self.user, name='Full', quantity=50)
        TestDataFactory.create_product(self.user, name='Service', quantity=0, track_inventory=False)

        response = self.client.get('/api/v1/products/', {'out_of_stock': 'true'})
        self.assertEqual([p['name'] for p in response.data], ['Empty'])

        response = self.client.get('/api/v1/products/', {'in_stock': 'true'})
        self.assertEqual([p['name'] for p in response.data], ['Full', 'Service'])

    def test_price_change_is_audited(self):
        from bizbox.core.models import AuditLog
        product = TestDataFactory.create_product(self.user, price=Decimal('10.00'))
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'price': '12.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        log = AuditLog.objects.get(action='update', model_name='Product')
        self.assertEqual(log.changes['price'], {'old': '10.00', 'new': '12.00'})

    def test_delete_product(self):
        product = TestDataFactory.create_product(self.user)
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=product.id).exists())


class ProductLookupTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(self.user, price=Decimal('50.00'), quantity=3)
        self.product.barcode = '4800000000001'
        self.product.save()

    def test_lookup_by_product_barcode(self):
        response = self.client.get('/api/v1/products/lookup/', {'code': '4800000000001'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['product']['id'], self.product.id)
        self.assertIsNone(response.data['variant'])
        self.assertEqual(response.data['available_quantity'], 3)

    def test_variant_code_wins(self):
        variant = TestDataFactory.create_variant(self.product, price=Decimal('55.00'), quantity=0)
        response = self.client.get('/api/v1/products/lookup/', {'code': variant.sku})
        self.assertEqual(response.data['variant']['id'], variant.id)
        self.assertEqual(response.data['price'], '55.00')
        self.assertFalse(response.data['in_stock'])

    def test_lookup_requires_code(self):
        response = self.client.get('/api/v1/products/lookup/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_lookup_unknown_code(self):
        response = self.client.get('/api/v1/products/lookup/', {'code': 'nope'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class StockAdjustmentAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(self.user, quantity=10)
        self.url = f'/api/v1/products/{self.product.id}/adjust-stock/'

    def test_add_subtract_set(self):
        response = self.client.post(self.url, {'adjustment_type': 'add', 'quantity': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['quantity_after'], 15)
        self.assertEqual(response.data['movement_type'], 'restock')

        response = self.client.post(self.url, {'adjustment_type': 'subtract', 'quantity': 3}, format='json')
        self.assertEqual(response.data['quantity_after'], 12)

        response = self.client.post(self.url, {'adjustment_type': 'set', 'quantity': 0}, format='json')
        self.assertEqual(response.data['quantity_after'], 0)

    def test_subtract_more_than_stock(self):
        response = self.client.post(self.url, {'adjustment_type': 'subtract', 'quantity': 11}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['current_quantity'], 10)

    def test_history(self):
        self.client.post(self.url, {'adjustment_type': 'add', 'quantity': 1, 'reason': 'found one'}, format='json')
        response = self.client.get(f'/api/v1/products/{self.product.id}/stock-history/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['reason'], 'found one')
