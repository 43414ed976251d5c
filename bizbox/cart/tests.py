"""
Tests for the cart: the in-memory state machine and the persisted cart API
Covers merge-on-add, stock limits, quantity updates, reconciliation,
payload round trips and tenant isolation
"""
from decimal import Decimal
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.cart.engine import (
    CartState, CartLine, LineKey, PRODUCT, MENU_ITEM, InvalidQuantity, OutOfStock, InsufficientStock,
    LineNotFound, resolve_price, line_from_dict
)
from bizbox.cart import services as cart_services
from bizbox.cart.models import Cart, CartItem


def product_line(item_id, quantity=1, price='10.00', variant_id=None, name=None):
    return CartLine(
        key=LineKey(PRODUCT, item_id, variant_id),
        name=name or f'Item {item_id}',
        unit_price=Decimal(price),
        quantity=quantity,
    )


class CartStateTests(SimpleTestCase):
    """Cart state machine without the database"""

    def test_add_new_line(self):
        state = CartState()
        state.add(product_line(1, quantity=2))
        self.assertEqual(state.line_count, 1)
        self.assertEqual(state.item_count, 2)
        self.assertEqual(state.subtotal, Decimal('20.00'))

    def test_add_same_key_merges_quantity(self):
        state = CartState()
        state.add(product_line(1, quantity=2))
        line = state.add(product_line(1, quantity=3))
        self.assertEqual(state.line_count, 1)
        self.assertEqual(line.quantity, 5)

    def test_variants_are_separate_lines(self):
        state = CartState()
        state.add(product_line(1, variant_id=None))
        state.add(product_line(1, variant_id=7))
        self.assertEqual(state.line_count, 2)

    def test_add_rejects_zero_quantity(self):
        state = CartState()
        with self.assertRaises(InvalidQuantity):
            state.add(product_line(1, quantity=0))

    def test_add_out_of_stock(self):
        state = CartState()
        with self.assertRaises(OutOfStock):
            state.add(product_line(1), available=0)
        self.assertEqual(len(state), 0)

    def test_merged_quantity_checked_against_stock(self):
        state = CartState()
        state.add(product_line(1, quantity=3), available=4)
        with self.assertRaises(InsufficientStock) as ctx:
            state.add(product_line(1, quantity=2), available=4)
        self.assertEqual(ctx.exception.details['available'], 4)
        self.assertEqual(ctx.exception.details['requested'], 5)
        # Cart untouched after a failed add
        self.assertEqual(state.get(LineKey(PRODUCT, 1, None)).quantity, 3)

    def test_unlimited_availability(self):
        state = CartState()
        state.add(product_line(1, quantity=500), available=None)
        self.assertEqual(state.item_count, 500)

    def test_update_quantity(self):
        state = CartState([product_line(1, quantity=2)])
        line = state.update_quantity(LineKey(PRODUCT, 1, None), 4, available=10)
        self.assertEqual(line.quantity, 4)

    def test_update_quantity_zero_removes_line(self):
        state = CartState([product_line(1, quantity=2)])
        self.assertIsNone(state.update_quantity(LineKey(PRODUCT, 1, None), 0))
        self.assertEqual(len(state), 0)

    def test_update_quantity_over_stock(self):
        state = CartState([product_line(1, quantity=2)])
        with self.assertRaises(InsufficientStock):
            state.update_quantity(LineKey(PRODUCT, 1, None), 6, available=5)
        self.assertEqual(state.item_count, 2)

    def test_update_missing_line(self):
        with self.assertRaises(LineNotFound):
            CartState().update_quantity(LineKey(PRODUCT, 99, None), 1)

    def test_remove_missing_line_is_noop(self):
        state = CartState([product_line(1)])
        self.assertIsNone(state.remove(LineKey(PRODUCT, 2, None)))
        self.assertEqual(len(state), 1)

    def test_reconcile_clamps_and_drops(self):
        state = CartState([product_line(1, quantity=5), product_line(2, quantity=2), product_line(3, quantity=1)])
        adjustments = state.reconcile({
            LineKey(PRODUCT, 1, None): 3,
            LineKey(PRODUCT, 2, None): 0,
            LineKey(PRODUCT, 3, None): None,
        })
        self.assertEqual(len(adjustments), 2)
        self.assertEqual(state.get(LineKey(PRODUCT, 1, None)).quantity, 3)
        self.assertNotIn(LineKey(PRODUCT, 2, None), state)
        self.assertTrue(adjustments[1].removed)
        self.assertEqual(state.get(LineKey(PRODUCT, 3, None)).quantity, 1)

    def test_reconcile_drops_unknown_lines(self):
        state = CartState([product_line(1, quantity=1)])
        adjustments = state.reconcile({})
        self.assertEqual(len(state), 0)
        self.assertEqual(adjustments[0].new_quantity, 0)

    def test_insertion_order_kept(self):
        state = CartState()
        for item_id in (3, 1, 2):
            state.add(product_line(item_id))
        state.add(product_line(3))
        self.assertEqual([line.key.item_id for line in state], [3, 1, 2])


class CartPayloadTests(SimpleTestCase):
    """Persisted cart payloads"""

    def test_payload_round_trip(self):
        state = CartState([product_line(1, quantity=2, price='12.50')], restaurant_id=None)
        state.add(CartLine(LineKey(MENU_ITEM, 4, None), 'Adobo', Decimal('99.00'), 1, 'no onions'))
        rebuilt = CartState.from_payload(state.to_payload())
        self.assertEqual([line.key for line in rebuilt], [line.key for line in state])
        self.assertEqual(rebuilt.subtotal, state.subtotal)
        self.assertEqual(rebuilt.get(LineKey(MENU_ITEM, 4, None)).special_instructions, 'no onions')

    def test_bare_list_and_duplicates_merge(self):
        rebuilt = CartState.from_payload([
            {'id': 1, 'name': 'Soap', 'price': '5.00', 'quantity': 2},
            {'id': 1, 'name': 'Soap', 'price': '5.00', 'quantity': 1},
        ])
        self.assertEqual(rebuilt.line_count, 1)
        self.assertEqual(rebuilt.item_count, 3)

    def test_malformed_entries(self):
        rebuilt = CartState.from_payload({'cart': [
            {'id': 1, 'price': 'abc', 'quantity': 'x'},
            {'name': 'no id'},
            {'id': 2, 'quantity': 0},
            'garbage',
        ], 'restaurant_id': '5'})
        self.assertEqual(rebuilt.line_count, 1)
        line = rebuilt.get(LineKey(PRODUCT, 1, None))
        self.assertEqual(line.quantity, 1)
        self.assertEqual(line.unit_price, Decimal('0.00'))
        self.assertEqual(rebuilt.restaurant_id, 5)

    def test_subtotal_recomputed_not_trusted(self):
        rebuilt = CartState.from_payload([{'id': 1, 'price': '10', 'quantity': 3, 'subtotal': '1.00'}])
        self.assertEqual(rebuilt.subtotal, Decimal('30'))

    def test_price_precedence(self):
        self.assertEqual(resolve_price('8.00', '9.00', '10.00'), Decimal('8.00'))
        self.assertEqual(resolve_price(None, '9.00', '10.00'), Decimal('9.00'))
        self.assertEqual(resolve_price(None, 'bad', '10.00'), Decimal('10.00'))
        self.assertEqual(resolve_price(None, None, None), Decimal('0.00'))

    def test_menu_item_entry(self):
        line = line_from_dict({'menu_item_id': 3, 'item_name': 'Sisig', 'item_price': '150.00', 'quantity': 2})
        self.assertEqual(line.key, LineKey(MENU_ITEM, 3, None))
        self.assertEqual(line.name, 'Sisig')
        self.assertEqual(line.subtotal, Decimal('300.00'))


class CartAPITests(TestCase):
    """Persisted cart endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(self.user, price=Decimal('100.00'), quantity=5)
        self.cart = TestDataFactory.create_cart(self.user)

    def add(self, **data):
        return self.client.post(f'/api/v1/carts/{self.cart.id}/items/', data, format='json')

    def test_create_cart(self):
        response = self.client.post('/api/v1/carts/', {'channel': 'pos'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['channel'], 'pos')
        self.assertTrue(response.data['cart_number'].startswith('CART-'))
        self.assertEqual(response.data['items'], [])

    def test_add_item_uses_catalog_price(self):
        response = self.add(product_id=self.product.id, quantity=2, price='1.00')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['items'][0]['unit_price'], '100.00')
        self.assertEqual(response.data['summary']['subtotal'], '200.00')

    def test_add_same_item_twice_merges(self):
        self.add(product_id=self.product.id, quantity=2)
        response = self.add(product_id=self.product.id, quantity=1)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(CartItem.objects.filter(cart=self.cart).count(), 1)
        self.assertEqual(response.data['items'][0]['quantity'], 3)

    def test_add_more_than_stock(self):
        self.add(product_id=self.product.id, quantity=4)
        response = self.add(product_id=self.product.id, quantity=2)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['available'], 5)
        self.assertEqual(CartItem.objects.get(cart=self.cart).quantity, 4)

    def test_add_out_of_stock_product(self):
        product = TestDataFactory.create_product(self.user, quantity=0)
        response = self.add(product_id=product.id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('out of stock', response.data['error'])

    def test_untracked_product_has_no_limit(self):
        product = TestDataFactory.create_product(self.user, quantity=0, track_inventory=False)
        response = self.add(product_id=product.id, quantity=50)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_add_requires_item(self):
        response = self.add(quantity=1)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_add_other_tenant_product(self):
        other = TestDataFactory.create_user()
        product = TestDataFactory.create_product(other)
        response = self.add(product_id=product.id)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_quantity_and_remove(self):
        self.add(product_id=self.product.id, quantity=1)
        item = CartItem.objects.get(cart=self.cart)
        url = f'/api/v1/carts/{self.cart.id}/items/{item.id}/'

        response = self.client.patch(url, {'quantity': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'][0]['quantity'], 3)

        response = self.client.patch(url, {'quantity': 9}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(url, {'quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'], [])

    def test_update_missing_item(self):
        response = self.client.patch(f'/api/v1/carts/{self.cart.id}/items/9999/', {'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_item(self):
        self.add(product_id=self.product.id)
        item = CartItem.objects.get(cart=self.cart)
        response = self.client.delete(f'/api/v1/carts/{self.cart.id}/items/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(CartItem.objects.filter(cart=self.cart).exists())

    def test_clear(self):
        self.add(product_id=self.product.id)
        response = self.client.post(f'/api/v1/carts/{self.cart.id}/clear/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['item_count'], 0)

    def test_reconcile_after_stock_drop(self):
        self.add(product_id=self.product.id, quantity=4)
        self.product.quantity = 2
        self.product.price = Decimal('80.00')
        self.product.save()

        response = self.client.post(f'/api/v1/carts/{self.cart.id}/reconcile/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['adjustments']), 1)
        self.assertEqual(response.data['adjustments'][0]['new_quantity'], 2)
        self.assertEqual(response.data['items'][0]['unit_price'], '80.00')

    def test_merge_local_cart(self):
        other_product = TestDataFactory.create_product(self.user, price=Decimal('20.00'), quantity=0)
        payload = {'cart': [
            {'id': self.product.id, 'name': 'x', 'price': '1.00', 'quantity': 2},
            {'id': other_product.id, 'quantity': 1},
            {'id': 999999, 'quantity': 1},
        ]}
        response = self.client.post(f'/api/v1/carts/{self.cart.id}/merge/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['merged'], 1)
        self.assertEqual(len(response.data['rejected']), 2)
        self.assertEqual(response.data['items'][0]['unit_price'], '100.00')

    def test_hold_and_resume(self):
        response = self.client.post(f'/api/v1/carts/{self.cart.id}/hold/')
        self.assertEqual(response.data['status'], 'held')

        response = self.add(product_id=self.product.id)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        response = self.client.post(f'/api/v1/carts/{self.cart.id}/resume/')
        self.assertEqual(response.data['status'], 'active')

    def test_abandon(self):
        response = self.client.delete(f'/api/v1/carts/{self.cart.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.cart.refresh_from_db()
        self.assertEqual(self.cart.status, 'abandoned')

    def test_list_defaults_to_open_carts(self):
        abandoned = TestDataFactory.create_cart(self.user)
        abandoned.status = 'abandoned'
        abandoned.save()
        response = self.client.get('/api/v1/carts/')
        ids = [cart['id'] for cart in response.data]
        self.assertIn(self.cart.id, ids)
        self.assertNotIn(abandoned.id, ids)

    def test_other_tenant_cart_is_not_found(self):
        other = TestDataFactory.create_user()
        cart = TestDataFactory.create_cart(other)
        response = self.client.get(f'/api/v1/carts/{cart.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_add_writes_audit_log(self):
        from bizbox.core.models import AuditLog
        self.add(product_id=self.product.id)
        log = AuditLog.objects.get(action='cart_add')
        self.assertEqual(log.object_reference, self.cart.cart_number)
        self.assertEqual(log.client_identifier, self.user.identifier)


class FoodDeliveryCartTests(TestCase):
    """Food delivery carts hold menu items from a single restaurant"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.restaurant = TestDataFactory.create_restaurant(self.user, delivery_fee=Decimal('50.00'),
                                                           minimum_order_amount=Decimal('300.00'))
        self.dish = TestDataFactory.create_menu_item(self.restaurant, price=Decimal('120.00'))
        self.cart = TestDataFactory.create_cart(self.user, channel='food_delivery')

    def add(self, **data):
        return self.client.post(f'/api/v1/carts/{self.cart.id}/items/', data, format='json')

    def test_add_menu_item_sets_restaurant(self):
        response = self.add(menu_item_id=self.dish.id, quantity=2)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['restaurant'], self.restaurant.id)
        summary = response.data['summary']
        self.assertEqual(summary['subtotal'], '240.00')
        self.assertEqual(summary['delivery_fee'], '50.00')
        self.assertEqual(summary['total'], '290.00')
        self.assertFalse(summary['meets_minimum_order'])

    def test_other_restaurant_conflicts(self):
        self.add(menu_item_id=self.dish.id)
        other_restaurant = TestDataFactory.create_restaurant(self.user)
        other_dish = TestDataFactory.create_menu_item(other_restaurant)

        response = self.add(menu_item_id=other_dish.id)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        response = self.add(menu_item_id=other_dish.id, replace=True)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['restaurant'], other_restaurant.id)
        self.assertEqual(len(response.data['items']), 1)

    def test_unavailable_menu_item(self):
        dish = TestDataFactory.create_menu_item(self.restaurant, is_available=False)
        response = self.add(menu_item_id=dish.id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_closed_restaurant(self):
        self.restaurant.is_open = False
        self.restaurant.save()
        response = self.add(menu_item_id=self.dish.id)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_merge_from_closed_restaurant_rejected(self):
        self.restaurant.is_open = False
        self.restaurant.save()
        cart, merged, rejected = cart_services.merge_payload(
            self.cart, [{'kind': MENU_ITEM, 'id': self.dish.id, 'quantity': 2}]
        )
        self.assertEqual(merged, [])
        self.assertEqual(len(rejected), 1)
        self.assertFalse(CartItem.objects.filter(cart=self.cart).exists())
        self.assertIsNone(Cart.objects.get(pk=self.cart.pk).restaurant_id)

    def test_merge_sets_restaurant_only_for_merged_lines(self):
        other_restaurant = TestDataFactory.create_restaurant(self.user)
        sold_out = TestDataFactory.create_menu_item(other_restaurant, is_available=False)
        cart, merged, rejected = cart_services.merge_payload(self.cart, [
            {'kind': MENU_ITEM, 'id': sold_out.id, 'quantity': 1},
            {'kind': MENU_ITEM, 'id': self.dish.id, 'quantity': 1},
        ])
        self.assertEqual(merged, [LineKey(MENU_ITEM, self.dish.id, None)])
        self.assertEqual(len(rejected), 1)
        self.assertEqual(Cart.objects.get(pk=self.cart.pk).restaurant_id, self.restaurant.id)

    def test_clearing_releases_restaurant(self):
        self.add(menu_item_id=self.dish.id)
        self.client.post(f'/api/v1/carts/{self.cart.id}/clear/')
        self.assertIsNone(Cart.objects.get(pk=self.cart.pk).restaurant_id)
