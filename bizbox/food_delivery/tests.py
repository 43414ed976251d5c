"""
Test suite for food delivery
Tests: restaurants and menus, order placement, status flow, drivers and public pages
"""
from decimal import Decimal
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.cart import services as cart_services
from bizbox.food_delivery.models import DeliveryOrder
from bizbox.wallets import services as wallet_services


class RestaurantAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_restaurant(self):
        response = self.client.post('/api/v1/restaurants/', {
            'name': 'Lutong Bahay', 'slug': 'lutong-bahay', 'delivery_fee': '49.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['accepts_orders'])

    def test_negative_fee_rejected(self):
        response = self.client.post('/api/v1/restaurants/', {
            'name': 'Bad', 'slug': 'bad', 'delivery_fee': '-1.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_toggle_open(self):
        restaurant = TestDataFactory.create_restaurant(self.user)
        response = self.client.post(f'/api/v1/restaurants/{restaurant.id}/toggle-open/')
        self.assertFalse(response.data['is_open'])
        self.assertFalse(response.data['accepts_orders'])

    def test_menu_item_category_must_match_restaurant(self):
        restaurant = TestDataFactory.create_restaurant(self.user)
        other = TestDataFactory.create_restaurant(self.user)
        category = TestDataFactory.create_menu_category(other)
        response = self.client.post(f'/api/v1/restaurants/{restaurant.id}/menu-items/', {
            'name': 'Adobo', 'price': '150.00', 'category': category.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_toggle_item_availability(self):
        restaurant = TestDataFactory.create_restaurant(self.user)
        item = TestDataFactory.create_menu_item(restaurant)
        response = self.client.post(f'/api/v1/menu-items/{item.id}/toggle-availability/')
        self.assertFalse(response.data['is_available'])

    def test_other_tenant_restaurant_not_found(self):
        restaurant = TestDataFactory.create_restaurant(TestDataFactory.create_user())
        response = self.client.get(f'/api/v1/restaurants/{restaurant.id}/menu-items/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class DeliveryOrderTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.restaurant = TestDataFactory.create_restaurant(self.user, delivery_fee=Decimal('50.00'))
        self.item = TestDataFactory.create_menu_item(self.restaurant, name='Sinigang', price=Decimal('120.00'))
        self.cart = TestDataFactory.create_cart(self.user, channel='food_delivery')

    def place(self, **extra):
        data = {
            'cart_id': self.cart.id,
            'customer_name': 'Maria',
            'customer_phone': '09171112222',
            'customer_address': '123 Rizal St',
        }
        data.update(extra)
        return self.client.post('/api/v1/delivery-orders/place/', data, format='json')

    def add_item(self, quantity=1):
        cart_services.add_item(self.cart, {'menu_item_id': self.item.id, 'quantity': quantity})

    def test_place_order(self):
        self.add_item(quantity=2)
        response = self.place()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['order_reference'].startswith('FD-'))
        self.assertEqual(response.data['subtotal'], '240.00')
        self.assertEqual(response.data['delivery_fee'], '50.00')
        self.assertEqual(response.data['total_amount'], '290.00')
        self.assertEqual(response.data['payment_status'], 'pending')
        self.cart.refresh_from_db()
        self.assertEqual(self.cart.status, 'checked_out')

    def test_minimum_order_amount(self):
        self.restaurant.minimum_order_amount = Decimal('500.00')
        self.restaurant.save()
        self.add_item()
        response = self.place()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['minimum_order_amount'], '500.00')
        self.assertEqual(response.data['total_amount'], '170.00')

    def test_closed_restaurant(self):
        self.add_item()
        self.restaurant.is_open = False
        self.restaurant.save()
        self.assertEqual(self.place().status_code, status.HTTP_409_CONFLICT)

    def test_sold_out_item(self):
        self.add_item()
        self.item.is_available = False
        self.item.save()
        response = self.place()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['items'], ['Sinigang'])

    def test_empty_cart(self):
        self.assertEqual(self.place().status_code, status.HTTP_400_BAD_REQUEST)

    def test_wallet_payment(self):
        customer = TestDataFactory.create_contact(self.user)
        wallet_services.credit(customer, '500')
        self.add_item()
        response = self.place(payment_method='wallet', customer_id=customer.id)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['payment_status'], 'paid')
        self.assertEqual(wallet_services.get_wallet(customer).balance, Decimal('330.00'))

    def test_wallet_payment_insufficient(self):
        customer = TestDataFactory.create_contact(self.user)
        self.add_item()
        response = self.place(payment_method='wallet', customer_id=customer.id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(DeliveryOrder.objects.exists())

    def test_status_flow_and_driver(self):
        self.add_item()
        order_id = self.place().data['id']
        url = f'/api/v1/delivery-orders/{order_id}/'

        response = self.client.post(f'{url}status/', {'order_status': 'ready'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        for new_status in ('accepted', 'preparing'):
            self.client.post(f'{url}status/', {'order_status': new_status}, format='json')

        response = self.client.post(f'{url}assign-driver/', {'driver_name': 'Ramon'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        self.client.post(f'{url}status/', {'order_status': 'ready'}, format='json')
        response = self.client.post(f'{url}assign-driver/', {'driver_name': 'Ramon'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order_status'], 'assigned')

        for new_status in ('out_for_delivery', 'delivered'):
            response = self.client.post(f'{url}status/', {'order_status': new_status}, format='json')
        self.assertEqual(response.data['payment_status'], 'paid')
        self.assertIsNotNone(response.data['delivered_at'])

    def test_cancel_with_reason(self):
        self.add_item()
        order_id = self.place().data['id']
        response = self.client.post(f'/api/v1/delivery-orders/{order_id}/status/', {
            'order_status': 'cancelled', 'cancellation_reason': 'Customer unreachable'
        }, format='json')
        self.assertEqual(response.data['cancellation_reason'], 'Customer unreachable')
        response = self.client.post(f'/api/v1/delivery-orders/{order_id}/status/', {
            'order_status': 'accepted'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_restaurant_with_orders_cannot_be_deleted(self):
        self.add_item()
        self.place()
        response = self.client.delete(f'/api/v1/restaurants/{self.restaurant.id}/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_public_tracking(self):
        self.add_item()
        reference = self.place().data['order_reference']
        self.client.logout()
        response = self.client.get(f'/api/v1/public/delivery-orders/{reference}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order_status'], 'pending')
        self.assertNotIn('customer_phone', response.data)


class PublicMenuTests(TestCase):

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.restaurant = TestDataFactory.create_restaurant(self.user)
        category = TestDataFactory.create_menu_category(self.restaurant, name='Mains')
        self.item = TestDataFactory.create_menu_item(self.restaurant, name='Kare-Kare', category=category)
        TestDataFactory.create_menu_item(self.restaurant, name='Halo-Halo')
        TestDataFactory.create_menu_item(self.restaurant, name='Sold Out', is_available=False)

    def menu_url(self):
        return f'/api/v1/public/restaurants/{self.restaurant.slug}/'

    def test_menu_groups_available_items(self):
        response = self.client.get(self.menu_url())
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        categories = {category['name']: [item['name'] for item in category['items']]
                      for category in response.data['categories']}
        self.assertEqual(categories, {'Mains': ['Kare-Kare'], 'Other': ['Halo-Halo']})

    def test_unknown_restaurant(self):
        response = self.client.get('/api/v1/public/restaurants/nowhere/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_inactive_restaurant_hidden(self):
        self.restaurant.status = 'inactive'
        self.restaurant.save()
        self.assertEqual(self.client.get(self.menu_url()).status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get('/api/v1/public/restaurants/').data, [])

    def test_menu_cache_invalidated_on_change(self):
        self.client.get(self.menu_url())
        with self.captureOnCommitCallbacks(execute=True):
            self.item.name = 'Kare-Kare Special'
            self.item.save()
        response = self.client.get(self.menu_url())
        names = [item['name'] for category in response.data['categories'] for item in category['items']]
        self.assertIn('Kare-Kare Special', names)

    def test_menu_cache_cleared_for_old_slug(self):
        old_url = self.menu_url()
        self.assertEqual(self.client.get(old_url).status_code, status.HTTP_200_OK)
        with self.captureOnCommitCallbacks(execute=True):
            self.restaurant.slug = 'renamed-kitchen'
            self.restaurant.save()
        self.assertEqual(self.client.get(old_url).status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get(self.menu_url()).status_code, status.HTTP_200_OK)
