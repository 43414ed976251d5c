"""
Tests for discount selection and the discount endpoints
"""
from datetime import timedelta
from decimal import Decimal
from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework import status
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.cart.engine import CartLine, LineKey, PRODUCT, MENU_ITEM
from bizbox.pricing.engine import DiscountRule, best_discount, discount_amount
from bizbox.pricing.models import Discount


def line(product_id, price, quantity, category_id=None):
    return CartLine(
        key=LineKey(PRODUCT, product_id, None),
        name=f'Product {product_id}',
        unit_price=Decimal(price),
        quantity=quantity,
        meta={'category_id': category_id},
    )


def rule(rule_id, discount_type, value='0', **kwargs):
    return DiscountRule(id=rule_id, name=f'Rule {rule_id}', discount_type=discount_type, value=Decimal(value),
                        **kwargs)


class DiscountAmountTests(SimpleTestCase):

    def test_percentage(self):
        self.assertEqual(discount_amount(rule(1, 'percentage', '15'), Decimal('99.99'), 1), Decimal('15.00'))

    def test_fixed_capped_at_line_total(self):
        self.assertEqual(discount_amount(rule(1, 'fixed', '50'), Decimal('20.00'), 2), Decimal('40.00'))

    def test_buy_x_get_y(self):
        buy_two_get_one = rule(1, 'buy_x_get_y', buy_quantity=2, get_quantity=1)
        self.assertEqual(discount_amount(buy_two_get_one, Decimal('10.00'), 7), Decimal('20.00'))
        self.assertEqual(discount_amount(buy_two_get_one, Decimal('10.00'), 2), Decimal('0.00'))


class BestDiscountTests(SimpleTestCase):

    def test_no_rules(self):
        applied = best_discount([line(1, '10.00', 1)], [])
        self.assertIsNone(applied.rule)
        self.assertEqual(applied.amount, Decimal('0.00'))

    def test_picks_most_valuable_pair(self):
        lines = [line(1, '100.00', 1), line(2, '30.00', 3)]
        rules = [rule(1, 'percentage', '10'), rule(2, 'fixed', '25')]
        applied = best_discount(lines, rules)
        self.assertEqual(applied.rule.id, 2)
        self.assertEqual(applied.amount, Decimal('25.00'))

    def test_only_one_discount_applied(self):
        lines = [line(1, '100.00', 1), line(2, '100.00', 1)]
        applied = best_discount(lines, [rule(1, 'percentage', '10')])
        self.assertEqual(applied.amount, Decimal('10.00'))

    def test_tie_keeps_first_pair(self):
        lines = [line(1, '50.00', 1), line(2, '50.00', 1)]
        applied = best_discount(lines, [rule(1, 'fixed', '5'), rule(2, 'fixed', '5')])
        self.assertEqual(applied.rule.id, 1)
        self.assertEqual(applied.line_key, LineKey(PRODUCT, 1, None))

    def test_product_and_category_restrictions(self):
        lines = [line(1, '100.00', 1, category_id=9), line(2, '100.00', 1, category_id=8)]
        by_product = rule(1, 'percentage', '50', product_ids=frozenset({3}))
        by_category = rule(2, 'percentage', '20', category_ids=frozenset({8}))
        applied = best_discount(lines, [by_product, by_category])
        self.assertEqual(applied.rule.id, 2)
        self.assertEqual(applied.line_key, LineKey(PRODUCT, 2, None))

    def test_minimums(self):
        lines = [line(1, '10.00', 2)]
        self.assertIsNone(best_discount(lines, [rule(1, 'fixed', '5', min_quantity=3)]).rule)
        self.assertIsNone(best_discount(lines, [rule(1, 'fixed', '5', min_purchase_amount=Decimal('50'))]).rule)
        self.assertIsNotNone(best_discount(lines, [rule(1, 'fixed', '5', min_quantity=2)]).rule)

    def test_menu_lines_are_ignored(self):
        menu_line = CartLine(LineKey(MENU_ITEM, 1, None), 'Dish', Decimal('100.00'), 1)
        self.assertIsNone(best_discount([menu_line], [rule(1, 'percentage', '10')]).rule)


class DiscountAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_discount(self):
        product = TestDataFactory.create_product(self.user)
        data = {
            'name': 'Ten off',
            'discount_type': 'percentage',
            'value': '10.00',
            'applicable_products': [product.id],
        }
        response = self.client.post('/api/v1/discounts/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        discount = Discount.objects.get(pk=response.data['id'])
        self.assertEqual(discount.client_identifier, self.user.identifier)
        self.assertEqual(list(discount.applicable_products.all()), [product])

    def test_percentage_over_100_rejected(self):
        response = self.client.post('/api/v1/discounts/', {
            'name': 'Too much', 'discount_type': 'percentage', 'value': '150.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_buy_x_get_y_needs_quantities(self):
        response = self.client.post('/api/v1/discounts/', {
            'name': 'B2G1', 'discount_type': 'buy_x_get_y', 'buy_quantity': 2
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_tenant_product_rejected(self):
        other = TestDataFactory.create_user()
        product = TestDataFactory.create_product(other)
        response = self.client.post('/api/v1/discounts/', {
            'name': 'Sneaky', 'discount_type': 'fixed', 'value': '5.00', 'applicable_products': [product.id]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_active_discounts_respect_window(self):
        now = timezone.now()
        current = TestDataFactory.create_discount(self.user, name='Current')
        TestDataFactory.create_discount(self.user, name='Expired', ends_at=now - timedelta(days=1))
        TestDataFactory.create_discount(self.user, name='Future', starts_at=now + timedelta(days=1))
        TestDataFactory.create_discount(self.user, name='Off', is_active=False)

        response = self.client.get('/api/v1/discounts/active/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([d['id'] for d in response.data], [current.id])
