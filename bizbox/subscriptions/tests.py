"""
Tests for subscription plans, user subscriptions and expiry
"""
from datetime import timedelta
from decimal import Decimal
from io import StringIO
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.subscriptions.models import SubscriptionPlan, UserSubscription
from bizbox.subscriptions import services


class PlanAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.staff = TestDataFactory.create_user(is_staff=True)
        self.client = AuthenticatedAPIClient()
        self.basic = TestDataFactory.create_plan(name='Basic', price=Decimal('299.00'))
        self.retired = TestDataFactory.create_plan(name='Retired', is_active=False)

    def test_users_see_active_plans(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/subscription-plans/')
        self.assertEqual([plan['name'] for plan in response.data], ['Basic'])

        self.client.authenticate_user(self.staff)
        response = self.client.get('/api/v1/subscription-plans/')
        self.assertEqual(len(response.data), 2)

    def test_only_staff_create(self):
        payload = {'name': 'Pro', 'slug': 'pro', 'price': '999.00', 'duration_in_days': 30,
                   'features': ['Unlimited products']}
        self.client.authenticate_user(self.user)
        self.assertEqual(self.client.post('/api/v1/subscription-plans/', payload, format='json').status_code,
                         status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.staff)
        response = self.client.post('/api/v1/subscription-plans/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['active_subscribers'], 0)

    def test_plan_validation(self):
        self.client.authenticate_user(self.staff)
        response = self.client.post('/api/v1/subscription-plans/', {
            'name': 'Bad', 'slug': 'bad', 'price': '-1.00', 'duration_in_days': 0
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data)
        self.assertIn('duration_in_days', response.data)

    def test_plan_with_subscribers_is_kept(self):
        TestDataFactory.create_subscription(self.user, self.basic, status='active')
        self.client.authenticate_user(self.staff)

        response = self.client.patch(f'/api/v1/subscription-plans/{self.basic.id}/', {'is_active': False},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        response = self.client.delete(f'/api/v1/subscription-plans/{self.basic.id}/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        response = self.client.delete(f'/api/v1/subscription-plans/{self.retired.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class SubscribeTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.staff = TestDataFactory.create_user(is_staff=True)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.free = TestDataFactory.create_plan(name='Free', price=Decimal('0.00'), duration_in_days=14)
        self.pro = TestDataFactory.create_plan(name='Pro', price=Decimal('999.00'), duration_in_days=30)

    def subscribe(self, plan):
        return self.client.post('/api/v1/subscriptions/subscribe/', {'plan_id': plan.id}, format='json')

    def test_free_plan_starts_immediately(self):
        response = self.subscribe(self.free)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'active')
        self.assertEqual(response.data['payment_reference'], '')

        response = self.client.get('/api/v1/subscriptions/current/')
        self.assertEqual(response.data['subscription']['plan']['name'], 'Free')

    def test_paid_plan_waits_for_payment(self):
        response = self.subscribe(self.pro)
        self.assertEqual(response.data['status'], 'pending')
        self.assertTrue(response.data['payment_reference'].startswith('CASH-'))
        self.assertIsNone(self.client.get('/api/v1/subscriptions/current/').data['subscription'])

        response = self.subscribe(self.pro)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_inactive_plan(self):
        self.pro.is_active = False
        self.pro.save()
        self.assertEqual(self.subscribe(self.pro).status_code, status.HTTP_400_BAD_REQUEST)

    def test_mark_paid_replaces_running_plan(self):
        free_id = self.subscribe(self.free).data['identifier']
        pro_id = self.subscribe(self.pro).data['identifier']

        self.client.authenticate_user(self.staff)
        response = self.client.post(f'/api/v1/admin-subscriptions/{pro_id}/mark-paid/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'active')
        self.assertEqual(response.data['amount_paid'], '999.00')

        free = UserSubscription.objects.get(identifier=free_id)
        self.assertEqual(free.status, 'cancelled')
        self.assertEqual(free.cancellation_reason, 'Upgraded to a new plan')

        response = self.client.post(f'/api/v1/admin-subscriptions/{pro_id}/mark-paid/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_mark_paid_is_staff_only(self):
        pro_id = self.subscribe(self.pro).data['identifier']
        response = self.client.post(f'/api/v1/admin-subscriptions/{pro_id}/mark-paid/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cancel_own_subscription(self):
        identifier = self.subscribe(self.pro).data['identifier']
        response = self.client.post(f'/api/v1/subscriptions/{identifier}/cancel/', {'reason': 'Too expensive'},
                                    format='json')
        self.assertEqual(response.data['status'], 'cancelled')
        self.assertEqual(response.data['cancellation_reason'], 'Too expensive')

        response = self.client.post(f'/api/v1/subscriptions/{identifier}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_cannot_cancel_another_users_subscription(self):
        other = TestDataFactory.create_subscription(TestDataFactory.create_user(), self.pro)
        response = self.client.post(f'/api/v1/subscriptions/{other.identifier}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_team_member_without_admin_role(self):
        member = TestDataFactory.create_team_member(self.user, roles=['manager'])
        self.client.as_team_member(member)
        self.assertEqual(self.subscribe(self.free).status_code, status.HTTP_403_FORBIDDEN)

    def test_history(self):
        self.subscribe(self.free)
        self.subscribe(self.pro)
        response = self.client.get('/api/v1/subscriptions/history/')
        self.assertEqual(len(response.data), 2)


class ExpiryTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.plan = TestDataFactory.create_plan(duration_in_days=30)
        now = timezone.now()
        self.lapsed = TestDataFactory.create_subscription(self.user, self.plan, status='active',
                                                          end_date=now - timedelta(days=1))
        self.running = TestDataFactory.create_subscription(TestDataFactory.create_user(), self.plan,
                                                           status='active', end_date=now + timedelta(days=5))

    def test_expire_subscriptions(self):
        self.assertEqual(services.expire_subscriptions(), 1)
        self.lapsed.refresh_from_db()
        self.running.refresh_from_db()
        self.assertEqual(self.lapsed.status, 'expired')
        self.assertEqual(self.running.status, 'active')

    def test_lapsed_subscription_is_not_current(self):
        self.assertIsNone(services.current_subscription(self.user))

    def test_command_dry_run(self):
        out = StringIO()
        call_command('expire_subscriptions', '--dry-run', stdout=out)
        self.assertIn('1 subscriptions would expire.', out.getvalue())
        self.lapsed.refresh_from_db()
        self.assertEqual(self.lapsed.status, 'active')

    def test_command(self):
        out = StringIO()
        call_command('expire_subscriptions', stdout=out)
        self.assertIn('Expired 1 subscriptions.', out.getvalue())
        self.assertEqual(SubscriptionPlan.objects.get(pk=self.plan.pk).subscriptions.filter(status='expired').count(), 1)
