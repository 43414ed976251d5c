"""
Tests for contact wallets: credits, debits, transfers and top-ups
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from bizbox.core.exceptions import ServiceError
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.wallets import services
from bizbox.wallets.models import Wallet, WalletTransaction


class WalletServiceTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.contact = TestDataFactory.create_contact(self.user)

    def test_wallet_created_on_first_access(self):
        wallet = services.get_wallet(self.contact)
        self.assertEqual(wallet.balance, Decimal('0.00'))
        self.assertEqual(wallet.client_identifier, self.user.identifier)
        self.assertEqual(services.get_wallet(self.contact).pk, wallet.pk)

    def test_credit_and_debit(self):
        services.credit(self.contact, '100')
        entry = services.debit(self.contact, Decimal('30.50'))
        self.assertEqual(entry.balance_after, Decimal('69.50'))
        self.assertEqual(services.get_wallet(self.contact).balance, Decimal('69.50'))

    def test_failed_debit_is_recorded(self):
        services.credit(self.contact, '10')
        with self.assertRaises(ServiceError):
            services.debit(self.contact, '25')
        failed = WalletTransaction.objects.get(status='failed')
        self.assertEqual(failed.amount, Decimal('25.00'))
        self.assertEqual(failed.balance_after, Decimal('10.00'))
        self.assertEqual(services.get_wallet(self.contact).balance, Decimal('10.00'))

    def test_amount_must_be_positive(self):
        for amount in ('0', '-5', 'abc', None):
            with self.assertRaises(ServiceError):
                services.credit(self.contact, amount)

    def test_transfer_between_tenants_rejected(self):
        other = TestDataFactory.create_contact(TestDataFactory.create_user())
        services.credit(self.contact, '50')
        with self.assertRaises(ServiceError):
            services.transfer(self.contact, other, '10')


class WalletAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.alice = TestDataFactory.create_contact(self.user, first_name='Alice', contact_number='09170000001')
        self.bob = TestDataFactory.create_contact(self.user, first_name='Bob', contact_number='09170000002')

    def test_balance(self):
        response = self.client.get(f'/api/v1/contacts/{self.alice.id}/wallet/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['balance'], '0.00')

    def test_add_and_deduct_funds(self):
        response = self.client.post(f'/api/v1/contacts/{self.alice.id}/wallet/add-funds/',
                                    {'amount': '150.00', 'description': 'Cash deposit'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['wallet']['balance'], '150.00')
        self.assertEqual(response.data['transaction']['transaction_type'], 'credit')

        response = self.client.post(f'/api/v1/contacts/{self.alice.id}/wallet/deduct-funds/',
                                    {'amount': '40.00'}, format='json')
        self.assertEqual(response.data['wallet']['balance'], '110.00')

        response = self.client.post(f'/api/v1/contacts/{self.alice.id}/wallet/deduct-funds/',
                                    {'amount': '500.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['balance'], '110.00')

        response = self.client.get(f'/api/v1/contacts/{self.alice.id}/wallet/transactions/', {'status': 'failed'})
        self.assertEqual(len(response.data), 1)

    def test_zero_amount_rejected(self):
        response = self.client.post(f'/api/v1/contacts/{self.alice.id}/wallet/add-funds/',
                                    {'amount': '0.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_transfer(self):
        services.credit(self.alice, '100')
        response = self.client.post('/api/v1/wallets/transfer/', {
            'from_contact': self.alice.id, 'to_contact': self.bob.id, 'amount': '60.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['debit']['reference'], response.data['credit']['reference'])
        self.assertTrue(response.data['reference'].startswith('TRF-'))
        self.assertEqual(Wallet.objects.get(contact=self.alice).balance, Decimal('40.00'))
        self.assertEqual(Wallet.objects.get(contact=self.bob).balance, Decimal('60.00'))

    def test_transfer_insufficient_changes_nothing(self):
        services.credit(self.alice, '10')
        response = self.client.post('/api/v1/wallets/transfer/', {
            'from_contact': self.alice.id, 'to_contact': self.bob.id, 'amount': '60.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Wallet.objects.get(contact=self.alice).balance, Decimal('10.00'))
        self.assertEqual(Wallet.objects.get(contact=self.bob).balance, Decimal('0.00'))

    def test_transfer_to_same_contact(self):
        response = self.client.post('/api/v1/wallets/transfer/', {
            'from_contact': self.alice.id, 'to_contact': self.alice.id, 'amount': '1.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_tenant_contact_not_found(self):
        foreign = TestDataFactory.create_contact(TestDataFactory.create_user())
        response = self.client.get(f'/api/v1/contacts/{foreign.id}/wallet/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_lookup_and_top_up(self):
        response = self.client.get('/api/v1/wallets/lookup/', {'contact_number': '09170000002'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['contact_name'], self.bob.full_name)

        response = self.client.post('/api/v1/wallets/top-up/', {
            'contact_number': '09170000002', 'amount': '25.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['transaction']['description'], 'Top-up')

        response = self.client.get('/api/v1/wallets/lookup/', {'contact_number': '0000'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_top_up_requires_manager(self):
        member = TestDataFactory.create_team_member(self.user, roles=['user'])
        self.client.as_team_member(member)
        response = self.client.post('/api/v1/wallets/top-up/', {
            'contact_number': '09170000002', 'amount': '25.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
