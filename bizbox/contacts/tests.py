from django.test import TestCase
from rest_framework import status
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.contacts.models import Contact


class ContactAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_contact(self):
        response = self.client.post('/api/v1/contacts/', {
            'first_name': 'Juan', 'last_name': 'Dela Cruz', 'contact_number': '09171234567'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['full_name'], 'Juan Dela Cruz')
        self.assertEqual(Contact.objects.get().client_identifier, self.user.identifier)

    def test_search(self):
        TestDataFactory.create_contact(self.user, first_name='Maria', contact_number='09170000001')
        TestDataFactory.create_contact(self.user, first_name='Pedro', contact_number='09180000002')
        response = self.client.get('/api/v1/contacts/', {'search': '0918'})
        self.assertEqual([c['first_name'] for c in response.data], ['Pedro'])

    def test_tenant_isolation(self):
        foreign = TestDataFactory.create_contact(TestDataFactory.create_user())
        self.assertEqual(self.client.get('/api/v1/contacts/').data, [])
        response = self.client.patch(f'/api/v1/contacts/{foreign.id}/', {'first_name': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
