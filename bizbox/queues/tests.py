"""
Tests for queue types, number lifecycle, tickets and display boards
"""
from django.test import TestCase
from rest_framework import status
from bizbox.core.exceptions import ConflictError, ServiceError
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.queues import services
from bizbox.queues.models import QueueNumber
from bizbox.queues.ticket_generator import generate_ticket_image


class QueueServiceTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.queue_type = TestDataFactory.create_queue_type(self.user, prefix='B')

    def test_numbers_are_sequential(self):
        first = services.issue_number(self.queue_type)
        second = services.issue_number(self.queue_type, customer_name='Lito')
        self.assertEqual(first.queue_number, 'B001')
        self.assertEqual(second.queue_number, 'B002')
        self.queue_type.refresh_from_db()
        self.assertEqual(self.queue_type.current_number, 2)

    def test_inactive_queue(self):
        self.queue_type.is_active = False
        self.queue_type.save()
        with self.assertRaises(ServiceError):
            services.issue_number(self.queue_type)

    def test_reset_counter(self):
        services.issue_number(self.queue_type)
        services.reset_counter(self.queue_type)
        self.assertEqual(services.issue_number(self.queue_type).queue_number, 'B001')

    def test_call_next_is_first_in_first_out(self):
        first = services.issue_number(self.queue_type)
        services.issue_number(self.queue_type)
        called = services.call_next(self.queue_type)
        self.assertEqual(called.pk, first.pk)
        self.assertEqual(called.status, 'called')
        self.assertIsNotNone(called.called_at)

    def test_transitions(self):
        number = services.issue_number(self.queue_type)
        with self.assertRaises(ConflictError):
            services.change_status(number, 'serving')
        number = services.call_next(self.queue_type)
        number = services.change_status(number, 'serving')
        number = services.change_status(number, 'completed')
        self.assertIsNotNone(number.completed_at)
        with self.assertRaises(ConflictError):
            services.change_status(number, 'cancelled')

    def test_called_number_can_complete_directly(self):
        services.issue_number(self.queue_type)
        number = services.change_status(services.call_next(self.queue_type), 'completed')
        self.assertEqual(number.status, 'completed')
        self.assertIsNone(number.serving_at)

    def test_ticket_image(self):
        image = generate_ticket_image('Cashier', 'A001', issued_at='2026-01-01 09:00', barcode_value='Q000001')
        self.assertTrue(image.startswith('data:image/png;base64,'))


class QueueAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.queue_type = TestDataFactory.create_queue_type(self.user, name='Cashier', prefix='A')

    def issue(self, **data):
        return self.client.post(f'/api/v1/queue-types/{self.queue_type.id}/issue/', data, format='json')

    def test_create_queue_type_uppercases_prefix(self):
        response = self.client.post('/api/v1/queue-types/', {'name': 'Pharmacy', 'prefix': 'ph'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['prefix'], 'PH')

        response = self.client.post('/api/v1/queue-types/', {'name': 'Bad', 'prefix': 'P-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_issue_and_waiting_count(self):
        response = self.issue(customer_name='Nena')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['queue_number'], 'A001')
        self.assertEqual(response.data['status'], 'waiting')

        response = self.client.get(f'/api/v1/queue-types/{self.queue_type.id}/')
        self.assertEqual(response.data['waiting_count'], 1)
        self.assertEqual(len(response.data['queue_numbers']), 1)

    def test_issue_on_inactive_queue(self):
        self.queue_type.is_active = False
        self.queue_type.save()
        response = self.issue()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Queue is inactive')

    def test_call_next_with_empty_queue(self):
        response = self.client.post(f'/api/v1/queue-types/{self.queue_type.id}/call-next/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_number_lifecycle(self):
        number_id = self.issue().data['id']
        self.client.post(f'/api/v1/queue-types/{self.queue_type.id}/call-next/')

        response = self.client.post(f'/api/v1/queue-numbers/{number_id}/start-serving/')
        self.assertEqual(response.data['status'], 'serving')
        response = self.client.post(f'/api/v1/queue-numbers/{number_id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        response = self.client.post(f'/api/v1/queue-numbers/{number_id}/complete/')
        self.assertEqual(response.data['status'], 'completed')

    def test_other_tenant_number_not_found(self):
        other = TestDataFactory.create_user()
        number = services.issue_number(TestDataFactory.create_queue_type(other))
        response = self.client.post(f'/api/v1/queue-numbers/{number.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(QueueNumber.objects.get(pk=number.id).status, 'waiting')

    def test_ticket(self):
        number_id = self.issue(customer_name='Nena').data['id']
        response = self.client.get(f'/api/v1/queue-numbers/{number_id}/ticket/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['queue_number'], 'A001')
        self.assertTrue(response.data['image'].startswith('data:image/png;base64,'))

    def test_display_board(self):
        for _ in range(7):
            self.issue()
        self.client.post(f'/api/v1/queue-types/{self.queue_type.id}/call-next/')

        response = self.client.get('/api/v1/queues/display/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['counts']['waiting'], 6)
        self.assertEqual(response.data['counts']['called'], 1)
        self.assertEqual([n['queue_number'] for n in response.data['called_numbers']], ['A001'])
        self.assertEqual(len(response.data['next_waiting']), 5)
        self.assertEqual(response.data['next_waiting'][0]['queue_number'], 'A002')

    def test_public_display(self):
        self.issue()
        inactive = TestDataFactory.create_queue_type(self.user, prefix='Z')
        services.issue_number(inactive)
        inactive.is_active = False
        inactive.save()

        self.client.logout()
        response = self.client.get(f'/api/v1/public/queues/{self.user.identifier}/display/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['counts']['waiting'], 1)

        response = self.client.get('/api/v1/public/queues/unknown/display/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
