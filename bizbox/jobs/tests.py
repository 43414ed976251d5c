"""
Tests for job boards, job publishing and public applications
"""
from datetime import timedelta
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.jobs.models import Applicant, JobApplication


class JobManagementTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.board = TestDataFactory.create_job_board(self.user)

    def test_create_job_starts_as_draft(self):
        response = self.client.post(f'/api/v1/job-boards/{self.board.id}/jobs/', {
            'title': 'Barista', 'description': 'Make coffee', 'status': 'published'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'draft')
        self.assertIsNone(response.data['published_at'])

    def test_salary_range(self):
        response = self.client.post(f'/api/v1/job-boards/{self.board.id}/jobs/', {
            'title': 'Barista', 'description': 'Make coffee', 'salary_min': '20000', 'salary_max': '15000'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_publish_and_close(self):
        job = TestDataFactory.create_job(self.board, status='draft')
        response = self.client.post(f'/api/v1/jobs/{job.id}/publish/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'published')
        self.assertIsNotNone(response.data['published_at'])

        self.assertEqual(self.client.post(f'/api/v1/jobs/{job.id}/publish/').status_code, status.HTTP_409_CONFLICT)

        response = self.client.post(f'/api/v1/jobs/{job.id}/close/')
        self.assertEqual(response.data['status'], 'closed')
        self.assertEqual(self.client.post(f'/api/v1/jobs/{job.id}/close/').status_code, status.HTTP_409_CONFLICT)

    def test_other_tenant_job_not_found(self):
        board = TestDataFactory.create_job_board(TestDataFactory.create_user())
        job = TestDataFactory.create_job(board)
        self.assertEqual(self.client.get(f'/api/v1/jobs/{job.id}/').status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.get(f'/api/v1/job-boards/{board.id}/jobs/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_review_application(self):
        job = TestDataFactory.create_job(self.board)
        self.client.post(f'/api/v1/public/jobs/{job.id}/apply/', {'name': 'Lea', 'email': 'lea@test.com'},
                         format='json')
        response = self.client.get(f'/api/v1/jobs/{job.id}/applications/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['applicant']['email'], 'lea@test.com')

        application_id = response.data[0]['id']
        response = self.client.patch(f'/api/v1/job-applications/{application_id}/', {
            'status': 'shortlisted', 'notes': 'Strong latte art'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'shortlisted')

        response = self.client.get(f'/api/v1/jobs/{job.id}/applications/', {'status': 'pending'})
        self.assertEqual(response.data, [])


class PublicJobTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.board = TestDataFactory.create_job_board(self.user, slug='acme-careers')
        self.job = TestDataFactory.create_job(self.board, title='Cashier')
        TestDataFactory.create_job(self.board, title='Secret', status='draft')

    def apply(self, job=None, **data):
        payload = {'name': 'Lea Cruz', 'email': 'Lea@Test.com'}
        payload.update(data)
        return self.client.post(f'/api/v1/public/jobs/{(job or self.job).id}/apply/', payload, format='json')

    def test_board_lists_published_jobs(self):
        response = self.client.get('/api/v1/public/job-boards/acme-careers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([job['title'] for job in response.data['jobs']], ['Cashier'])

    def test_inactive_board_hidden(self):
        self.board.is_active = False
        self.board.save()
        self.assertEqual(self.client.get('/api/v1/public/job-boards/acme-careers/').status_code,
                         status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get(f'/api/v1/public/jobs/{self.job.id}/').status_code,
                         status.HTTP_404_NOT_FOUND)

    def test_apply(self):
        response = self.apply(cover_letter='I love retail')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        applicant = Applicant.objects.get()
        self.assertEqual(applicant.email, 'lea@test.com')
        self.assertEqual(applicant.client_identifier, self.user.identifier)

    def test_duplicate_application(self):
        self.apply()
        response = self.apply(email='lea@test.com')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'You have already applied for this job')

    def test_applicant_reused_across_jobs(self):
        other_job = TestDataFactory.create_job(self.board, title='Stocker')
        self.apply()
        response = self.apply(job=other_job, phone='09170000000')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Applicant.objects.count(), 1)
        self.assertEqual(Applicant.objects.get().phone, '09170000000')
        self.assertEqual(JobApplication.objects.count(), 2)

    def test_draft_job_not_found(self):
        draft = TestDataFactory.create_job(self.board, status='draft')
        self.assertEqual(self.apply(job=draft).status_code, status.HTTP_404_NOT_FOUND)

    def test_deadline(self):
        today = timezone.localdate()
        self.job.application_deadline = today
        self.job.save()
        self.assertEqual(self.apply().status_code, status.HTTP_201_CREATED)

        late_job = TestDataFactory.create_job(self.board, application_deadline=today - timedelta(days=1))
        response = self.apply(job=late_job)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'The application deadline has passed')

    def test_invalid_email(self):
        self.assertEqual(self.apply(email='not-an-email').status_code, status.HTTP_400_BAD_REQUEST)
