"""
Tests for courses, lessons, enrollments and progress tracking
"""
from decimal import Decimal
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.courses.models import Enrollment, Lesson
from bizbox.courses.services import calculate_progress


class CalculateProgressTests(SimpleTestCase):

    def test_rounding(self):
        self.assertEqual(calculate_progress(1, 3), Decimal('33.33'))
        self.assertEqual(calculate_progress(2, 3), Decimal('66.67'))
        self.assertEqual(calculate_progress(1, 8), Decimal('12.50'))

    def test_no_lessons(self):
        self.assertEqual(calculate_progress(0, 0), Decimal('0.00'))


class CourseAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_course(self):
        response = self.client.post('/api/v1/courses/', {'title': 'Food Safety 101', 'price': '499.00'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'draft')

    def test_negative_price(self):
        response = self.client.post('/api/v1/courses/', {'title': 'Bad', 'price': '-1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_lessons_are_appended_in_order(self):
        course = TestDataFactory.create_course(self.user, lessons=2)
        response = self.client.post(f'/api/v1/courses/{course.id}/lessons/', {'title': 'Wrap up'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['order'], 2)

        response = self.client.get(f'/api/v1/courses/{course.id}/')
        self.assertEqual([lesson['title'] for lesson in response.data['lessons']],
                         ['Lesson 1', 'Lesson 2', 'Wrap up'])
        self.assertEqual(response.data['lesson_count'], 3)

    def test_other_tenant_course_not_found(self):
        course = TestDataFactory.create_course(TestDataFactory.create_user())
        self.assertEqual(self.client.get(f'/api/v1/courses/{course.id}/').status_code, status.HTTP_404_NOT_FOUND)


class EnrollmentTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.course = TestDataFactory.create_course(self.user, certificate_enabled=True, lessons=3)
        self.lessons = list(self.course.lessons.all())
        self.contact = TestDataFactory.create_contact(self.user)

    def enroll(self, course=None, contact=None):
        course = course or self.course
        return self.client.post(f'/api/v1/courses/{course.id}/enrollments/',
                                {'contact_id': (contact or self.contact).id}, format='json')

    def lesson_url(self, enrollment_id, lesson, action):
        return f'/api/v1/enrollments/{enrollment_id}/lessons/{lesson.id}/{action}/'

    def test_enroll(self):
        response = self.enroll()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'active')
        self.assertEqual(response.data['progress_percentage'], '0.00')

    def test_enroll_twice(self):
        self.enroll()
        response = self.enroll()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Contact is already enrolled in this course')

    def test_draft_course_closed(self):
        draft = TestDataFactory.create_course(self.user, status='draft')
        self.assertEqual(self.enroll(course=draft).status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_tenant_contact(self):
        foreign = TestDataFactory.create_contact(TestDataFactory.create_user())
        self.assertEqual(self.enroll(contact=foreign).status_code, status.HTTP_404_NOT_FOUND)

    def test_progress_and_certificate(self):
        enrollment_id = self.enroll().data['id']

        response = self.client.post(self.lesson_url(enrollment_id, self.lessons[0], 'start'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['lessons'][0]['status'], 'in_progress')
        self.assertEqual(response.data['lessons'][1]['status'], 'not_started')

        response = self.client.post(self.lesson_url(enrollment_id, self.lessons[0], 'complete'))
        self.assertEqual(response.data['progress_percentage'], '33.33')
        self.assertEqual(response.data['lessons_completed'], 1)

        # Completing the same lesson again does not count twice
        response = self.client.post(self.lesson_url(enrollment_id, self.lessons[0], 'complete'))
        self.assertEqual(response.data['lessons_completed'], 1)

        self.client.post(self.lesson_url(enrollment_id, self.lessons[1], 'complete'))
        response = self.client.post(self.lesson_url(enrollment_id, self.lessons[2], 'complete'))
        self.assertEqual(response.data['progress_percentage'], '100.00')
        self.assertEqual(response.data['status'], 'completed')
        self.assertIsNotNone(response.data['completed_at'])
        self.assertIsNotNone(response.data['certificate_issued_at'])

    def test_no_certificate_when_disabled(self):
        course = TestDataFactory.create_course(self.user, certificate_enabled=False, lessons=1)
        enrollment_id = self.enroll(course=course).data['id']
        response = self.client.post(self.lesson_url(enrollment_id, course.lessons.get(), 'complete'))
        self.assertEqual(response.data['status'], 'completed')
        self.assertIsNone(response.data['certificate_issued_at'])

    def test_start_does_not_reopen_completed_lesson(self):
        enrollment_id = self.enroll().data['id']
        self.client.post(self.lesson_url(enrollment_id, self.lessons[0], 'complete'))
        response = self.client.post(self.lesson_url(enrollment_id, self.lessons[0], 'start'))
        self.assertEqual(response.data['lessons'][0]['status'], 'completed')

    def test_lesson_of_another_course(self):
        enrollment_id = self.enroll().data['id']
        other = TestDataFactory.create_course(self.user, lessons=1)
        response = self.client.post(self.lesson_url(enrollment_id, other.lessons.get(), 'complete'))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_adding_lesson_lowers_progress(self):
        enrollment_id = self.enroll().data['id']
        for lesson in self.lessons:
            self.client.post(self.lesson_url(enrollment_id, lesson, 'complete'))
        self.client.post(f'/api/v1/courses/{self.course.id}/lessons/', {'title': 'Bonus'}, format='json')
        enrollment = Enrollment.objects.get(pk=enrollment_id)
        self.assertEqual(enrollment.progress_percentage, Decimal('75.00'))
        self.assertEqual(enrollment.status, 'completed')

    def test_deleting_lesson_recalculates(self):
        enrollment_id = self.enroll().data['id']
        self.client.post(self.lesson_url(enrollment_id, self.lessons[0], 'complete'))
        self.client.delete(f'/api/v1/lessons/{self.lessons[2].id}/')
        enrollment = Enrollment.objects.get(pk=enrollment_id)
        self.assertEqual(enrollment.progress_percentage, Decimal('50.00'))
        self.assertFalse(Lesson.objects.filter(pk=self.lessons[2].id).exists())

    def test_cancel_and_reenroll(self):
        enrollment_id = self.enroll().data['id']
        response = self.client.delete(f'/api/v1/enrollments/{enrollment_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

        response = self.client.post(self.lesson_url(enrollment_id, self.lessons[0], 'start'))
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        response = self.enroll()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['id'], enrollment_id)
        self.assertEqual(response.data['status'], 'active')
