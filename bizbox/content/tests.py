"""
Tests for content posts and their public pages
"""
from django.test import TestCase
from rest_framework import status
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.content.models import Post


class PostAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def create(self, **overrides):
        payload = {'title': 'Summer Menu Launch', 'content': 'New dishes for summer.', 'author': 'Ana'}
        payload.update(overrides)
        return self.client.post('/api/v1/posts/', payload, format='json')

    def test_slug_generated_from_title(self):
        response = self.create()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['slug'], 'summer-menu-launch')
        self.assertEqual(response.data['status'], 'draft')
        self.assertIsNone(response.data['published_at'])

        self.assertEqual(self.create().data['slug'], 'summer-menu-launch-2')

    def test_explicit_slug_must_be_free(self):
        self.create(slug='launch')
        response = self.create(slug='launch')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('slug', response.data)

    def test_same_slug_in_another_tenant(self):
        TestDataFactory.create_post(TestDataFactory.create_user(), slug='launch')
        self.assertEqual(self.create(slug='launch').status_code, status.HTTP_201_CREATED)

    def test_excerpt_limit(self):
        response = self.create(excerpt='x' * 501)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_publish_sets_published_at_once(self):
        post_id = self.create().data['id']
        response = self.client.patch(f'/api/v1/posts/{post_id}/status/', {'status': 'published'}, format='json')
        self.assertEqual(response.data['status'], 'published')
        published_at = response.data['published_at']
        self.assertIsNotNone(published_at)

        self.client.patch(f'/api/v1/posts/{post_id}/status/', {'status': 'archived'}, format='json')
        response = self.client.patch(f'/api/v1/posts/{post_id}/status/', {'status': 'published'}, format='json')
        self.assertEqual(response.data['published_at'], published_at)

    def test_invalid_status(self):
        post_id = self.create().data['id']
        response = self.client.patch(f'/api/v1/posts/{post_id}/status/', {'status': 'live'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bulk_delete_only_own_posts(self):
        own = TestDataFactory.create_post(self.user)
        foreign = TestDataFactory.create_post(TestDataFactory.create_user())
        response = self.client.post('/api/v1/posts/bulk-delete/', {'ids': [own.id, foreign.id]}, format='json')
        self.assertEqual(response.data['deleted'], 1)
        self.assertTrue(Post.objects.filter(pk=foreign.id).exists())


class PublicContentTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.published = TestDataFactory.create_post(self.user, slug='open', status='published')
        self.draft = TestDataFactory.create_post(self.user, slug='hidden', status='draft')
        self.client = AuthenticatedAPIClient()

    def test_list_shows_published_only(self):
        response = self.client.get(f'/api/v1/public/content/{self.user.identifier}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([post['slug'] for post in response.data], ['open'])

    def test_detail(self):
        response = self.client.get(f'/api/v1/public/content/{self.user.identifier}/open/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn('status', response.data)

    def test_draft_not_public(self):
        response = self.client.get(f'/api/v1/public/content/{self.user.identifier}/hidden/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
