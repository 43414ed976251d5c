"""
Tests for subdomain redirects: host parsing, the middleware, caching and staff endpoints
"""
from django.core.cache import cache
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework import status
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.redirects.models import SubdomainRedirect
from bizbox.redirects.services import subdomain_from_host, resolve


@override_settings(BIZBOX_BASE_DOMAIN='bizbox.test')
class SubdomainFromHostTests(SimpleTestCase):

    def test_single_label(self):
        self.assertEqual(subdomain_from_host('shop.bizbox.test'), 'shop')
        self.assertEqual(subdomain_from_host('Shop.BizBox.Test:8000'), 'shop')

    def test_not_a_subdomain(self):
        for host in ('bizbox.test', 'example.com', 'a.b.bizbox.test', 'notbizbox.test', '[::1]:8000', ''):
            self.assertIsNone(subdomain_from_host(host), host)


@override_settings(BIZBOX_BASE_DOMAIN='bizbox.test', ALLOWED_HOSTS=['.bizbox.test', 'testserver'])
class SubdomainRedirectMiddlewareTests(TestCase):

    def setUp(self):
        cache.clear()
        SubdomainRedirect.objects.create(subdomain='promo', destination_url='https://example.com/sale',
                                         http_status=301)
        SubdomainRedirect.objects.create(subdomain='docs', destination_url='/help/')
        SubdomainRedirect.objects.create(subdomain='old', destination_url='https://example.com/',
                                         is_active=False)

    def test_absolute_destination(self):
        response = self.client.get('/', HTTP_HOST='promo.bizbox.test')
        self.assertEqual(response.status_code, 301)
        self.assertEqual(response['Location'], 'https://example.com/sale')

    def test_relative_destination_uses_apex(self):
        response = self.client.get('/anything/', HTTP_HOST='docs.bizbox.test')
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response['Location'], 'http://bizbox.test/help/')

    def test_inactive_and_unknown_pass_through(self):
        for host in ('old.bizbox.test', 'nobody.bizbox.test', 'bizbox.test'):
            response = self.client.get('/api/v1/auth/me/', HTTP_HOST=host)
            self.assertEqual(response.status_code, 401, host)

    def test_lookup_cache_invalidated_on_change(self):
        self.assertIsNone(resolve('fresh.bizbox.test'))
        with self.captureOnCommitCallbacks(execute=True):
            SubdomainRedirect.objects.create(subdomain='fresh', destination_url='https://example.com/new')
        self.assertEqual(resolve('fresh.bizbox.test'), ('https://example.com/new', 302))

        redirect = SubdomainRedirect.objects.get(subdomain='fresh')
        with self.captureOnCommitCallbacks(execute=True):
            redirect.subdomain = 'renamed'
            redirect.save()
        self.assertIsNone(resolve('fresh.bizbox.test'))
        self.assertEqual(resolve('renamed.bizbox.test'), ('https://example.com/new', 302))

        with self.captureOnCommitCallbacks(execute=True):
            redirect.delete()
        self.assertIsNone(resolve('renamed.bizbox.test'))


class SubdomainRedirectAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(is_staff=True))

    def create(self, **data):
        payload = {'subdomain': 'promo', 'destination_url': 'https://example.com/'}
        payload.update(data)
        return self.client.post('/api/v1/subdomain-redirects/', payload, format='json')

    def test_staff_only(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        self.assertEqual(self.create().status_code, status.HTTP_403_FORBIDDEN)

    def test_create_lowercases_subdomain(self):
        response = self.create(subdomain='Promo', http_status=308)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['subdomain'], 'promo')
        self.assertEqual(response.data['http_status'], 308)

    def test_invalid_subdomains(self):
        for subdomain in ('www', 'api', '-bad', 'has.dot', 'under_score'):
            response = self.create(subdomain=subdomain)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, subdomain)

    def test_duplicate_subdomain(self):
        self.create()
        response = self.create()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['subdomain'], ['A redirect for this subdomain already exists.'])

    def test_destination_validation(self):
        self.assertEqual(self.create(destination_url='/landing/').status_code, status.HTTP_201_CREATED)
        for destination in ('//evil.example', 'ftp://example.com', 'not a url'):
            response = self.create(subdomain='other', destination_url=destination)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, destination)

    def test_unsupported_status(self):
        self.assertEqual(self.create(http_status=303).status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_and_update(self):
        redirect_id = self.create().data['id']
        response = self.client.get('/api/v1/subdomain-redirects/', {'search': 'prom'})
        self.assertEqual(len(response.data['redirects']), 1)
        self.assertIn(301, [option['value'] for option in response.data['status_options']])

        response = self.client.patch(f'/api/v1/subdomain-redirects/{redirect_id}/', {'is_active': False},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])
