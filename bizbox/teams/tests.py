"""
Tests for team members and role based permissions
"""
from django.contrib.auth.hashers import check_password
from django.test import TestCase
from rest_framework import status
from bizbox.core.models import AuditLog
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.teams.models import TeamMember


class TeamMemberAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def member_payload(self, roles, email='staff@test.com'):
        return {
            'first_name': 'Ana',
            'last_name': 'Santos',
            'email': email,
            'password': 'memberpass123',
            'roles': roles,
        }

    def test_first_member_must_be_admin(self):
        response = self.client.post('/api/v1/team-members/', self.member_payload(['user']), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post('/api/v1/team-members/', self.member_payload(['admin']), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('password', response.data)
        member = TeamMember.objects.get(pk=response.data['id'])
        self.assertTrue(check_password('memberpass123', member.password))
        self.assertTrue(AuditLog.objects.filter(action='team_change', object_id=str(member.id)).exists())

    def test_duplicate_email_rejected(self):
        TestDataFactory.create_team_member(self.user, roles=['admin'], email='staff@test.com')
        response = self.client.post('/api/v1/team-members/', self.member_payload(['user'], 'STAFF@test.com'),
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_last_admin_cannot_be_removed(self):
        admin = TestDataFactory.create_team_member(self.user, roles=['admin'])

        response = self.client.delete(f'/api/v1/team-members/{admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(f'/api/v1/team-members/{admin.id}/', {'roles': ['user']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f'/api/v1/team-members/{admin.id}/toggle-status/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_removable_when_another_exists(self):
        admin = TestDataFactory.create_team_member(self.user, roles=['admin'])
        TestDataFactory.create_team_member(self.user, roles=['admin'])
        response = self.client.delete(f'/api/v1/team-members/{admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_toggle_status(self):
        TestDataFactory.create_team_member(self.user, roles=['admin'])
        member = TestDataFactory.create_team_member(self.user, roles=['user'])
        response = self.client.post(f'/api/v1/team-members/{member.id}/toggle-status/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])

    def test_reset_password(self):
        member = TestDataFactory.create_team_member(self.user, roles=['admin'])
        response = self.client.post(f'/api/v1/team-members/{member.id}/reset-password/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        temporary = response.data['temporary_password']
        self.assertEqual(len(temporary), 12)
        member.refresh_from_db()
        self.assertTrue(check_password(temporary, member.password))

    def test_update_password_checks_current(self):
        member = TestDataFactory.create_team_member(self.user, roles=['admin'])
        url = f'/api/v1/team-members/{member.id}/password/'
        response = self.client.post(url, {
            'current_password': 'wrong-password',
            'password': 'newpass12345',
            'password_confirmation': 'newpass12345',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {
            'current_password': 'memberpass123',
            'password': 'newpass12345',
            'password_confirmation': 'newpass12345',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        member.refresh_from_db()
        self.assertTrue(check_password('newpass12345', member.password))

    def test_other_tenant_member_not_found(self):
        member = TestDataFactory.create_team_member(TestDataFactory.create_user(), roles=['admin'])
        response = self.client.get(f'/api/v1/team-members/{member.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_options(self):
        response = self.client.get('/api/v1/team-members/options/')
        self.assertIn('admin', [role['value'] for role in response.data['roles']])


class TeamRolePermissionTests(TestCase):
    """Role checks applied through the X-Team-Member header"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(self.user)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_owner_has_every_role(self):
        response = self.client.delete(f'/api/v1/products/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_viewer_can_read_only(self):
        viewer = TestDataFactory.create_team_member(self.user, roles=['viewer'])
        self.client.as_team_member(viewer)
        self.assertEqual(self.client.get('/api/v1/products/').status_code, status.HTTP_200_OK)
        response = self.client.post('/api/v1/products/', {'name': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_user_role_edits_but_cannot_delete(self):
        member = TestDataFactory.create_team_member(self.user, roles=['user'])
        self.client.as_team_member(member)
        response = self.client.patch(f'/api/v1/products/{self.product.id}/', {'name': 'Renamed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.delete(f'/api/v1/products/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_manager_can_delete(self):
        manager = TestDataFactory.create_team_member(self.user, roles=['manager'])
        self.client.as_team_member(manager)
        response = self.client.delete(f'/api/v1/products/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_inactive_member_denied(self):
        manager = TestDataFactory.create_team_member(self.user, roles=['manager'], is_active=False)
        self.client.as_team_member(manager)
        response = self.client.delete(f'/api/v1/products/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_member_of_another_tenant_denied(self):
        outsider = TestDataFactory.create_team_member(TestDataFactory.create_user(), roles=['admin'])
        self.client.as_team_member(outsider)
        response = self.client.post('/api/v1/products/', {'name': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_only_admins_manage_team(self):
        manager = TestDataFactory.create_team_member(self.user, roles=['manager'])
        self.client.as_team_member(manager)
        response = self.client.post(f'/api/v1/team-members/{manager.id}/reset-password/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
