"""
Tests for family members, relationships, import/export and public edit requests
"""
from datetime import date
from django.test import TestCase
from rest_framework import status
from bizbox.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizbox.genealogy.models import FamilyMember, FamilyRelationship, EditRequest


class FamilyMemberAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_member(self):
        response = self.client.post('/api/v1/family-members/', {
            'first_name': 'Jose', 'last_name': 'Santos', 'gender': 'male', 'birth_date': '1950-03-01'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_living'])
        self.assertEqual(response.data['relationships'], [])

    def test_death_before_birth_rejected(self):
        response = self.client.post('/api/v1/family-members/', {
            'first_name': 'Jose', 'last_name': 'Santos', 'gender': 'male',
            'birth_date': '1950-03-01', 'death_date': '1949-12-31'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('death_date', response.data)

    def test_invalid_gender(self):
        response = self.client.post('/api/v1/family-members/', {
            'first_name': 'Jose', 'last_name': 'Santos', 'gender': 'unknown'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_tenant_member_not_found(self):
        member = TestDataFactory.create_family_member(TestDataFactory.create_user())
        response = self.client.get(f'/api/v1/family-members/{member.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_widget_stats(self):
        TestDataFactory.create_family_member(self.user, gender='male')
        TestDataFactory.create_family_member(self.user, gender='female', birth_date=date(1920, 1, 1),
                                             death_date=date(1990, 1, 1))
        response = self.client.get('/api/v1/family-tree/widget-stats/')
        self.assertEqual(response.data['total_members'], 2)
        self.assertEqual(response.data['living_members'], 1)
        self.assertEqual(response.data['deceased_members'], 1)
        self.assertEqual(response.data['female_members'], 1)


class RelationshipTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.father = TestDataFactory.create_family_member(self.user, first_name='Jose')
        self.son = TestDataFactory.create_family_member(self.user, first_name='Miguel')

    def relate(self, from_member, to_member, relationship_type):
        return self.client.post('/api/v1/family-relationships/', {
            'from_member_id': from_member.id, 'to_member_id': to_member.id, 'relationship_type': relationship_type
        }, format='json')

    def test_reciprocal_created(self):
        response = self.relate(self.father, self.son, 'parent')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(FamilyRelationship.objects.filter(
            from_member=self.son, to_member=self.father, relationship_type='child'
        ).exists())

    def test_duplicate_relationship(self):
        self.relate(self.father, self.son, 'parent')
        response = self.relate(self.father, self.son, 'parent')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_self_relationship_rejected(self):
        response = self.relate(self.father, self.father, 'sibling')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_tenant_member(self):
        stranger = TestDataFactory.create_family_member(TestDataFactory.create_user())
        response = self.relate(self.father, stranger, 'spouse')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_removes_reciprocal(self):
        relationship_id = self.relate(self.father, self.son, 'parent').data['id']
        response = self.client.delete(f'/api/v1/family-relationships/{relationship_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(FamilyRelationship.objects.count(), 0)

    def test_visualization_lists_each_link_once(self):
        wife = TestDataFactory.create_family_member(self.user, first_name='Maria', gender='female')
        self.relate(self.father, self.son, 'parent')
        self.relate(self.father, wife, 'spouse')
        response = self.client.get('/api/v1/family-tree/visualization/')
        self.assertEqual(len(response.data['nodes']), 3)
        self.assertEqual(sorted(edge['type'] for edge in response.data['edges']), ['parent', 'spouse'])


class ImportExportTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def payload(self, mode, notes='Imported'):
        return {
            'import_mode': mode,
            'family_members': [
                {'import_id': 'a', 'first_name': 'Jose', 'last_name': 'Santos', 'gender': 'male',
                 'birth_date': '1950-03-01', 'notes': notes,
                 'relationships': [{'to_member_import_id': 'b', 'relationship_type': 'parent'}]},
                {'import_id': 'b', 'first_name': 'Miguel', 'last_name': 'Santos', 'gender': 'male',
                 'birth_date': '1980-07-15', 'relationships': []},
            ],
        }

    def test_import_creates_members_and_links(self):
        response = self.client.post('/api/v1/family-tree/import/', self.payload('skip'), format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['created'], 2)
        self.assertEqual(response.data['relationships_created'], 1)
        miguel = FamilyMember.objects.get(first_name='Miguel')
        self.assertEqual(miguel.relationships.get().relationship_type, 'child')

    def test_import_modes(self):
        self.client.post('/api/v1/family-tree/import/', self.payload('skip'), format='json')

        response = self.client.post('/api/v1/family-tree/import/', self.payload('skip', notes='Changed'),
                                    format='json')
        self.assertEqual(response.data['skipped'], 2)
        self.assertEqual(FamilyMember.objects.get(first_name='Jose').notes, 'Imported')

        response = self.client.post('/api/v1/family-tree/import/', self.payload('update', notes='Changed'),
                                    format='json')
        self.assertEqual(response.data['updated'], 2)
        self.assertEqual(FamilyMember.objects.get(first_name='Jose').notes, 'Changed')

        response = self.client.post('/api/v1/family-tree/import/', self.payload('duplicate'), format='json')
        self.assertEqual(response.data['created'], 2)
        self.assertEqual(FamilyMember.objects.filter(client_identifier=self.user.identifier).count(), 4)

    def test_export_feeds_import(self):
        self.client.post('/api/v1/family-tree/import/', self.payload('skip'), format='json')
        exported = self.client.get('/api/v1/family-tree/export/').data
        self.assertEqual(len(exported['family_members']), 2)

        other = TestDataFactory.create_user()
        self.client.authenticate_user(other)
        response = self.client.post('/api/v1/family-tree/import/', {
            'import_mode': 'skip', 'family_members': exported['family_members']
        }, format='json')
        self.assertEqual(response.data['created'], 2)
        self.assertEqual(response.data['relationships_created'], 1)
        self.assertEqual(FamilyRelationship.objects.filter(from_member__client_identifier=other.identifier).count(), 2)


class PublicTreeTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.member = TestDataFactory.create_family_member(self.user, first_name='Jose')
        self.client = AuthenticatedAPIClient()

    def test_public_tree(self):
        response = self.client.get(f'/api/v1/public/family-tree/{self.user.identifier}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['first_name'], 'Jose')

    def test_unknown_tree(self):
        response = self.client.get('/api/v1/public/family-tree/nobody/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def request_edit(self, member_id=None):
        return self.client.post(f'/api/v1/public/family-tree/{self.user.identifier}/edit-requests/', {
            'member_id': member_id or self.member.id, 'first_name': 'Joseph', 'last_name': 'Santos',
            'birth_date': '1951-03-01', 'gender': 'male', 'requester_name': 'Cousin Ana'
        }, format='json')

    def test_edit_request_accepted(self):
        response = self.request_edit()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        request_id = response.data['id']

        self.client.authenticate_user(self.user)
        response = self.client.post(f'/api/v1/family-edit-requests/{request_id}/accept/')
        self.assertEqual(response.data['status'], 'accepted')
        self.member.refresh_from_db()
        self.assertEqual(self.member.first_name, 'Joseph')
        self.assertEqual(self.member.birth_date, date(1951, 3, 1))

        response = self.client.post(f'/api/v1/family-edit-requests/{request_id}/reject/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_edit_request_rejected(self):
        request_id = self.request_edit().data['id']
        self.client.authenticate_user(self.user)
        self.client.post(f'/api/v1/family-edit-requests/{request_id}/reject/')
        self.member.refresh_from_db()
        self.assertEqual(self.member.first_name, 'Jose')
        self.assertEqual(EditRequest.objects.get(pk=request_id).status, 'rejected')

    def test_edit_request_for_member_of_another_tree(self):
        stranger = TestDataFactory.create_family_member(TestDataFactory.create_user())
        response = self.request_edit(member_id=stranger.id)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
