import logging

from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from bizbox.core.exceptions import ServiceError, ConflictError
from .models import FamilyMember, FamilyRelationship

logger = logging.getLogger(__name__)

RECIPROCAL = {
    'parent': 'child',
    'child': 'parent',
    'spouse': 'spouse',
    'sibling': 'sibling',
}

MEMBER_FIELDS = ('first_name', 'last_name', 'birth_date', 'death_date', 'gender', 'photo_url', 'notes')


@transaction.atomic
def add_relationship(from_member, to_member, relationship_type):
    """Link two members of the same tree, storing the reciprocal edge too"""
    if from_member.pk == to_member.pk:
        raise ServiceError('A member cannot be related to themselves')
    if from_member.client_identifier != to_member.client_identifier:
        raise ServiceError('Both members must belong to the same family tree')
    if FamilyRelationship.objects.filter(
        from_member=from_member, to_member=to_member, relationship_type=relationship_type
    ).exists():
        raise ConflictError('Relationship already exists')

    relationship = FamilyRelationship.objects.create(
        from_member=from_member, to_member=to_member, relationship_type=relationship_type
    )
    FamilyRelationship.objects.get_or_create(
        from_member=to_member, to_member=from_member, relationship_type=RECIPROCAL[relationship_type]
    )
    logger.info(f"Relationship added: {from_member.id} {relationship_type} of {to_member.id}")
    return relationship


@transaction.atomic
def remove_relationship(relationship):
    FamilyRelationship.objects.filter(
        from_member_id=relationship.to_member_id,
        to_member_id=relationship.from_member_id,
        relationship_type=RECIPROCAL[relationship.relationship_type],
    ).delete()
    relationship.delete()


def export_tree(client_identifier):
    """Portable dump of a tree; members reference each other by `import_id`"""
    members = FamilyMember.objects.filter(client_identifier=client_identifier).prefetch_related('relationships')
    family_members = []
    for member in members:
        family_members.append({
            'import_id': str(member.id),
            'first_name': member.first_name,
            'last_name': member.last_name,
            'birth_date': member.birth_date.isoformat() if member.birth_date else None,
            'death_date': member.death_date.isoformat() if member.death_date else None,
            'gender': member.gender,
            'photo_url': member.photo_url,
            'notes': member.notes,
            'relationships': [
                {'to_member_import_id': str(rel.to_member_id), 'relationship_type': rel.relationship_type}
                for rel in member.relationships.all()
            ],
        })
    return {'exported_at': timezone.now().isoformat(), 'family_members': family_members}


def find_existing(client_identifier, data):
    return FamilyMember.objects.filter(
        client_identifier=client_identifier,
        first_name__iexact=data['first_name'],
        last_name__iexact=data['last_name'],
        birth_date=data.get('birth_date'),
    ).first()


@transaction.atomic
def import_tree(client_identifier, family_members, mode='skip'):
    """
    Load an exported tree. Existing members are matched by name and birth
    date; `mode` decides whether a match is kept as is (skip), overwritten
    (update) or ignored so a new member is created (duplicate).
    """
    result = {'created': 0, 'updated': 0, 'skipped': 0, 'relationships_created': 0}
    by_import_id = {}

    for data in family_members:
        fields = {field: data[field] for field in MEMBER_FIELDS if field in data and data[field] is not None}
        existing = None if mode == 'duplicate' else find_existing(client_identifier, data)

        if existing is None:
            member = FamilyMember.objects.create(client_identifier=client_identifier, **fields)
            result['created'] += 1
        elif mode == 'update':
            for field, value in fields.items():
                setattr(existing, field, value)
            existing.save()
            member = existing
            result['updated'] += 1
        else:
            member = existing
            result['skipped'] += 1
        by_import_id[str(data['import_id'])] = member

    for data in family_members:
        from_member = by_import_id[str(data['import_id'])]
        for rel in data.get('relationships') or []:
            to_member = by_import_id.get(str(rel['to_member_import_id']))
            if to_member is None or to_member.pk == from_member.pk:
                continue
            _, created = FamilyRelationship.objects.get_or_create(
                from_member=from_member, to_member=to_member, relationship_type=rel['relationship_type']
            )
            FamilyRelationship.objects.get_or_create(
                from_member=to_member, to_member=from_member,
                relationship_type=RECIPROCAL[rel['relationship_type']]
            )
            if created:
                result['relationships_created'] += 1

    logger.info(f"Family tree imported for {client_identifier}: {result}")
    return result


def visualization_data(client_identifier):
    """Nodes and undirected-once edges for drawing the tree"""
    members = FamilyMember.objects.filter(client_identifier=client_identifier)
    nodes = [{
        'id': member.id,
        'name': member.full_name,
        'gender': member.gender,
        'birth_date': member.birth_date,
        'death_date': member.death_date,
        'is_living': member.is_living,
        'photo_url': member.photo_url,
    } for member in members]

    relationships = FamilyRelationship.objects.filter(from_member__client_identifier=client_identifier).filter(
        Q(relationship_type='parent') | Q(relationship_type__in=('spouse', 'sibling'), from_member__lt=F('to_member'))
    )
    edges = [{'from': rel.from_member_id, 'to': rel.to_member_id, 'type': rel.relationship_type}
             for rel in relationships]
    return {'nodes': nodes, 'edges': edges}


def widget_stats(client_identifier):
    members = FamilyMember.objects.filter(client_identifier=client_identifier)
    return {
        'total_members': members.count(),
        'living_members': members.filter(death_date__isnull=True).count(),
        'deceased_members': members.filter(death_date__isnull=False).count(),
        'male_members': members.filter(gender='male').count(),
        'female_members': members.filter(gender='female').count(),
        'other_members': members.filter(gender='other').count(),
    }


def review_edit_request(edit_request, accept):
    if edit_request.status != 'pending':
        raise ConflictError(f'Edit request is already {edit_request.status}')

    with transaction.atomic():
        if accept:
            member = edit_request.member
            for field in MEMBER_FIELDS:
                if field == 'photo_url' and not edit_request.photo_url:
                    continue
                setattr(member, field, getattr(edit_request, field))
            member.save()
        edit_request.status = 'accepted' if accept else 'rejected'
        edit_request.reviewed_at = timezone.now()
        edit_request.save(update_fields=['status', 'reviewed_at'])
    logger.info(f"Edit request {edit_request.id} {edit_request.status} for member {edit_request.member_id}")
    return edit_request
