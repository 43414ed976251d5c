from rest_framework import serializers
from .models import FamilyMember, FamilyRelationship, EditRequest

IMPORT_MODES = ('skip', 'update', 'duplicate')


def validate_life_dates(attrs, instance=None):
    birth_date = attrs.get('birth_date', getattr(instance, 'birth_date', None))
    death_date = attrs.get('death_date', getattr(instance, 'death_date', None))
    if birth_date and death_date and death_date <= birth_date:
        raise serializers.ValidationError({'death_date': ['Date of death must be after the date of birth.']})
    return attrs


class RelationshipSerializer(serializers.ModelSerializer):
    to_member_name = serializers.CharField(source='to_member.full_name', read_only=True)

    class Meta:
        model = FamilyRelationship
        fields = ['id', 'from_member', 'to_member', 'to_member_name', 'relationship_type', 'created_at']
        read_only_fields = fields


class FamilyMemberSerializer(serializers.ModelSerializer):
    relationships = RelationshipSerializer(many=True, read_only=True)
    is_living = serializers.BooleanField(read_only=True)

    class Meta:
        model = FamilyMember
        fields = ['id', 'first_name', 'last_name', 'birth_date', 'death_date', 'gender', 'photo_url', 'notes',
                  'is_living', 'relationships', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        return validate_life_dates(attrs, self.instance)


class AddRelationshipSerializer(serializers.Serializer):
    from_member_id = serializers.IntegerField()
    to_member_id = serializers.IntegerField()
    relationship_type = serializers.ChoiceField(choices=FamilyRelationship.RELATIONSHIP_CHOICES)


class ImportRelationshipSerializer(serializers.Serializer):
    to_member_import_id = serializers.CharField()
    relationship_type = serializers.ChoiceField(choices=FamilyRelationship.RELATIONSHIP_CHOICES)


class ImportMemberSerializer(serializers.Serializer):
    import_id = serializers.CharField()
    first_name = serializers.CharField(max_length=255)
    last_name = serializers.CharField(max_length=255)
    birth_date = serializers.DateField(required=False, allow_null=True)
    death_date = serializers.DateField(required=False, allow_null=True)
    gender = serializers.ChoiceField(choices=FamilyMember.GENDER_CHOICES)
    photo_url = serializers.URLField(max_length=1000, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    relationships = ImportRelationshipSerializer(many=True, required=False)

    def validate(self, attrs):
        return validate_life_dates(attrs)


class ImportSerializer(serializers.Serializer):
    family_members = ImportMemberSerializer(many=True)
    import_mode = serializers.ChoiceField(choices=IMPORT_MODES, default='skip')


class EditRequestSerializer(serializers.ModelSerializer):
    member_name = serializers.CharField(source='member.full_name', read_only=True)

    class Meta:
        model = EditRequest
        fields = ['id', 'member', 'member_name', 'first_name', 'last_name', 'birth_date', 'death_date', 'gender',
                  'photo_url', 'notes', 'requester_name', 'requester_email', 'status', 'reviewed_at', 'created_at']
        read_only_fields = fields


class EditRequestCreateSerializer(serializers.Serializer):
    member_id = serializers.IntegerField()
    first_name = serializers.CharField(max_length=255)
    last_name = serializers.CharField(max_length=255)
    birth_date = serializers.DateField()
    death_date = serializers.DateField(required=False, allow_null=True)
    gender = serializers.ChoiceField(choices=FamilyMember.GENDER_CHOICES)
    photo_url = serializers.URLField(max_length=1000, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    requester_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    requester_email = serializers.EmailField(required=False, allow_blank=True)

    def validate(self, attrs):
        return validate_life_dates(attrs)


class PublicFamilyMemberSerializer(serializers.ModelSerializer):
    relationships = serializers.SerializerMethodField()

    class Meta:
        model = FamilyMember
        fields = ['id', 'first_name', 'last_name', 'birth_date', 'death_date', 'gender', 'photo_url', 'notes',
                  'relationships']

    def get_relationships(self, obj):
        return [{'to_member': rel.to_member_id, 'relationship_type': rel.relationship_type}
                for rel in obj.relationships.all()]
