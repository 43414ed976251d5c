from django.contrib.auth.hashers import make_password
from django.utils import timezone
from rest_framework import serializers
from .models import TeamMember, ROLE_CHOICES, APP_CHOICES


class TeamMemberSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8, required=False)
    roles = serializers.ListField(child=serializers.ChoiceField(choices=ROLE_CHOICES), allow_empty=False)
    allowed_apps = serializers.ListField(child=serializers.ChoiceField(choices=APP_CHOICES), required=False)
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = TeamMember
        fields = ['id', 'identifier', 'first_name', 'last_name', 'full_name', 'email', 'contact_number',
                  'password', 'roles', 'allowed_apps', 'is_active', 'notes', 'timezone', 'language',
                  'last_password_change', 'created_at', 'updated_at']
        read_only_fields = ['identifier', 'is_active', 'last_password_change']

    def validate_email(self, value):
        value = value.lower()
        queryset = TeamMember.objects.filter(client_identifier=self.context.get('client_identifier'), email=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('A team member with this email already exists.')
        return value

    def validate(self, attrs):
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({'password': ['This field is required.']})
        # Keep lists ordered and free of duplicates
        for field in ('roles', 'allowed_apps'):
            if field in attrs:
                attrs[field] = list(dict.fromkeys(attrs[field]))
        return attrs

    def create(self, validated_data):
        validated_data['password'] = make_password(validated_data['password'])
        validated_data['last_password_change'] = timezone.now()
        return super().create(validated_data)

    def update(self, instance, validated_data):
        if validated_data.get('password'):
            validated_data['password'] = make_password(validated_data['password'])
            validated_data['last_password_change'] = timezone.now()
        return super().update(instance, validated_data)


class PasswordUpdateSerializer(serializers.Serializer):
    current_password = serializers.CharField()
    password = serializers.CharField(min_length=8)
    password_confirmation = serializers.CharField()

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirmation']:
            raise serializers.ValidationError({'password': ['The password confirmation does not match.']})
        return attrs
