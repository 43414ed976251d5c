from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator
from rest_framework import serializers
from .models import SubdomainRedirect, RESERVED_SUBDOMAINS, subdomain_validator


class SubdomainRedirectSerializer(serializers.ModelSerializer):
    subdomain = serializers.CharField(max_length=63)

    class Meta:
        model = SubdomainRedirect
        fields = ['id', 'subdomain', 'destination_url', 'http_status', 'is_active', 'notes', 'created_at',
                  'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_subdomain(self, value):
        value = value.strip().lower()
        try:
            subdomain_validator(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.messages)
        if value in RESERVED_SUBDOMAINS:
            raise serializers.ValidationError(f'"{value}" is a reserved subdomain.')

        existing = SubdomainRedirect.objects.filter(subdomain=value)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError('A redirect for this subdomain already exists.')
        return value

    def validate_destination_url(self, value):
        value = value.strip()
        if value.startswith('/'):
            if value.startswith('//'):
                raise serializers.ValidationError('Enter a path or a full http(s) URL.')
            return value
        try:
            URLValidator(schemes=['http', 'https'])(value)
        except DjangoValidationError:
            raise serializers.ValidationError('Enter a path or a full http(s) URL.')
        return value
