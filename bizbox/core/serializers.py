from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, Setting, AuditLog


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'contact_number', 'identifier',
                  'app_currency', 'is_active', 'is_staff', 'created_at', 'updated_at']
        read_only_fields = ['identifier', 'is_active', 'is_staff', 'created_at', 'updated_at']

    def validate_app_currency(self, value):
        required = {'code', 'symbol', 'thousands_separator', 'decimal_separator'}
        if not isinstance(value, dict) or not required.issubset(value):
            raise serializers.ValidationError(
                f"app_currency must define {', '.join(sorted(required))}"
            )
        return value


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'contact_number']

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        user = User(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        return user


class SettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Setting
        fields = ['id', 'key', 'value', 'description', 'updated_at']


class AuditLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'username', 'action', 'model_name', 'object_id', 'object_name',
                  'object_reference', 'changes', 'ip_address', 'created_at']


class TenantScopedModelSerializer(serializers.ModelSerializer):
    """
    Rejects related objects owned by another tenant.

    Views pass ``context={'client_identifier': ...}``; every field listed in
    ``tenant_fields`` must point at a row with the same client_identifier.
    """
    tenant_fields = ()

    def validate(self, attrs):
        attrs = super().validate(attrs)
        tenant = self.context.get('client_identifier')
        if tenant:
            for field in self.tenant_fields:
                related = attrs.get(field)
                if related is not None and related.client_identifier != tenant:
                    raise serializers.ValidationError({field: ['Invalid pk - object does not exist.']})
        return attrs
