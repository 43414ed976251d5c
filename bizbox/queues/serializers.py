from django.utils import timezone
from rest_framework import serializers
from .models import QueueType, QueueNumber


class QueueNumberSerializer(serializers.ModelSerializer):
    queue_type_name = serializers.CharField(source='queue_type.name', read_only=True)

    class Meta:
        model = QueueNumber
        fields = ['id', 'queue_type', 'queue_type_name', 'queue_number', 'customer_name', 'customer_contact',
                  'status', 'notes', 'called_at', 'serving_at', 'completed_at', 'created_at']
        read_only_fields = ['queue_type', 'queue_number', 'status', 'called_at', 'serving_at', 'completed_at',
                            'created_at']


class QueueTypeSerializer(serializers.ModelSerializer):
    waiting_count = serializers.SerializerMethodField()

    class Meta:
        model = QueueType
        fields = ['id', 'name', 'description', 'prefix', 'current_number', 'is_active', 'waiting_count',
                  'created_at', 'updated_at']
        read_only_fields = ['current_number', 'created_at', 'updated_at']

    def get_waiting_count(self, obj):
        return obj.queue_numbers.filter(status='waiting').count()

    def validate_prefix(self, value):
        value = value.strip().upper()
        if not value.isalnum():
            raise serializers.ValidationError('Prefix must be letters or digits.')
        return value


class QueueTypeDetailSerializer(QueueTypeSerializer):
    """Queue type with the numbers issued today"""
    queue_numbers = serializers.SerializerMethodField()

    class Meta(QueueTypeSerializer.Meta):
        fields = QueueTypeSerializer.Meta.fields + ['queue_numbers']

    def get_queue_numbers(self, obj):
        numbers = obj.queue_numbers.filter(created_at__date=timezone.localdate())
        return QueueNumberSerializer(numbers, many=True).data


class IssueNumberSerializer(serializers.Serializer):
    customer_name = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    customer_contact = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')


class DisplayNumberSerializer(serializers.ModelSerializer):
    queue_type_name = serializers.CharField(source='queue_type.name', read_only=True)

    class Meta:
        model = QueueNumber
        fields = ['id', 'queue_type', 'queue_type_name', 'queue_number', 'customer_name', 'status',
                  'called_at', 'serving_at', 'created_at']
