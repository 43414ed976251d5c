from rest_framework import serializers
from .models import SubscriptionPlan, UserSubscription


class SubscriptionPlanSerializer(serializers.ModelSerializer):
    active_subscribers = serializers.SerializerMethodField()

    class Meta:
        model = SubscriptionPlan
        fields = ['id', 'name', 'slug', 'description', 'price', 'duration_in_days', 'credits_per_month', 'features',
                  'is_popular', 'is_active', 'badge_text', 'active_subscribers', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_active_subscribers(self, obj):
        return obj.subscriptions.filter(status='active').count()

    def validate_features(self, value):
        if not isinstance(value, list) or not all(isinstance(feature, str) for feature in value):
            raise serializers.ValidationError('Features must be a list of strings.')
        return value


class UserSubscriptionSerializer(serializers.ModelSerializer):
    plan = SubscriptionPlanSerializer(read_only=True)
    username = serializers.CharField(source='user.username', read_only=True)

    class Meta:
        model = UserSubscription
        fields = ['id', 'identifier', 'username', 'plan', 'start_date', 'end_date', 'status', 'payment_method',
                  'payment_reference', 'amount_paid', 'auto_renew', 'cancellation_reason', 'cancelled_at',
                  'created_at', 'updated_at']
        read_only_fields = fields


class SubscribeSerializer(serializers.Serializer):
    plan_id = serializers.IntegerField()
    payment_method = serializers.ChoiceField(choices=UserSubscription.PAYMENT_METHOD_CHOICES, default='cash')
    auto_renew = serializers.BooleanField(default=False)


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
