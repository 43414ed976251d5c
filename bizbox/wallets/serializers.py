from decimal import Decimal
from rest_framework import serializers
from .models import Wallet, WalletTransaction


class WalletSerializer(serializers.ModelSerializer):
    contact_name = serializers.CharField(source='contact.full_name', read_only=True)
    contact_number = serializers.CharField(source='contact.contact_number', read_only=True)

    class Meta:
        model = Wallet
        fields = ['id', 'contact', 'contact_name', 'contact_number', 'balance', 'currency', 'created_at', 'updated_at']
        read_only_fields = fields


class WalletTransactionSerializer(serializers.ModelSerializer):
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = WalletTransaction
        fields = ['id', 'transaction_type', 'status', 'amount', 'reference', 'description', 'balance_after',
                  'transaction_at', 'created_by', 'created_by_username']
        read_only_fields = fields


class AmountSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    description = serializers.CharField(required=False, allow_blank=True, default='')


class TransferSerializer(AmountSerializer):
    from_contact = serializers.IntegerField()
    to_contact = serializers.IntegerField()

    def validate(self, attrs):
        if attrs['from_contact'] == attrs['to_contact']:
            raise serializers.ValidationError({'to_contact': ['Cannot transfer to the same contact.']})
        return attrs


class TopUpSerializer(AmountSerializer):
    contact_number = serializers.CharField(max_length=20)
