from rest_framework import serializers
from .models import Contact


class ContactSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Contact
        fields = ['id', 'first_name', 'last_name', 'full_name', 'email', 'contact_number', 'address', 'notes',
                  'created_at', 'updated_at']
