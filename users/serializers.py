# users/serializers.py
from rest_framework import serializers

from .models import CustomUser


class PatientRecordSerializer(serializers.ModelSerializer):
    """Identity record of a patient. Contains PHI, so only served behind consent"""
    class Meta:
        model = CustomUser
        fields = [
            'id', 'username', 'email', 'first_name', 'last_name',
            'phone_number', 'date_of_birth', 'user_type'
        ]
        read_only_fields = fields
