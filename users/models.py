# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    """
    Platform account. Patients (clients), law firms and medical providers
    all authenticate as a CustomUser; ``user_type`` tells them apart.
    """
    CLIENT = 'client'
    LAWFIRM = 'lawfirm'
    MEDICAL_PROVIDER = 'medical_provider'

    USER_TYPE_CHOICES = [
        (CLIENT, 'Client / Patient'),
        (LAWFIRM, 'Law Firm'),
        (MEDICAL_PROVIDER, 'Medical Provider'),
    ]
    user_type = models.CharField(max_length=20, choices=USER_TYPE_CHOICES, default=CLIENT)
    phone_number = models.CharField(max_length=15, blank=True, null=True)
    date_of_birth = models.DateField(blank=True, null=True)

    def __str__(self):
        return f"{self.username} ({self.get_user_type_display()})"

    @property
    def is_client(self):
        return self.user_type == self.CLIENT

    @property
    def is_grantee(self):
        """Law firms and medical providers receive consent grants"""
        return self.user_type in (self.LAWFIRM, self.MEDICAL_PROVIDER)


class LawFirmProfile(models.Model):
    """Display and registration details for law firm accounts"""
    user = models.OneToOneField(CustomUser, on_delete=models.CASCADE, related_name='lawfirm_profile')
    firm_name = models.CharField(max_length=255, blank=True, default='')
    firm_code = models.CharField(max_length=20, unique=True, null=True, blank=True)

    def __str__(self):
        return f"Law Firm Profile: {self.firm_name or self.user.username}"


class MedicalProviderProfile(models.Model):
    """Display details for medical provider accounts"""
    user = models.OneToOneField(CustomUser, on_delete=models.CASCADE, related_name='medical_provider_profile')
    provider_name = models.CharField(max_length=255, blank=True, default='')
    npi_number = models.CharField(max_length=50, blank=True, null=True)  # National Provider Identifier

    def __str__(self):
        return f"Medical Provider Profile: {self.provider_name or self.user.username}"
