# users/signals.py
import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from rbac.exceptions import RoleNotFound
from rbac.services import PermissionService
from .models import CustomUser, LawFirmProfile, MedicalProviderProfile

logger = logging.getLogger(__name__)


@receiver(post_save, sender=CustomUser)
def create_user_profile(sender, instance, created, **kwargs):
    """
    Signal to create the profile matching a new account's user type and to
    give clients the CLIENT role.

    Law firm and provider accounts get no role rows: their permissions come
    from the fixed administrative roles.
    """
    if not created:
        return

    if instance.user_type == CustomUser.LAWFIRM and not hasattr(instance, 'lawfirm_profile'):
        LawFirmProfile.objects.create(user=instance, firm_name=instance.get_full_name())
    elif instance.user_type == CustomUser.MEDICAL_PROVIDER and not hasattr(instance, 'medical_provider_profile'):
        MedicalProviderProfile.objects.create(user=instance, provider_name=instance.get_full_name())
    elif instance.user_type == CustomUser.CLIENT:
        try:
            PermissionService.assign_role(instance.pk, 'CLIENT')
        except RoleNotFound:
            logger.warning(f"CLIENT role missing; user {instance.pk} created without a role")
