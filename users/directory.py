# users/directory.py
"""
Name lookups used to decorate consent listings.
"""
from .models import CustomUser, LawFirmProfile, MedicalProviderProfile


def grantee_display_name(granted_to_type, granted_to_id):
    """Return the firm or provider name for a grantee, or None if unknown"""
    if granted_to_type == CustomUser.LAWFIRM:
        profile = LawFirmProfile.objects.filter(user_id=granted_to_id).first()
        return profile.firm_name if profile else None
    if granted_to_type == CustomUser.MEDICAL_PROVIDER:
        profile = MedicalProviderProfile.objects.filter(user_id=granted_to_id).first()
        return profile.provider_name if profile else None
    return None


def patient_identity(patient_id):
    """Return first/last name and email of a patient as a dict"""
    patient = CustomUser.objects.filter(pk=patient_id).first()
    if patient is None:
        return {'first_name': None, 'last_name': None, 'email': None}
    return {
        'first_name': patient.first_name,
        'last_name': patient.last_name,
        'email': patient.email,
    }


def grantee_exists(granted_to_type, granted_to_id):
    """Check that an account of the given grantee type exists"""
    return CustomUser.objects.filter(
        pk=granted_to_id, user_type=granted_to_type, is_active=True
    ).exists()


def lawfirm_for_code(firm_code):
    """Return the account id of the active law firm holding ``firm_code``, or None"""
    profile = (
        LawFirmProfile.objects
        .filter(firm_code__iexact=firm_code.strip(), user__is_active=True)
        .only('user_id')
        .first()
    )
    return profile.user_id if profile else None
