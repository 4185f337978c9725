# users/actors.py
"""
Tagged actor identity.

Every access decision branches on *who* is asking. Instead of switching on
a free-form ``user_type`` string, callers convert the authenticated account
into one of three actor classes and dispatch on the class.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class Patient:
    id: int
    actor_type = 'client'


@dataclass(frozen=True)
class LawFirm:
    id: int
    actor_type = 'lawfirm'


@dataclass(frozen=True)
class MedicalProvider:
    id: int
    actor_type = 'medical_provider'


ACTOR_CLASSES = {
    Patient.actor_type: Patient,
    LawFirm.actor_type: LawFirm,
    MedicalProvider.actor_type: MedicalProvider,
}

GRANTEE_TYPES = (LawFirm.actor_type, MedicalProvider.actor_type)


def actor_from_parts(actor_type, actor_id):
    """
    Build an actor from a raw (type, id) pair.

    Unknown or missing types fall back to Patient, matching how the
    platform treats any account that is not a firm or provider.
    """
    actor_class = ACTOR_CLASSES.get(actor_type, Patient)
    return actor_class(int(actor_id))


def actor_for_user(user):
    """Return the actor for an authenticated user, or None for anonymous"""
    if user is None or not user.is_authenticated:
        return None
    return actor_from_parts(user.user_type, user.pk)


def grantee_for(actor):
    """
    Return the (granted_to_type, granted_to_id) pair an actor holds consent
    under, or None for patients, who never receive grants.
    """
    if isinstance(actor, Patient):
        return None
    if isinstance(actor, (LawFirm, MedicalProvider)):
        return actor.actor_type, actor.id
    raise TypeError(f"Unknown actor {actor!r}")
