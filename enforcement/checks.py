# enforcement/checks.py
import logging

from audit.models import AuditLogEntry
from audit.services import AuditLogger
from consent.services import ConsentService
from rbac.services import PermissionService
from users.actors import Patient, grantee_for
from .pipeline import Allow, Deny

logger = logging.getLogger(__name__)

DEFAULT_PATIENT_PARAMS = ('client_id', 'patient_id')
DEFAULT_PATIENT_FIELDS = ('clientId', 'patientId')


def resolve_patient_id(context, patient_id_param=None):
    """
    Find the patient a request is about, in the URL kwargs first and then in
    the body. Returns None when there is no usable integer id.
    """
    if patient_id_param:
        raw = context.params.get(patient_id_param) or context.body.get(patient_id_param)
    else:
        raw = next(
            (context.params[name] for name in DEFAULT_PATIENT_PARAMS if context.params.get(name)),
            None,
        ) or next(
            (context.body[name] for name in DEFAULT_PATIENT_FIELDS if context.body.get(name)),
            None,
        )
    if raw in (None, ''):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _audit(context, action, status, **fields):
    actor = context.actor
    metadata = fields.pop('metadata', {})
    metadata.update({'path': context.path, 'method': context.method})
    AuditLogger.log(
        actor_id=actor.id,
        actor_type=actor.actor_type,
        action=action,
        status=status,
        ip_address=context.ip_address,
        user_agent=context.user_agent,
        metadata=metadata,
        **fields
    )


def _permission_denied(context, permission_names):
    _audit(
        context, 'PERMISSION_DENIED', AuditLogEntry.DENIED,
        entity_type='Permission',
        metadata={'requiredPermissions': list(permission_names)},
    )
    logger.info(f"{context.actor!r} lacks {', '.join(permission_names)} for {context.method} {context.path}")
    return Deny('permission_denied', 403, {
        'message': 'Insufficient permissions',
        'requiredPermissions': list(permission_names),
    })


def _audit_sensitive_use(context, permission_names):
    sensitive = [name for name in permission_names if PermissionService.is_sensitive_permission(name)]
    if sensitive:
        _audit(
            context, 'SENSITIVE_PERMISSION_USED', AuditLogEntry.SUCCESS,
            entity_type='Permission',
            metadata={'permissions': sensitive},
        )


def require_permission(permission_name):
    """Deny with 403 unless the actor holds ``permission_name``"""
    def check(context):
        if not PermissionService.check_actor_permission(context.actor, permission_name):
            return _permission_denied(context, [permission_name])
        _audit_sensitive_use(context, [permission_name])
        return Allow(context.annotate(permissions=[permission_name]))
    check.__name__ = f'require_permission({permission_name})'
    return check


def require_any_permission(permission_names):
    """Deny with 403 unless the actor holds at least one of the permissions"""
    names = list(permission_names)

    def check(context):
        actor = context.actor
        if isinstance(actor, Patient):
            allowed = PermissionService.check_any_permission(actor.id, names)
        else:
            allowed = any(PermissionService.check_actor_permission(actor, name) for name in names)
        if not allowed:
            return _permission_denied(context, names)
        held = [name for name in names if PermissionService.check_actor_permission(actor, name)]
        _audit_sensitive_use(context, held)
        return Allow(context.annotate(permissions=held))
    check.__name__ = f'require_any_permission({names})'
    return check


def require_all_permissions(permission_names):
    """Deny with 403 unless the actor holds every one of the permissions"""
    names = list(permission_names)

    def check(context):
        actor = context.actor
        if isinstance(actor, Patient):
            allowed = PermissionService.check_all_permissions(actor.id, names)
        else:
            allowed = all(PermissionService.check_actor_permission(actor, name) for name in names)
        if not allowed:
            return _permission_denied(context, names)
        _audit_sensitive_use(context, names)
        return Allow(context.annotate(permissions=names))
    check.__name__ = f'require_all_permissions({names})'
    return check


def require_actor_type(*actor_types):
    """Deny with 403 unless the actor is one of the given types ('lawfirm', ...)"""
    def check(context):
        if context.actor.actor_type not in actor_types:
            return Deny('wrong_actor_type', 403, {
                'message': f"Access denied. Only {' or '.join(actor_types)} accounts can use this endpoint",
            })
        return Allow(context)
    check.__name__ = f'require_actor_type{actor_types}'
    return check


def require_consent(patient_id_param=None, data_type=None):
    """
    Deny with 403 unless the patient has consented to the actor seeing their data.

    A patient reading their own data skips the consent lookup entirely.
    On success the handler sees ``access.annotations['consent']``.
    """
    def check(context):
        patient_id = resolve_patient_id(context, patient_id_param)
        if patient_id is None:
            return Deny('missing_patient_id', 400, {'message': 'Patient/Client ID required'})

        actor = context.actor
        if actor.id == patient_id:
            return Allow(context.annotate(consent={
                'verified': True, 'selfAccess': True, 'patientId': patient_id,
            }))

        requested_type = data_type or context.body.get('dataType') or None
        grantee = grantee_for(actor)
        if grantee is None:
            _audit(
                context, 'CONSENT_CHECK_FAILED', AuditLogEntry.DENIED,
                target_user_id=patient_id,
                metadata={'reason': 'Invalid user type for consent check'},
            )
            return Deny('invalid_actor_for_consent', 403, {'message': 'Access denied'})

        granted_to_type, granted_to_id = grantee
        if not ConsentService.check_consent(patient_id, granted_to_type, granted_to_id, requested_type):
            _audit(
                context, 'CONSENT_DENIED', AuditLogEntry.DENIED,
                entity_type='ConsentRecord',
                target_user_id=patient_id,
                metadata={
                    'patientId': patient_id,
                    'grantedToType': granted_to_type,
                    'grantedToId': granted_to_id,
                    'dataType': requested_type,
                },
            )
            return Deny('consent_denied', 403, {
                'message': 'No valid consent found for accessing this patient data',
                'requiresConsent': True,
                'patientId': patient_id,
                'dataType': requested_type,
            })

        AuditLogger.log_phi_access(
            user_id=actor.id,
            user_type=actor.actor_type,
            action='PHI_ACCESS_WITH_CONSENT',
            patient_id=patient_id,
            record_type=requested_type or 'PHI',
            ip_address=context.ip_address,
            user_agent=context.user_agent,
            success=True,
        )
        return Allow(context.annotate(consent={
            'verified': True,
            'patientId': patient_id,
            'grantedToType': granted_to_type,
            'grantedToId': granted_to_id,
            'dataType': requested_type,
        }))
    check.__name__ = f'require_consent({patient_id_param}, {data_type})'
    return check


def check_consent(patient_id_param=None, data_type=None):
    """Like require_consent but never denies; it only annotates the context"""
    def check(context):
        patient_id = resolve_patient_id(context, patient_id_param)
        actor = context.actor
        if patient_id is None or actor.id == patient_id:
            return Allow(context.annotate(consent={'verified': True, 'selfAccess': True}))

        grantee = grantee_for(actor)
        if grantee is None:
            return Allow(context.annotate(consent={'verified': False}))

        granted_to_type, granted_to_id = grantee
        verified = ConsentService.check_consent(patient_id, granted_to_type, granted_to_id, data_type)
        return Allow(context.annotate(consent={
            'verified': verified,
            'patientId': patient_id,
            'grantedToType': granted_to_type,
            'grantedToId': granted_to_id,
            'dataType': data_type,
        }))
    check.__name__ = f'check_consent({patient_id_param}, {data_type})'
    return check
