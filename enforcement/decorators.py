# enforcement/decorators.py
import functools
import logging

from rest_framework import status
from rest_framework.response import Response

from audit.services import AuditLogger
from .checks import resolve_patient_id
from .pipeline import Deny, RequestContext, run_checks

logger = logging.getLogger(__name__)


def _audit_outcome(context, action, record_type, succeeded):
    consent = context.annotations.get('consent') or {}
    patient_id = consent.get('patientId') or resolve_patient_id(context)
    actor = context.actor
    AuditLogger.log_phi_access(
        user_id=actor.id,
        user_type=actor.actor_type,
        action=action,
        patient_id=patient_id,
        record_type=record_type or consent.get('dataType') or 'PHI',
        record_id=patient_id,
        ip_address=context.ip_address,
        user_agent=context.user_agent,
        success=succeeded,
    )


def enforce(*checks, audit_action=None, record_type=None):
    """
    Guard a DRF view method with an ordered list of checks.

    The handler runs only if every check allows, and receives the annotated
    context as ``access``. When ``audit_action`` is set, the handler's outcome
    is recorded as one PHI-access entry once it returns.

    Usage:
        @enforce(require_permission('VIEW_CLIENT_PHI'),
                 require_consent('patient_id', 'medical_records'),
                 audit_action='VIEW_PHI')
        def get(self, request, patient_id, access):
            ...
    """
    def decorator(handler):
        @functools.wraps(handler)
        def wrapper(view, request, *args, **kwargs):
            context = RequestContext.from_request(request, kwargs)
            if context.actor is None:
                return Response({'message': 'Authentication required'}, status=status.HTTP_401_UNAUTHORIZED)

            decision = run_checks(checks, context)
            if isinstance(decision, Deny):
                logger.info(f"Denied {context.method} {context.path} for {context.actor!r}: {decision.reason}")
                return Response(dict(decision.body), status=decision.status_code)

            try:
                response = handler(view, request, *args, access=decision.context, **kwargs)
            except Exception:
                if audit_action:
                    _audit_outcome(decision.context, audit_action, record_type, succeeded=False)
                raise

            if audit_action:
                _audit_outcome(decision.context, audit_action, record_type,
                               succeeded=response.status_code < 400)
            return response
        return wrapper
    return decorator
