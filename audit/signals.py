# audit/signals.py
from django.contrib.auth.signals import user_logged_in, user_logged_out, user_login_failed
from django.dispatch import receiver

from .services import AuditLogger, get_client_ip


def _user_agent(request):
    return request.META.get('HTTP_USER_AGENT') if request else None


@receiver(user_logged_in)
def log_user_login(sender, request, user, **kwargs):
    """Log when a user logs in"""
    AuditLogger.log_auth(
        email=user.email,
        action='LOGIN',
        user_id=user.pk,
        ip_address=get_client_ip(request),
        user_agent=_user_agent(request),
    )


@receiver(user_logged_out)
def log_user_logout(sender, request, user, **kwargs):
    """Log when a user logs out"""
    if user is None:  # session had already expired
        return
    AuditLogger.log_auth(
        email=user.email,
        action='LOGOUT',
        user_id=user.pk,
        ip_address=get_client_ip(request),
        user_agent=_user_agent(request),
    )


@receiver(user_login_failed)
def log_user_login_failed(sender, credentials, request=None, **kwargs):
    """Log a failed login; the attempted account is not known, only the identifier"""
    AuditLogger.log_auth(
        email=credentials.get('email') or credentials.get('username'),
        action='LOGIN_FAILED',
        ip_address=get_client_ip(request),
        user_agent=_user_agent(request),
        success=False,
        failure_reason='invalid_credentials',
    )
