# enforcement/pipeline.py
"""
Per-request access pipeline.

A protected view runs an ordered list of checks. Each check takes the
current ``RequestContext`` and returns either ``Allow`` carrying a
(possibly further annotated) context, or ``Deny`` which ends the run.
Checks never touch the request object itself.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from audit.services import get_client_ip
from users.actors import actor_for_user


def _plain_dict(data):
    if hasattr(data, 'items'):
        return dict(data.items())
    return {}


@dataclass(frozen=True)
class RequestContext:
    actor: Any
    params: Mapping[str, Any] = field(default_factory=dict)
    body: Mapping[str, Any] = field(default_factory=dict)
    query: Mapping[str, Any] = field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    path: str = ''
    method: str = 'GET'
    annotations: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_request(cls, request, params=None):
        """Build a context from a DRF request and the URL kwargs of the view"""
        return cls(
            actor=actor_for_user(getattr(request, 'user', None)),
            params=dict(params or {}),
            body=_plain_dict(getattr(request, 'data', None)),
            query=_plain_dict(getattr(request, 'query_params', None)),
            ip_address=get_client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT'),
            path=request.path,
            method=request.method,
        )

    def annotate(self, **values):
        """Return a copy with extra annotations for the handler"""
        return replace(self, annotations={**self.annotations, **values})


@dataclass(frozen=True)
class Allow:
    context: RequestContext


@dataclass(frozen=True)
class Deny:
    reason: str
    status_code: int = 403
    body: Mapping[str, Any] = field(default_factory=dict)


Decision = Union[Allow, Deny]
Check = Callable[[RequestContext], Decision]


def run_checks(checks: Iterable[Check], context: RequestContext) -> Decision:
    """Apply checks in order; the first Deny wins, otherwise Allow the final context"""
    for check in checks:
        decision = check(context)
        if isinstance(decision, Deny):
            return decision
        context = decision.context
    return Allow(context)
