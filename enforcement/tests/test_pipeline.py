# enforcement/tests/test_pipeline.py
import dataclasses

import pytest

from enforcement.pipeline import Allow, Deny, RequestContext, run_checks
from users.actors import LawFirm, Patient


def _recording(name, calls, decision=None):
    def check(context):
        calls.append(name)
        if decision is not None:
            return decision
        return Allow(context.annotate(**{name: True}))
    return check


def test_checks_run_in_order_and_accumulate_annotations():
    calls = []
    context = RequestContext(actor=Patient(1))

    decision = run_checks([_recording('first', calls), _recording('second', calls)], context)

    assert calls == ['first', 'second']
    assert isinstance(decision, Allow)
    assert decision.context.annotations == {'first': True, 'second': True}


def test_first_deny_stops_the_run():
    calls = []
    denied = Deny('nope', 403, {'message': 'Access denied'})

    decision = run_checks(
        [_recording('first', calls, denied), _recording('second', calls)],
        RequestContext(actor=LawFirm(2)),
    )

    assert decision is denied
    assert calls == ['first']


def test_no_checks_allows_unchanged_context():
    context = RequestContext(actor=Patient(1))
    assert run_checks([], context) == Allow(context)


def test_annotate_returns_a_copy():
    context = RequestContext(actor=Patient(1), annotations={'a': 1})
    annotated = context.annotate(b=2)

    assert annotated.annotations == {'a': 1, 'b': 2}
    assert context.annotations == {'a': 1}
    with pytest.raises(dataclasses.FrozenInstanceError):
        annotated.actor = LawFirm(3)


def test_deny_defaults():
    deny = Deny('missing_patient_id')
    assert deny.status_code == 403
    assert deny.body == {}
