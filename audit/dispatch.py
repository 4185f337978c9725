# audit/dispatch.py
"""
Single write path for audit entries.

With ``AUDIT_ASYNC_WRITES`` on, a write runs on a small worker pool and the
caller waits at most ``AUDIT_WRITE_TIMEOUT`` seconds for it. With it off the
write runs inline. In both modes a failure is reported on the
``casecompass.alerts`` channel and the caller gets ``None``.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from django.conf import settings
from django.db import close_old_connections

alerts = logging.getLogger('casecompass.alerts')

_executor = None
_executor_lock = threading.Lock()


def _get_executor():
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix='audit-writer')
        return _executor


def _run_in_worker(write):
    # Each worker thread holds its own connection. It is reused across writes
    # and recycled the way a request cycle does, honouring CONN_MAX_AGE.
    close_old_connections()
    try:
        return write()
    finally:
        close_old_connections()


def submit(write, description):
    """
    Run an audit write under the configured policy.

    Args:
        write: Zero-argument callable that persists the entry and returns it
        description: Short label used in alert messages

    Returns:
        Whatever ``write`` returned, or None on failure or timeout
    """
    try:
        if not settings.AUDIT_ASYNC_WRITES:
            return write()
        future = _get_executor().submit(_run_in_worker, write)
        return future.result(timeout=settings.AUDIT_WRITE_TIMEOUT)
    except FutureTimeoutError:
        alerts.warning(
            f"Audit write for {description} still pending after "
            f"{settings.AUDIT_WRITE_TIMEOUT}s; continuing without it"
        )
        return None
    except Exception:
        alerts.exception(f"AUDIT LOG FAILURE: could not persist {description}")
        return None
