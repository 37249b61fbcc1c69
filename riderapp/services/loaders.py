"""
Concurrent fan-out loads for screens that need several backend collections.

A load issues every request at once on a thread pool and waits for all of
them to settle. If any request failed the whole load fails with
AggregateLoadError, so a screen never renders partially populated data.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, Dict

from django.conf import settings

from ..exceptions import AggregateLoadError, BackendError
from .aggregation import sort_by_month
from .api_client import DASHBOARD_ENDPOINTS, RiderApiClient

logger = logging.getLogger(__name__)


def fetch_all(calls: Dict[str, Callable[[], Any]]) -> Dict[str, Any]:
    """
    Run every call concurrently and return their results by name.

    Raises:
        AggregateLoadError: If at least one call raised a BackendError
    """
    if not calls:
        return {}

    max_workers = min(len(calls), settings.RIDERAPP_FANOUT_WORKERS)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {name: executor.submit(call) for name, call in calls.items()}
        wait(futures.values())

    results = {}
    failures = {}
    for name, future in futures.items():
        exc = future.exception()
        if exc is None:
            results[name] = future.result()
        elif isinstance(exc, BackendError):
            failures[name] = exc
        else:
            raise exc

    if failures:
        for name, exc in failures.items():
            logger.error(f"Concurrent load of '{name}' failed: {str(exc)}")
        raise AggregateLoadError(failures)

    return results


def load_dashboard(client: RiderApiClient) -> Dict[str, Any]:
    """Fetch all seven dashboard aggregates; employee joins come back in calendar order."""
    calls = {
        name: (lambda name=name: client.get_dashboard(name))
        for name in DASHBOARD_ENDPOINTS
    }
    data = fetch_all(calls)
    data['employee_joins'] = sort_by_month(data['employee_joins'] or [])
    return data


def load_deduction_screen(client: RiderApiClient) -> Dict[str, Any]:
    return fetch_all({
        'deductions': client.get_deductions,
        'employees': client.get_employees,
    })


def load_partner_directory(client: RiderApiClient) -> Dict[str, Any]:
    return fetch_all({
        'partners': client.get_partners,
        'wps_vendors': client.get_wps_vendors,
    })


def load_settings_screen(client: RiderApiClient) -> Dict[str, Any]:
    return fetch_all({
        'settings': client.get_settings,
        'users': client.get_console_users,
        'audit_log': client.get_audit_log,
    })
