"""
HTTP client for the RiderApp backend API.

This service wraps every backend endpoint the console uses:
1. Authentication (login, logout, token refresh, password reset)
2. Employee, partner, WPS vendor, weekly trip and deduction CRUD
3. Dashboard aggregates
4. Monthly salary reports and their PDF/Excel exports
5. Limo payment uploads
6. Console settings, users and audit log

Every call is an independent ``requests`` call, so a single client may be
shared by the threads of a concurrent load. Failures are raised as
``BackendUnavailableError`` (no response) or ``BackendResponseError``
(non-success status).
"""

import logging
from typing import Any, BinaryIO, Dict, List, Optional

import requests
from django.conf import settings

from ..exceptions import (
    BackendResponseError,
    BackendUnavailableError,
    InvalidCredentialsError,
)

logger = logging.getLogger(__name__)


DASHBOARD_ENDPOINTS = {
    'stats': '/dashboard/stats',
    'partner_performance': '/dashboard/partner-performance',
    'order_distribution': '/dashboard/order-distribution',
    'employee_joins': '/dashboard/employee-joins',
    'weekly_deductions': '/dashboard/weekly-deductions',
    'top_performers': '/dashboard/top-performers',
    'alerts': '/dashboard/alerts',
}


class RiderApiClient:
    """
    Client for the RiderApp backend.

    Args:
        base_url: Root URL of the backend, e.g. ``http://localhost:8000``
        token: Bearer access token sent with every request when present
        timeout: Per-request timeout in seconds
    """

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 30):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout

    @classmethod
    def from_settings(cls, token: Optional[str] = None) -> 'RiderApiClient':
        """Build a client from the RIDERAPP_* Django settings."""
        return cls(
            base_url=settings.RIDERAPP_API_URL,
            token=token,
            timeout=settings.RIDERAPP_API_TIMEOUT,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {'Accept': 'application/json'}
        if self.token:
            headers['Authorization'] = f"Bearer {self.token}"
        return headers

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def _send(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            return requests.request(
                method,
                url,
                headers=self._headers(),
                timeout=self.timeout,
                **kwargs
            )
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed without a response: {str(e)}")
            raise BackendUnavailableError(f"Backend unreachable: {str(e)}") from e

    def request(self, method: str, path: str, **kwargs) -> Any:
        """
        Send a request and return the decoded JSON body.

        Raises:
            BackendUnavailableError: If no response was received
            BackendResponseError: If the response status is not 2xx
        """
        response = self._send(method, path, **kwargs)
        if not response.ok:
            payload = self._decode(response)
            logger.warning(f"{method} {path} returned {response.status_code}")
            raise BackendResponseError(response.status_code, payload)
        return self._decode(response)

    def download(self, path: str, params: Optional[Dict[str, Any]] = None) -> bytes:
        """Fetch a binary resource (PDF/XLSX export)."""
        response = self._send('GET', path, params=params)
        if not response.ok:
            logger.warning(f"GET {path} returned {response.status_code}")
            raise BackendResponseError(
                response.status_code,
                self._decode(response),
                message=f"Export failed: {response.status_code}"
            )
        return response.content

    # Authentication

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Exchange credentials for tokens.

        Returns:
            Dict with access_token, refresh_token, email and role

        Raises:
            InvalidCredentialsError: If the backend rejects the credentials
            BackendUnavailableError: If the backend could not be reached
        """
        response = self._send('POST', '/auth/login', data={'username': email, 'password': password})
        if not response.ok:
            logger.info(f"Login rejected by backend with status {response.status_code}")
            raise InvalidCredentialsError(response.status_code, self._decode(response))
        return self._decode(response)

    def logout(self) -> None:
        self.request('POST', '/auth/logout')

    def refresh(self, refresh_token: str) -> Dict[str, Any]:
        return self.request('POST', '/auth/refresh', json={'refresh_token': refresh_token})

    def generate_reset_token(self, email: str) -> Dict[str, Any]:
        return self.request('POST', '/auth/generate-reset-token', json={'email': email})

    def reset_password(self, token: str, new_password: str) -> Any:
        return self.request('POST', '/auth/reset-password', json={'token': token, 'new_password': new_password})

    # Generic resource helpers

    def list_resource(self, collection: str) -> List[Dict[str, Any]]:
        return self.request('GET', f"/{collection}/")

    def get_resource(self, collection: str, object_id: int) -> Dict[str, Any]:
        return self.request('GET', f"/{collection}/{object_id}")

    def create_resource(self, collection: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.request('POST', f"/{collection}/", json=data)

    def update_resource(self, collection: str, object_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.request('PUT', f"/{collection}/{object_id}", json=data)

    def delete_resource(self, collection: str, object_id: int) -> None:
        self.request('DELETE', f"/{collection}/{object_id}")

    # Employees

    def get_employees(self) -> List[Dict[str, Any]]:
        return self.list_resource('employees')

    def get_employee(self, employee_id: int) -> Dict[str, Any]:
        return self.get_resource('employees', employee_id)

    def create_employee(self, employee: Dict[str, Any]) -> Dict[str, Any]:
        return self.create_resource('employees', employee)

    def update_employee(self, employee_id: int, employee: Dict[str, Any]) -> Dict[str, Any]:
        return self.update_resource('employees', employee_id, employee)

    def delete_employee(self, employee_id: int) -> None:
        self.delete_resource('employees', employee_id)

    # Partners and WPS vendors

    def get_partners(self) -> List[Dict[str, Any]]:
        return self.list_resource('partners')

    def create_partner(self, partner: Dict[str, Any]) -> Dict[str, Any]:
        return self.create_resource('partners', partner)

    def update_partner(self, partner_id: int, partner: Dict[str, Any]) -> Dict[str, Any]:
        return self.update_resource('partners', partner_id, partner)

    def delete_partner(self, partner_id: int) -> None:
        self.delete_resource('partners', partner_id)

    def get_wps_vendors(self) -> List[Dict[str, Any]]:
        return self.list_resource('wps-vendors')

    def create_wps_vendor(self, vendor: Dict[str, Any]) -> Dict[str, Any]:
        return self.create_resource('wps-vendors', vendor)

    def update_wps_vendor(self, vendor_id: int, vendor: Dict[str, Any]) -> Dict[str, Any]:
        return self.update_resource('wps-vendors', vendor_id, vendor)

    def delete_wps_vendor(self, vendor_id: int) -> None:
        self.delete_resource('wps-vendors', vendor_id)

    # Weekly trips

    def get_weekly_trips(self) -> List[Dict[str, Any]]:
        return self.list_resource('weekly-trips')

    def get_weekly_trips_by_employee(self, employee_id: int) -> List[Dict[str, Any]]:
        return self.request('GET', f"/weekly-trips/employee/{employee_id}")

    # Deductions

    def get_deductions(self) -> List[Dict[str, Any]]:
        return self.list_resource('deductions')

    def get_deductions_by_employee(self, employee_id: int) -> List[Dict[str, Any]]:
        return self.request('GET', f"/deductions/employee/{employee_id}")

    # Dashboard

    def get_dashboard(self, name: str) -> Any:
        """Fetch one of the precomputed dashboard aggregates by name."""
        try:
            path = DASHBOARD_ENDPOINTS[name]
        except KeyError:
            raise ValueError(f"Unknown dashboard aggregate: {name}")
        return self.request('GET', path)

    # Monthly salary reports

    def get_salary_reports(self) -> List[Dict[str, Any]]:
        return self.list_resource('monthly-salary-reports')

    def get_salary_reports_by_month(self, month_year: str) -> List[Dict[str, Any]]:
        return self.request('GET', f"/monthly-salary-reports/month/{month_year}")

    def generate_monthly_report(self, month_year: str) -> Any:
        return self.request('POST', f"/monthly-salary-reports/generate/{month_year}")

    def export_salary_pdf(self, month_year: str) -> bytes:
        return self.download('/monthly-salary-reports/export-pdf', params={'month_year': month_year})

    def export_salary_excel(self, month_year: str) -> bytes:
        return self.download('/monthly-salary-reports/export-excel', params={'month_year': month_year})

    # Limo payments

    def get_limo_payments(self) -> List[Dict[str, Any]]:
        return self.list_resource('limo-payments')

    def upload_limo_payments(self, filename: str, fileobj: BinaryIO, content_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Upload a payment spreadsheet.

        A 400 response is returned as data instead of raised, so the caller
        can recognise a duplicate file (``{"detail": "File already exists"}``).
        """
        files = {'file': (filename, fileobj, content_type or 'application/octet-stream')}
        response = self._send('POST', '/limo-payments/upload/', files=files)
        if response.status_code == 400:
            payload = self._decode(response)
            logger.info(f"Upload of {filename} returned 400: {payload}")
            return payload if isinstance(payload, dict) else {'detail': payload}
        if not response.ok:
            logger.warning(f"Upload of {filename} failed with status {response.status_code}")
            raise BackendResponseError(
                response.status_code,
                self._decode(response),
                message=f"Upload error: {response.status_code}"
            )
        return self._decode(response)

    # Settings

    def get_settings(self) -> Dict[str, Any]:
        return self.request('GET', '/settings/')

    def update_settings(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.request('PUT', '/settings/', json=data)

    def get_console_users(self) -> List[Dict[str, Any]]:
        return self.request('GET', '/settings/users')

    def create_console_user(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.request('POST', '/settings/users', json=data)

    def delete_console_user(self, user_id: int) -> None:
        self.request('DELETE', f"/settings/users/{user_id}")

    def get_audit_log(self) -> List[Dict[str, Any]]:
        return self.request('GET', '/settings/audit-log')
