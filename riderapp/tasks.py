"""
Celery tasks for salary report automation.
"""

import logging
from datetime import date, timedelta
from typing import Dict

from celery import shared_task
from django.conf import settings
from django.core.cache import cache
from django.core.exceptions import ImproperlyConfigured
from django.utils import timezone

from .exceptions import BackendResponseError, BackendUnavailableError
from .services.api_client import RiderApiClient

logger = logging.getLogger(__name__)


LOCK_TIMEOUT = 3600


def previous_month(today: date) -> str:
    """``YYYY-MM`` of the month before ``today``."""
    return (today.replace(day=1) - timedelta(days=1)).strftime('%Y-%m')


def service_client() -> RiderApiClient:
    """
    Log in with the service account configured for background work.

    Raises:
        ImproperlyConfigured: If no service credentials are configured
        BackendError: If the login fails
    """
    email = settings.RIDERAPP_SERVICE_EMAIL
    password = settings.RIDERAPP_SERVICE_PASSWORD
    if not email or not password:
        raise ImproperlyConfigured(
            "RIDERAPP_SERVICE_EMAIL and RIDERAPP_SERVICE_PASSWORD must be set for background tasks"
        )

    client = RiderApiClient.from_settings()
    data = client.login(email, password)
    token = data.get('access_token') if isinstance(data, dict) else None
    if not token:
        raise BackendResponseError(200, data, message="Service login returned no access token")
    client.token = token
    return client


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def generate_salary_report_task(self, month_year: str) -> Dict:
    """
    Generate the monthly salary report for ``month_year`` (YYYY-MM).

    Generation for a month is skipped while another run for the same month
    holds the lock. Transport failures are retried; a rejected generation
    is not.

    Returns:
        Dict containing the generation result
    """
    logger.info(f"Generating salary report for {month_year}")

    cache_key = f"salary_report_generation_{month_year}"
    if not cache.add(cache_key, True, timeout=LOCK_TIMEOUT):
        logger.warning(f"Salary report for {month_year} is already being generated, skipping")
        return {
            'month_year': month_year,
            'status': 'already_running',
            'message': 'Report generation already in progress'
        }

    try:
        client = service_client()
        client.generate_monthly_report(month_year)
        reports = client.get_salary_reports_by_month(month_year) or []

        logger.info(f"Generated salary report for {month_year} with {len(reports)} employees")
        return {
            'month_year': month_year,
            'status': 'completed',
            'report_count': len(reports),
        }

    except BackendUnavailableError as e:
        logger.error(f"Backend unreachable while generating report for {month_year}: {str(e)}")
        if self.request.retries < self.max_retries:
            logger.info(f"Retrying salary report generation for {month_year} (attempt {self.request.retries + 1})")
            raise self.retry(exc=e, countdown=self.default_retry_delay)
        logger.error(f"Max retries exceeded for salary report {month_year}")
        raise

    except BackendResponseError as e:
        logger.error(f"Backend rejected salary report generation for {month_year}: {str(e)}")
        raise

    finally:
        cache.delete(cache_key)


@shared_task
def auto_generate_salary_reports() -> Dict:
    """
    Monthly task generating last month's salary report.

    Runs only when the backend's ``auto_generate_reports`` setting is on.
    """
    month_year = previous_month(timezone.localdate())
    logger.info(f"Automatic salary report generation check for {month_year}")

    client = service_client()
    console_settings = client.get_settings() or {}
    if not console_settings.get('auto_generate_reports'):
        logger.info("Automatic report generation is disabled, skipping")
        return {
            'month_year': month_year,
            'status': 'skipped',
            'message': 'Automatic report generation is disabled'
        }

    return generate_salary_report_task(month_year)
