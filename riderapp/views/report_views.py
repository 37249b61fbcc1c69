"""
Report Views Module

API views for the console's read-mostly screens:
- DashboardAPIView: GET /console/dashboard/ loads all dashboard aggregates at once
- PaymentListAPIView: GET /console/payments/ lists uploaded limo payments
- PaymentUploadAPIView: POST /console/payments/upload/ uploads a payment spreadsheet
- SalaryReportListAPIView: GET /console/salary-reports/ with search and summary
- SalaryReportGenerateAPIView: POST /console/salary-reports/generate/
- SalaryReportExportAPIView: GET /console/salary-reports/export/ (PDF or Excel)
"""

import logging

from django.http import HttpResponse
from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ..exceptions import AggregateLoadError, BackendError, SessionExpiredError
from ..permissions import IsConsoleManager, IsConsoleStaff
from ..serializers.reports import (
    PaymentUploadSerializer,
    SalaryReportExportSerializer,
    SalaryReportGenerateSerializer,
)
from ..services.aggregation import (
    PAYMENT_MONEY_FIELDS,
    SALARY_MONEY_FIELDS,
    filter_salary_reports,
    payment_status,
    salary_summary,
    with_display,
)
from ..services.loaders import load_dashboard
from ..tasks import generate_salary_report_task
from .base import ConsoleBackendMixin

logger = logging.getLogger(__name__)


DUPLICATE_FILE_DETAIL = 'File already exists'

EXPORT_FORMATS = {
    'pdf': ('application/pdf', 'pdf', 'Failed to export PDF'),
    'excel': ('application/vnd.openxmlformats-officedocument.spreadsheetml.sheet', 'xlsx', 'Failed to export Excel'),
}


class DashboardAPIView(ConsoleBackendMixin, APIView):
    """
    API View for the dashboard.

    GET /console/dashboard/

    Fetches stats, partner performance, order distribution, employee joins,
    weekly deductions, top performers and alerts concurrently. If any of
    them fails nothing is returned. Employee joins are in calendar order.

    Permissions: any console role
    """

    permission_classes = [IsConsoleStaff]

    def get(self, request: Request) -> Response:
        try:
            data = self.call_backend(load_dashboard)
        except (AggregateLoadError, SessionExpiredError) as e:
            return self.backend_error_response(e, "Failed to load data")

        logger.info("Loaded dashboard data")
        return Response(data, status=status.HTTP_200_OK)


class PaymentListAPIView(ConsoleBackendMixin, APIView):
    """
    GET /console/payments/

    Each payment gets a derived ``status`` (Completed once a driver payment
    was made) and formatted money fields.

    Permissions: Manager or Admin only
    """

    permission_classes = [IsConsoleManager]

    def get(self, request: Request) -> Response:
        try:
            payments = self.call_backend(lambda client: client.get_limo_payments()) or []
        except (BackendError, SessionExpiredError) as e:
            return self.backend_error_response(e, "Failed to load payment data")

        results = [
            {**payment, 'status': payment_status(payment)}
            for payment in with_display(payments, PAYMENT_MONEY_FIELDS)
        ]
        return Response({'count': len(results), 'results': results}, status=status.HTTP_200_OK)


class PaymentUploadAPIView(ConsoleBackendMixin, APIView):
    """
    POST /console/payments/upload/

    Accepts a multipart ``file`` (.xlsx or .xls). A file the backend already
    has is reported as a warning rather than an error.

    Permissions: Manager or Admin only
    """

    permission_classes = [IsConsoleManager]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request: Request) -> Response:
        serializer = PaymentUploadSerializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_error_response(serializer, "Please select an Excel file (.xlsx or .xls)")

        upload = serializer.validated_data['file']
        logger.info(f"Uploading limo payment file {upload.name}")

        def send(client):
            upload.seek(0)
            return client.upload_limo_payments(upload.name, upload, upload.content_type)

        try:
            result = self.call_backend(send) or {}
        except (BackendError, SessionExpiredError) as e:
            return self.backend_error_response(e, "Upload failed")

        if result.get('detail') == DUPLICATE_FILE_DETAIL:
            logger.warning(f"Limo payment file {upload.name} was already uploaded")
            return Response(
                self.success_payload(DUPLICATE_FILE_DETAIL, level='warning', result=result),
                status=status.HTTP_200_OK
            )

        if result.get('detail'):
            logger.error(f"Upload of {upload.name} rejected: {result['detail']}")
            return Response(
                {'error': 'Upload failed', 'details': result['detail']},
                status=status.HTTP_502_BAD_GATEWAY
            )

        try:
            payments = self.call_backend(lambda client: client.get_limo_payments()) or []
            reload = {'results': [{**p, 'status': payment_status(p)} for p in with_display(payments, PAYMENT_MONEY_FIELDS)]}
        except (BackendError, SessionExpiredError) as e:
            logger.warning(f"Reloading payments after upload failed: {str(e)}")
            reload = {'results': None, 'warning': 'Failed to reload payment data'}

        return Response(
            self.success_payload("Upload completed successfully!", result=result, **reload),
            status=status.HTTP_201_CREATED
        )


class SalaryReportListAPIView(ConsoleBackendMixin, APIView):
    """
    GET /console/salary-reports/?search=<term>&month_year=<YYYY-MM>

    Returns the (optionally month-scoped) reports matching the search term
    with their total count and net payout.

    Permissions: any console role
    """

    permission_classes = [IsConsoleStaff]

    def get(self, request: Request) -> Response:
        month_year = request.query_params.get('month_year')

        def fetch(client):
            if month_year:
                return client.get_salary_reports_by_month(month_year)
            return client.get_salary_reports()

        try:
            reports = self.call_backend(fetch) or []
        except (BackendError, SessionExpiredError) as e:
            return self.backend_error_response(e, "Failed to load salary data")

        reports = filter_salary_reports(reports, request.query_params.get('search', '').strip())
        return Response(
            {
                'summary': salary_summary(reports),
                'count': len(reports),
                'results': with_display(reports, SALARY_MONEY_FIELDS),
            },
            status=status.HTTP_200_OK
        )


class SalaryReportGenerateAPIView(ConsoleBackendMixin, APIView):
    """
    POST /console/salary-reports/generate/

    Generates the report for the month the selected range starts in. With
    ``run_async`` the work is queued as a Celery task.

    Permissions: any console role
    """

    permission_classes = [IsConsoleStaff]

    def post(self, request: Request) -> Response:
        serializer = SalaryReportGenerateSerializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_error_response(serializer, "Invalid report period")

        data = serializer.validated_data
        month_year = data['month_year']
        message = f"Salary report generated for {data['from_date']} to {data['to_date']}"

        if data['run_async']:
            result = generate_salary_report_task.delay(month_year)
            logger.info(f"Queued salary report generation for {month_year} as task {result.id}")
            return Response(
                self.success_payload(
                    f"Salary report generation queued for {month_year}",
                    task_id=result.id,
                    month_year=month_year
                ),
                status=status.HTTP_202_ACCEPTED
            )

        try:
            self.call_backend(lambda client: client.generate_monthly_report(month_year))
        except (BackendError, SessionExpiredError) as e:
            return self.backend_error_response(e, "Failed to generate salary report")

        logger.info(f"Generated salary report for {month_year}")

        # Reloaded on its own so a retried reload never repeats the generation
        try:
            reports = self.call_backend(lambda client: client.get_salary_reports_by_month(month_year)) or []
            reload = {'summary': salary_summary(reports), 'results': with_display(reports, SALARY_MONEY_FIELDS)}
        except (BackendError, SessionExpiredError) as e:
            logger.warning(f"Reloading salary reports for {month_year} failed: {str(e)}")
            reload = {'summary': None, 'results': None, 'warning': 'Failed to reload salary data'}

        return Response(
            self.success_payload(message, month_year=month_year, **reload),
            status=status.HTTP_200_OK
        )


class SalaryReportExportAPIView(ConsoleBackendMixin, APIView):
    """
    GET /console/salary-reports/export/?format=pdf|excel&month_year=YYYY-MM

    Streams the backend's export back as an attachment named
    ``salary-report-<month>.pdf`` or ``.xlsx``.

    Permissions: any console role
    """

    permission_classes = [IsConsoleStaff]

    def get(self, request: Request) -> HttpResponse:
        # ?format= reaches the view because URL_FORMAT_OVERRIDE is disabled in settings
        serializer = SalaryReportExportSerializer(data=request.query_params.dict())
        if not serializer.is_valid():
            return self.validation_error_response(serializer, "Invalid export request")

        export_format = serializer.validated_data['format']
        month_year = serializer.validated_data['month_year']
        content_type, extension, failure_message = EXPORT_FORMATS[export_format]

        def export(client):
            if export_format == 'pdf':
                return client.export_salary_pdf(month_year)
            return client.export_salary_excel(month_year)

        try:
            content = self.call_backend(export)
        except (BackendError, SessionExpiredError) as e:
            return self.backend_error_response(e, failure_message)

        response = HttpResponse(content, content_type=content_type)
        response['Content-Disposition'] = f'attachment; filename="salary-report-{month_year}.{extension}"'

        logger.info(f"Exported salary report {month_year} as {export_format}")
        return response
