"""
Record Views Module

ViewSets proxying the backend's record collections:
- EmployeeViewSet: /console/employees/ (with ?search= on name or captain id)
- PartnerViewSet: /console/partners/ plus the partners/vendors directory
- WPSVendorViewSet: /console/wps-vendors/
- WeeklyTripViewSet: /console/weekly-trips/ plus trips per employee
- DeductionViewSet: /console/deductions/ plus the per-employee grouping

Every mutation is validated locally before the backend is called, and a
successful mutation answers with the reloaded collection. Deletes must be
confirmed with ?confirm=true.
"""

import logging
from typing import Any, Dict, List

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from ..exceptions import AggregateLoadError, BackendError, SessionExpiredError
from ..permissions import IsConsoleManager
from ..serializers.records import (
    REQUIRED_FIELDS_MESSAGE,
    DeductionSerializer,
    EmployeeSerializer,
    PartnerSerializer,
    WeeklyTripSerializer,
    WPSVendorSerializer,
)
from ..services.aggregation import (
    filter_deduction_groups,
    filter_employees,
    group_deductions,
    summarize_group,
)
from ..services.loaders import load_deduction_screen, load_partner_directory
from ..session import Role
from .base import ConsoleBackendMixin

logger = logging.getLogger(__name__)


class BackendResourceViewSet(ConsoleBackendMixin, viewsets.ViewSet):
    """
    ViewSet for one backend collection.

    Provides:
    - list: GET /console/{collection}/
    - create: POST /console/{collection}/
    - retrieve: GET /console/{collection}/{id}/
    - update: PUT /console/{collection}/{id}/
    - partial_update: PATCH /console/{collection}/{id}/
    - destroy: DELETE /console/{collection}/{id}/?confirm=true

    Subclasses set ``collection`` (backend path segment), ``serializer_class``
    and the labels used in messages.

    Permissions: Manager or Admin only
    """

    collection = None
    serializer_class = None
    label = 'Record'
    failure_label = 'record'
    plural_label = 'records'
    required_role = Role.MANAGER
    permission_classes = [IsConsoleManager]

    def filter_records(self, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Optionally filter the listed records based on query parameters.
        """
        return records

    def _list_records(self, client) -> List[Dict[str, Any]]:
        return client.list_resource(self.collection) or []

    def _reload(self) -> Dict[str, Any]:
        """
        Reload the collection after a mutation.

        A failed reload does not undo the mutation; the response then carries
        a warning instead of the collection.
        """
        try:
            return {'results': self.call_backend(self._list_records)}
        except (BackendError, SessionExpiredError) as e:
            logger.warning(f"Reloading {self.collection} after a mutation failed: {str(e)}")
            return {'results': None, 'warning': f"Failed to reload {self.plural_label}"}

    def list(self, request: Request) -> Response:
        try:
            records = self.call_backend(self._list_records)
        except (BackendError, SessionExpiredError) as e:
            return self.backend_error_response(e, f"Failed to load {self.plural_label}")

        records = self.filter_records(records)
        return Response({'count': len(records), 'results': records}, status=status.HTTP_200_OK)

    def retrieve(self, request: Request, pk=None) -> Response:
        try:
            record = self.call_backend(lambda client: client.get_resource(self.collection, pk))
        except (BackendError, SessionExpiredError) as e:
            return self.backend_error_response(e, f"Failed to load {self.failure_label}")
        return Response(record, status=status.HTTP_200_OK)

    def create(self, request: Request) -> Response:
        serializer = self.serializer_class(data=request.data, context={'action': self.action})
        if not serializer.is_valid():
            return self.validation_error_response(serializer, REQUIRED_FIELDS_MESSAGE)

        payload = serializer.backend_payload()
        logger.info(f"Creating {self.failure_label} in {self.collection}")
        try:
            created = self.call_backend(lambda client: client.create_resource(self.collection, payload))
        except (BackendError, SessionExpiredError) as e:
            return self.backend_error_response(e, f"Failed to add {self.failure_label}")

        return Response(
            self.success_payload(f"{self.label} added successfully!", record=created, **self._reload()),
            status=status.HTTP_201_CREATED
        )

    def update(self, request: Request, pk=None) -> Response:
        return self._update(request, pk, partial=False)

    def partial_update(self, request: Request, pk=None) -> Response:
        return self._update(request, pk, partial=True)

    def _update(self, request: Request, pk, partial: bool) -> Response:
        serializer = self.serializer_class(data=request.data, partial=partial, context={'action': self.action})
        if not serializer.is_valid():
            return self.validation_error_response(serializer, REQUIRED_FIELDS_MESSAGE)

        payload = serializer.backend_payload()
        logger.info(f"Updating {self.failure_label} {pk} in {self.collection}")
        try:
            updated = self.call_backend(lambda client: client.update_resource(self.collection, pk, payload))
        except (BackendError, SessionExpiredError) as e:
            return self.backend_error_response(e, f"Failed to update {self.failure_label}")

        return Response(
            self.success_payload(f"{self.label} updated successfully!", record=updated, **self._reload()),
            status=status.HTTP_200_OK
        )

    def destroy(self, request: Request, pk=None) -> Response:
        unconfirmed = self.confirmation_required()
        if unconfirmed is not None:
            return unconfirmed

        logger.info(f"Deleting {self.failure_label} {pk} from {self.collection}")
        try:
            self.call_backend(lambda client: client.delete_resource(self.collection, pk))
        except (BackendError, SessionExpiredError) as e:
            return self.backend_error_response(e, f"Failed to delete {self.failure_label}")

        return Response(
            self.success_payload(f"{self.label} deleted successfully!", **self._reload()),
            status=status.HTTP_200_OK
        )


class EmployeeViewSet(BackendResourceViewSet):
    collection = 'employees'
    serializer_class = EmployeeSerializer
    label = 'Employee'
    failure_label = 'employee'
    plural_label = 'employees'

    def filter_records(self, records):
        return filter_employees(records, self.request.query_params.get('search', '').strip())


class PartnerViewSet(BackendResourceViewSet):
    """
    Partners, plus GET /console/partners/directory/ which loads partners and
    WPS vendors together.
    """

    collection = 'partners'
    serializer_class = PartnerSerializer
    label = 'Partner'
    failure_label = 'partner'
    plural_label = 'partners'

    @action(detail=False, methods=['get'], url_path='directory')
    def directory(self, request: Request) -> Response:
        try:
            data = self.call_backend(load_partner_directory)
        except (AggregateLoadError, SessionExpiredError) as e:
            return self.backend_error_response(e, "Failed to load partners and vendors")

        return Response(
            {
                'partners': data['partners'] or [],
                'wps_vendors': data['wps_vendors'] or [],
            },
            status=status.HTTP_200_OK
        )


class WPSVendorViewSet(BackendResourceViewSet):
    collection = 'wps-vendors'
    serializer_class = WPSVendorSerializer
    label = 'WPS Vendor'
    failure_label = 'vendor'
    plural_label = 'vendors'


class WeeklyTripViewSet(BackendResourceViewSet):
    collection = 'weekly-trips'
    serializer_class = WeeklyTripSerializer
    label = 'Weekly trip'
    failure_label = 'weekly trip'
    plural_label = 'weekly trips'

    @action(detail=False, methods=['get'], url_path=r'employee/(?P<employee_id>\d+)')
    def by_employee(self, request: Request, employee_id=None) -> Response:
        """
        GET /console/weekly-trips/employee/{employee_id}/
        """
        try:
            trips = self.call_backend(lambda client: client.get_weekly_trips_by_employee(employee_id))
        except (BackendError, SessionExpiredError) as e:
            return self.backend_error_response(e, "Failed to load weekly trips")

        trips = trips or []
        return Response({'count': len(trips), 'results': trips}, status=status.HTTP_200_OK)


class DeductionViewSet(BackendResourceViewSet):
    """
    Deductions, plus GET /console/deductions/by-employee/?search= which groups
    every deduction under its employee with totals and averages.
    """

    collection = 'deductions'
    serializer_class = DeductionSerializer
    label = 'Deduction'
    failure_label = 'deduction'
    plural_label = 'deductions'

    @action(detail=False, methods=['get'], url_path='by-employee')
    def by_employee(self, request: Request) -> Response:
        try:
            data = self.call_backend(load_deduction_screen)
        except (AggregateLoadError, SessionExpiredError) as e:
            return self.backend_error_response(e, "Failed to load deductions")

        groups = group_deductions(data['deductions'] or [], data['employees'] or [])
        groups = filter_deduction_groups(groups, request.query_params.get('search', '').strip())

        return Response(
            {
                'count': len(groups),
                'results': [summarize_group(group) for group in groups],
            },
            status=status.HTTP_200_OK
        )
