"""
Input serializers for the console's record screens.

Each serializer mirrors the Create/Update shape of a backend entity and
performs the checks the console runs before any request is sent.
"""

from rest_framework import serializers

from ..entities import DEDUCTION_AMOUNT_FIELDS
from .base import BackendPayloadSerializer

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"


def _required(**kwargs):
    return {'required': REQUIRED_FIELDS_MESSAGE, 'blank': REQUIRED_FIELDS_MESSAGE, 'null': REQUIRED_FIELDS_MESSAGE, **kwargs}


def _amount(**kwargs):
    return serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, **kwargs)


class EmployeeSerializer(BackendPayloadSerializer):
    """
    Employee create/update payload.
    Only the name is mandatory; new employees default to Active.
    """

    STATUS_CHOICES = [
        ('Active', 'Active'),
        ('Inactive', 'Inactive'),
    ]

    name = serializers.CharField(max_length=255, error_messages=_required())
    captain_id = serializers.CharField(max_length=100, required=False, allow_blank=True)
    person_code = serializers.CharField(max_length=100, required=False, allow_blank=True)
    card_no = serializers.CharField(max_length=100, required=False, allow_blank=True)
    wps_vendor_id = serializers.IntegerField(required=False, allow_null=True)
    designation = serializers.CharField(max_length=100, required=False, allow_blank=True)
    doj = serializers.DateField(required=False, allow_null=True, help_text="Date of joining")
    partner_id = serializers.IntegerField(required=False, allow_null=True)
    phone_no = serializers.CharField(max_length=50, required=False, allow_blank=True)
    emirates_id = serializers.CharField(max_length=50, required=False, allow_blank=True)
    passport_no = serializers.CharField(max_length=50, required=False, allow_blank=True)
    visa_status = serializers.CharField(max_length=50, required=False, allow_blank=True)
    training_fee = _amount(allow_null=True)
    training_fee_deduction = _amount(allow_null=True)
    status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False)

    def validate(self, data):
        # New employees start Active; updates keep whatever status the backend holds
        if self.context.get('action') == 'create' and 'status' not in data:
            data['status'] = 'Active'
        return data


class PartnerSerializer(BackendPayloadSerializer):
    partner_name = serializers.CharField(max_length=255, error_messages=_required())
    contact_person = serializers.CharField(max_length=255, required=False, allow_blank=True)
    contact_email = serializers.EmailField(required=False, allow_blank=True)


class WPSVendorSerializer(BackendPayloadSerializer):
    vendor_name = serializers.CharField(max_length=255, error_messages=_required())


class WeeklyTripSerializer(BackendPayloadSerializer):
    """
    Weekly trip create/update payload.
    """

    employee_id = serializers.IntegerField(error_messages=_required())
    week_start_date = serializers.DateField(error_messages=_required())
    week_end_date = serializers.DateField(error_messages=_required())
    total_working_hours = _amount(allow_null=True)
    total_orders = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    actual_order_pay = _amount(allow_null=True)
    excess_pay = _amount(allow_null=True)
    cod_collected = _amount(allow_null=True)
    upload_batch_id = serializers.IntegerField(required=False, allow_null=True)

    def validate(self, data):
        start = data.get('week_start_date')
        end = data.get('week_end_date')
        if start and end and end < start:
            raise serializers.ValidationError({
                'week_end_date': 'Week end date must be after week start date.'
            })
        return data


class DeductionSerializer(BackendPayloadSerializer):
    """
    Deduction create/update payload.

    At least one of the five deduction amounts must be non-zero.
    """

    employee_id = serializers.IntegerField(min_value=1, error_messages=_required(min_value=REQUIRED_FIELDS_MESSAGE))
    monthstart_date = serializers.DateField(error_messages=_required())
    vendor_fee = _amount(default=0)
    traffic_fine = _amount(default=0)
    loan_fine = _amount(default=0)
    training_fee = _amount(default=0)
    others = _amount(default=0)
    remarks = serializers.CharField(max_length=1000, required=False, allow_blank=True)

    def validate(self, data):
        """
        Reject deductions without any amount. Partial updates are only
        checked when they carry all five amounts.
        """
        provided = [name for name in DEDUCTION_AMOUNT_FIELDS if name in data]
        if self.partial and len(provided) < len(DEDUCTION_AMOUNT_FIELDS):
            return data

        if not any(data.get(name) for name in DEDUCTION_AMOUNT_FIELDS):
            raise serializers.ValidationError(
                "Please enter amount for at least one deduction type"
            )
        return data
