from rest_framework import serializers

from ..session import Role
from .base import BackendPayloadSerializer
from .records import REQUIRED_FIELDS_MESSAGE


class ConsoleSettingsSerializer(BackendPayloadSerializer):
    """
    System settings editable by admins.
    """

    company_name = serializers.CharField(max_length=255)
    training_fee = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    cutoff_date = serializers.IntegerField(
        min_value=1,
        max_value=31,
        help_text="Day of month on which the payroll cutoff falls"
    )
    email_notifications = serializers.BooleanField()
    auto_generate_reports = serializers.BooleanField(
        help_text="Generate last month's salary report automatically at the start of each month"
    )


class ConsoleUserSerializer(BackendPayloadSerializer):
    name = serializers.CharField(
        max_length=255,
        error_messages={'required': REQUIRED_FIELDS_MESSAGE, 'blank': REQUIRED_FIELDS_MESSAGE}
    )
    email = serializers.EmailField(
        error_messages={'required': REQUIRED_FIELDS_MESSAGE, 'blank': REQUIRED_FIELDS_MESSAGE}
    )
    role = serializers.ChoiceField(
        choices=Role.choices,
        error_messages={'required': REQUIRED_FIELDS_MESSAGE, 'blank': REQUIRED_FIELDS_MESSAGE}
    )
    password = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
