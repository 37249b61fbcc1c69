import re

from rest_framework import serializers

from ..services.aggregation import report_month

MONTH_YEAR_PATTERN = re.compile(r'^\d{4}-(0[1-9]|1[0-2])$')

EXCEL_EXTENSIONS = ('.xlsx', '.xls')


class SalaryReportGenerateSerializer(serializers.Serializer):
    """
    Input serializer for generating a monthly salary report.
    The report month is taken from the start of the selected date range.
    """

    from_date = serializers.DateField(
        error_messages={'required': "Please select both from and to dates", 'null': "Please select both from and to dates"},
        help_text="First day of the report period"
    )
    to_date = serializers.DateField(
        error_messages={'required': "Please select both from and to dates", 'null': "Please select both from and to dates"},
        help_text="Last day of the report period"
    )
    run_async = serializers.BooleanField(
        default=False,
        help_text="Queue generation as a background task instead of waiting for it"
    )

    def validate(self, data):
        if data['from_date'] > data['to_date']:
            raise serializers.ValidationError({
                'from_date': 'From date must be before to date'
            })
        data['month_year'] = report_month(data['from_date'])
        return data


class SalaryReportExportSerializer(serializers.Serializer):
    FORMAT_CHOICES = [
        ('pdf', 'PDF'),
        ('excel', 'Excel'),
    ]

    format = serializers.ChoiceField(choices=FORMAT_CHOICES, default='pdf')
    month_year = serializers.CharField(required=False)
    from_date = serializers.DateField(required=False)

    def validate(self, data):
        month_year = data.get('month_year')
        if not month_year and data.get('from_date'):
            month_year = report_month(data['from_date'])

        if not month_year:
            raise serializers.ValidationError(
                "Provide month_year (YYYY-MM) or from_date"
            )
        if not MONTH_YEAR_PATTERN.match(month_year):
            raise serializers.ValidationError({
                'month_year': 'month_year must be in YYYY-MM format'
            })

        data['month_year'] = month_year
        return data


class PaymentUploadSerializer(serializers.Serializer):
    file = serializers.FileField(
        error_messages={'required': "Please select a file first"},
        help_text="Limo payment spreadsheet (.xlsx or .xls)"
    )

    def validate_file(self, value):
        if not value.name.lower().endswith(EXCEL_EXTENSIONS):
            raise serializers.ValidationError(
                "Please select an Excel file (.xlsx or .xls)"
            )
        return value
