"""
Management command to generate a monthly salary report manually.
"""

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from riderapp.serializers.reports import MONTH_YEAR_PATTERN
from riderapp.tasks import auto_generate_salary_reports, generate_salary_report_task, previous_month


class Command(BaseCommand):
    help = 'Generate a monthly salary report through the backend'

    def add_arguments(self, parser):
        parser.add_argument(
            '--month',
            type=str,
            help='Month to generate in YYYY-MM format (defaults to last month)'
        )
        parser.add_argument(
            '--auto',
            action='store_true',
            help='Behave like the monthly schedule: only generate if auto generation is enabled'
        )
        parser.add_argument(
            '--async',
            action='store_true',
            help='Run the task asynchronously through Celery'
        )

    def handle(self, *args, **options):
        month_year = options.get('month') or previous_month(timezone.localdate())
        run_async = options.get('async', False)

        if not MONTH_YEAR_PATTERN.match(month_year):
            raise CommandError(f"Invalid month '{month_year}', expected YYYY-MM")

        try:
            if options.get('auto'):
                self.stdout.write("Running scheduled salary report generation...")
                task = auto_generate_salary_reports
                args = ()
            else:
                self.stdout.write(f"Generating salary report for {month_year} (async={run_async})")
                task = generate_salary_report_task
                args = (month_year,)

            if run_async:
                result = task.delay(*args)
                self.stdout.write(self.style.SUCCESS(f"Task queued with ID: {result.id}"))
            else:
                result = task(*args)
                self.stdout.write(self.style.SUCCESS(f"Result: {result}"))

        except Exception as e:
            raise CommandError(f"Error generating salary report: {str(e)}")
