"""
Tests for the client-side aggregation helpers.

This test module covers:
- Grouping deductions per employee with totals and orphan handling
- Search filters for deductions, employees and salary reports
- Most common deduction type and average deduction
- Calendar ordering of month-labelled series
- Currency formatting edge cases
"""

import copy
from datetime import date
from decimal import Decimal

from django.test import TestCase

from riderapp.entities import Deduction, EmployeeDeductions, to_decimal
from riderapp.services.aggregation import (
    average_deduction,
    deduction_total,
    filter_deduction_groups,
    filter_employees,
    filter_salary_reports,
    format_currency,
    format_money_fields,
    group_deductions,
    most_common_deduction_type,
    payment_status,
    report_month,
    salary_summary,
    sort_by_month,
    summarize_group,
)


EMPLOYEES = [
    {'employee_id': 1, 'name': 'Ali Hassan', 'captain_id': 'CAP-100'},
    {'employee_id': 12, 'name': 'Sara Khan', 'captain_id': 'CAP-200'},
]


class DeductionGroupingTestCase(TestCase):
    """Test cases for grouping deductions per employee."""

    def test_group_totals_and_orphans(self):
        deductions = [
            {'deduction_id': 1, 'employee_id': 1, 'vendor_fee': 100},
            {'deduction_id': 2, 'employee_id': 1, 'traffic_fine': 50},
            {'deduction_id': 3, 'employee_id': 99, 'others': 10},
        ]

        groups = group_deductions(deductions, [EMPLOYEES[0]])

        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].employee_id, 1)
        self.assertEqual(groups[0].employee_name, 'Ali Hassan')
        self.assertEqual(groups[0].total_amount, Decimal('150'))
        self.assertEqual(len(groups[0].deductions), 2)

    def test_group_total_equals_sum_of_members(self):
        deductions = [
            {'employee_id': 12, 'vendor_fee': '12.50', 'loan_fine': '7.25'},
            {'employee_id': 12, 'training_fee': 100, 'others': None},
        ]

        group = group_deductions(deductions, EMPLOYEES)[0]

        self.assertEqual(group.total_amount, sum(d.total for d in group.deductions))
        self.assertEqual(group.total_amount, Decimal('119.75'))

    def test_groups_in_first_seen_order(self):
        deductions = [
            {'employee_id': 12, 'others': 5},
            {'employee_id': 1, 'others': 5},
            {'employee_id': 12, 'others': 5},
        ]

        groups = group_deductions(deductions, EMPLOYEES)

        self.assertEqual([g.employee_id for g in groups], [12, 1])

    def test_missing_amounts_are_zero(self):
        self.assertEqual(deduction_total({'employee_id': 1}), Decimal('0'))
        self.assertEqual(deduction_total({'employee_id': 1, 'vendor_fee': None, 'others': ''}), Decimal('0'))

    def test_non_numeric_amount_is_zero(self):
        self.assertEqual(to_decimal('abc'), Decimal('0'))

    def test_inputs_are_not_mutated(self):
        deductions = [{'employee_id': 1, 'vendor_fee': 100}]
        group_deductions(deductions, EMPLOYEES)
        self.assertEqual(deductions, [{'employee_id': 1, 'vendor_fee': 100}])

    def test_filter_by_name_or_id(self):
        groups = group_deductions(
            [{'employee_id': 1, 'others': 1}, {'employee_id': 12, 'others': 1}],
            EMPLOYEES
        )

        self.assertEqual([g.employee_id for g in filter_deduction_groups(groups, 'sara')], [12])
        self.assertEqual([g.employee_id for g in filter_deduction_groups(groups, '1')], [1, 12])
        self.assertEqual([g.employee_id for g in filter_deduction_groups(groups, '12')], [12])
        self.assertEqual(len(filter_deduction_groups(groups, '')), 2)
        self.assertEqual(filter_deduction_groups(groups, 'nobody'), [])


class DeductionStatisticsTestCase(TestCase):
    """Test cases for per-employee deduction statistics."""

    def _group(self, *payloads):
        group = EmployeeDeductions(employee_id=1, employee_name='Ali')
        for payload in payloads:
            group.add(Deduction.from_payload({'employee_id': 1, **payload}))
        return group

    def test_most_common_type(self):
        group = self._group({'vendor_fee': 10}, {'vendor_fee': 20, 'traffic_fine': 5})
        self.assertEqual(most_common_deduction_type(group.deductions), 'Vendor')

    def test_most_common_type_tie_goes_to_last(self):
        group = self._group({'vendor_fee': 10, 'traffic_fine': 5})
        self.assertEqual(most_common_deduction_type(group.deductions), 'Traffic')

    def test_most_common_type_without_amounts(self):
        group = self._group({'vendor_fee': 0})
        self.assertIsNone(most_common_deduction_type(group.deductions))
        self.assertEqual(summarize_group(group)['most_common_type'], 'None')

    def test_average_rounds_half_up(self):
        group = self._group({'vendor_fee': 100}, {'vendor_fee': 51})
        self.assertEqual(average_deduction(group), Decimal('76'))

    def test_average_of_empty_group(self):
        group = EmployeeDeductions(employee_id=1, employee_name='Ali')
        self.assertEqual(average_deduction(group), Decimal('0'))

    def test_summarize_group(self):
        group = self._group({'deduction_id': 7, 'vendor_fee': 1000}, {'deduction_id': 8, 'others': 500})

        summary = summarize_group(group)

        self.assertEqual(summary['total_amount'], Decimal('1500'))
        self.assertEqual(summary['total_amount_display'], 'AED 1,500')
        self.assertEqual(summary['average_amount'], Decimal('750'))
        self.assertEqual(summary['record_count'], 2)
        self.assertEqual(summary['deductions'][0]['deduction_id'], 7)
        self.assertEqual(summary['deductions'][0]['display']['vendor_fee'], 'AED 1,000')
        self.assertEqual(summary['deductions'][0]['display']['others'], '-')


class MonthOrderingTestCase(TestCase):
    """Test cases for calendar ordering."""

    def test_sort_by_month(self):
        records = [
            {'month': 'Mar 2024', 'count': 3},
            {'month': 'Jan 2024', 'count': 1},
            {'month': 'Feb 2024', 'count': 2},
        ]

        ordered = sort_by_month(records)

        self.assertEqual([r['month'] for r in ordered], ['Jan 2024', 'Feb 2024', 'Mar 2024'])
        self.assertEqual(sort_by_month(ordered), ordered)

    def test_unknown_months_sort_first(self):
        records = [{'month': 'Feb'}, {'month': 'Someday'}, {'month': None}]

        ordered = sort_by_month(records)

        self.assertEqual(ordered[-1]['month'], 'Feb')

    def test_equal_months_keep_input_order(self):
        records = [
            {'month': 'Jan 2024', 'n': 1},
            {'month': 'Jan 2023', 'n': 2},
            {'month': 'Foo', 'n': 3},
            {'month': None, 'n': 4},
        ]

        ordered = sort_by_month(records)

        self.assertEqual([r['n'] for r in ordered], [3, 4, 1, 2])

    def test_input_is_left_untouched(self):
        records = [{'month': 'Mar'}, {'month': 'Jan'}, {'month': 'Feb'}]
        before = copy.deepcopy(records)

        ordered = sort_by_month(records)

        self.assertEqual(records, before)
        self.assertIsNot(ordered, records)

    def test_custom_key(self):
        records = [{'label': 'Dec'}, {'label': 'Jun'}]
        self.assertEqual(sort_by_month(records, key='label')[0]['label'], 'Jun')


class CurrencyFormattingTestCase(TestCase):
    """Test cases for the money formatter."""

    def test_zero_and_missing_render_as_dash(self):
        self.assertEqual(format_currency(0), '-')
        self.assertEqual(format_currency(None), '-')
        self.assertEqual(format_currency(''), '-')
        self.assertEqual(format_currency('0.00'), '-')

    def test_thousands_separators(self):
        self.assertEqual(format_currency(1500), '1,500')
        self.assertEqual(format_currency(1234567), '1,234,567')

    def test_fraction_digits(self):
        self.assertEqual(format_currency('1234.5'), '1,234.5')
        self.assertEqual(format_currency('1234.5678'), '1,234.568')
        self.assertEqual(format_currency(Decimal('0.25')), '0.25')

    def test_negative_amounts(self):
        self.assertEqual(format_currency(-1500), '-1,500')

    def test_prefix(self):
        self.assertEqual(format_currency(1500, prefix='AED'), 'AED 1,500')
        self.assertEqual(format_currency(0, prefix='AED'), '-')

    def test_non_finite_amounts_render_as_dash(self):
        self.assertEqual(format_currency('Infinity'), '-')
        self.assertEqual(format_currency(float('-inf')), '-')
        self.assertEqual(format_currency('NaN'), '-')

    def test_oversized_amount_renders_as_dash(self):
        self.assertEqual(format_currency('1' + '0' * 26), '-')
        self.assertEqual(
            format_money_fields({'net_salary': 'Infinity', 'gross_pay': 1500}, ('net_salary', 'gross_pay')),
            {'net_salary': '-', 'gross_pay': '1,500'}
        )


class ReportHelpersTestCase(TestCase):
    """Test cases for payment and salary report helpers."""

    def test_payment_status(self):
        self.assertEqual(payment_status({'total_driver_payment': 250}), 'Completed')
        self.assertEqual(payment_status({'total_driver_payment': 0}), 'Pending')
        self.assertEqual(payment_status({}), 'Pending')

    def test_filter_employees(self):
        self.assertEqual(len(filter_employees(EMPLOYEES, 'ALI')), 1)
        self.assertEqual(filter_employees(EMPLOYEES, 'cap-200')[0]['employee_id'], 12)
        self.assertEqual(len(filter_employees(EMPLOYEES, None)), 2)

    def test_filter_salary_reports(self):
        reports = [
            {'name': 'Ali Hassan', 'careem_captain_id': 555, 'person_code': 'P-1'},
            {'name': 'Sara Khan', 'careem_captain_id': None, 'person_code': 'P-2'},
        ]

        self.assertEqual(filter_salary_reports(reports, 'sara')[0]['name'], 'Sara Khan')
        self.assertEqual(filter_salary_reports(reports, '55')[0]['name'], 'Ali Hassan')
        self.assertEqual(filter_salary_reports(reports, 'P-2')[0]['name'], 'Sara Khan')
        self.assertEqual(filter_salary_reports(reports, 'p-2'), [])

    def test_salary_summary(self):
        summary = salary_summary([{'net_salary': '1000.50'}, {'net_salary': 2000}, {'net_salary': None}])

        self.assertEqual(summary['total_employees'], 3)
        self.assertEqual(summary['net_payout'], Decimal('3000.50'))
        self.assertEqual(summary['net_payout_display'], '3,000.5')

    def test_report_month(self):
        self.assertEqual(report_month(date(2024, 5, 17)), '2024-05')
        self.assertEqual(report_month('2024-06-01'), '2024-06')
