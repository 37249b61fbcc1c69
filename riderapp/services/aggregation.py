"""
Client-side aggregation helpers for the console screens.

All helpers are pure functions of their inputs: nothing is cached and no
input is mutated. They cover:
- grouping deductions per employee with running totals
- search filters used by the employee, deduction and salary report screens
- chronological ordering of month-labelled series
- the single money formatter every report view uses
- payment status derivation for uploaded limo payments
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..entities import Deduction, EmployeeDeductions, to_decimal


MONTH_ORDER = {
    'Jan': 1, 'Feb': 2, 'Mar': 3, 'Apr': 4, 'May': 5, 'Jun': 6,
    'Jul': 7, 'Aug': 8, 'Sep': 9, 'Oct': 10, 'Nov': 11, 'Dec': 12,
}

DEDUCTION_TYPE_LABELS = (
    ('vendor_fee', 'Vendor'),
    ('traffic_fine', 'Traffic'),
    ('loan_fine', 'Loan'),
    ('training_fee', 'Training'),
    ('others', 'Others'),
)

SALARY_MONEY_FIELDS = (
    'actual_order_pay',
    'total_excess_pay',
    'gross_pay',
    'total_cod',
    'vendor_fee',
    'traffic_fine',
    'loan_fine',
    'training_fee',
    'net_salary',
)

PAYMENT_MONEY_FIELDS = (
    'total_driver_base_cost',
    'total_driver_other_cost',
    'total_driver_payment',
    'tips',
)

DEDUCTION_MONEY_FIELDS = tuple(name for name, _ in DEDUCTION_TYPE_LABELS)

PLACEHOLDER = '-'


def _as_deduction(item) -> Deduction:
    return item if isinstance(item, Deduction) else Deduction.from_payload(item)


def deduction_total(deduction) -> Decimal:
    """Sum of the five amount fields of one deduction (missing amounts are 0)."""
    return _as_deduction(deduction).total


def group_deductions(deductions: Iterable, employees: Iterable[Mapping[str, Any]]) -> List[EmployeeDeductions]:
    """
    Group deductions per employee.

    Deductions referencing an unknown employee are dropped. Groups appear in
    the order their employee is first seen in the deduction list.
    """
    names = {}
    for employee in employees:
        names.setdefault(employee.get('employee_id'), employee.get('name') or '')

    groups: Dict[Any, EmployeeDeductions] = {}
    for item in deductions:
        deduction = _as_deduction(item)
        if deduction.employee_id not in names:
            continue
        group = groups.get(deduction.employee_id)
        if group is None:
            group = EmployeeDeductions(
                employee_id=deduction.employee_id,
                employee_name=names[deduction.employee_id],
            )
            groups[deduction.employee_id] = group
        group.add(deduction)

    return list(groups.values())


def filter_deduction_groups(groups: Sequence[EmployeeDeductions], term: Optional[str]) -> List[EmployeeDeductions]:
    """Match employee name case-insensitively, or employee id as a substring."""
    if not term:
        return list(groups)
    lowered = term.lower()
    return [
        group for group in groups
        if lowered in group.employee_name.lower() or term in str(group.employee_id)
    ]


def most_common_deduction_type(deductions: Iterable) -> Optional[str]:
    """
    Most frequent deduction type among non-zero amounts.

    Ties go to the label encountered last among those with the highest count.
    """
    labels = []
    for item in deductions:
        deduction = _as_deduction(item)
        for name, label in DEDUCTION_TYPE_LABELS:
            if getattr(deduction, name) > 0:
                labels.append(label)

    if not labels:
        return None
    # sorted() is stable, so the last element is the last-seen maximum
    return sorted(labels, key=labels.count)[-1]


def average_deduction(group: EmployeeDeductions) -> Decimal:
    """Mean deduction total rounded half-up to a whole amount; 0 for no deductions."""
    if not group.deductions:
        return Decimal('0')
    mean = group.total_amount / len(group.deductions)
    return mean.quantize(Decimal('1'), rounding=ROUND_HALF_UP)


def summarize_group(group: EmployeeDeductions) -> Dict[str, Any]:
    """Serializable view of one employee's deductions with display values."""
    return {
        'employee_id': group.employee_id,
        'employee_name': group.employee_name,
        'total_amount': group.total_amount,
        'total_amount_display': format_currency(group.total_amount, prefix='AED'),
        'average_amount': average_deduction(group),
        'most_common_type': most_common_deduction_type(group.deductions) or 'None',
        'record_count': len(group.deductions),
        'deductions': [
            {
                **deduction.to_payload(),
                'total': deduction.total,
                'display': format_money_fields(deduction.to_payload(), DEDUCTION_MONEY_FIELDS, prefix='AED'),
            }
            for deduction in group.deductions
        ],
    }


def month_number(label: Any) -> int:
    tokens = str(label or '').split()
    if not tokens:
        return 0
    return MONTH_ORDER.get(tokens[0], 0)


def sort_by_month(records: Iterable[Mapping[str, Any]], key: str = 'month') -> List[Mapping[str, Any]]:
    """Return records sorted by calendar month of ``record[key]``; unknown months first."""
    return sorted(records, key=lambda record: month_number(record.get(key)))


def format_currency(value: Any, prefix: Optional[str] = None) -> str:
    """
    Render an amount for display.

    Zero, null, missing and non-finite amounts render as a dash, as do
    amounts too large to round to three decimals. Anything else gets
    thousands separators and at most three fractional digits.
    """
    amount = to_decimal(value)
    if not amount.is_finite() or amount == 0:
        return PLACEHOLDER

    try:
        rounded = amount.quantize(Decimal('0.001'), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return PLACEHOLDER
    text = f"{rounded:,.3f}".rstrip('0').rstrip('.')
    return f"{prefix} {text}" if prefix else text


def format_money_fields(record: Mapping[str, Any], fields: Sequence[str], prefix: Optional[str] = None) -> Dict[str, str]:
    return {name: format_currency(record.get(name), prefix=prefix) for name in fields}


def with_display(records: Iterable[Mapping[str, Any]], fields: Sequence[str]) -> List[Dict[str, Any]]:
    """Copy each record and attach a ``display`` dict of formatted money fields."""
    return [{**record, 'display': format_money_fields(record, fields)} for record in records]


def payment_status(payment: Mapping[str, Any]) -> str:
    if to_decimal(payment.get('total_driver_payment')) > 0:
        return 'Completed'
    return 'Pending'


def filter_employees(employees: Iterable[Mapping[str, Any]], term: Optional[str]) -> List[Mapping[str, Any]]:
    """Match employee name or captain id, case-insensitively."""
    if not term:
        return list(employees)
    lowered = term.lower()
    return [
        employee for employee in employees
        if lowered in str(employee.get('name') or '').lower()
        or lowered in str(employee.get('captain_id') or '').lower()
    ]


def filter_salary_reports(reports: Iterable[Mapping[str, Any]], term: Optional[str]) -> List[Mapping[str, Any]]:
    """Match name case-insensitively, or captain id / person code as substrings."""
    if not term:
        return list(reports)
    lowered = term.lower()
    matched = []
    for report in reports:
        name = str(report.get('name') or '').lower()
        captain_id = str(report.get('careem_captain_id') or '')
        person_code = str(report.get('person_code') or '')
        if lowered in name or term in captain_id or term in person_code:
            matched.append(report)
    return matched


def salary_summary(reports: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    net_payout = sum((to_decimal(report.get('net_salary')) for report in reports), Decimal('0'))
    return {
        'total_employees': len(reports),
        'net_payout': net_payout,
        'net_payout_display': format_currency(net_payout),
    }


def report_month(from_date) -> str:
    """``YYYY-MM`` key of the month a report period starts in."""
    if hasattr(from_date, 'strftime'):
        return from_date.strftime('%Y-%m')
    return str(from_date)[:7]
