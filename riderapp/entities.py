"""
Typed records for the backend payloads the console computes with.

Only deductions are typed: their five amount fields are summed client-side,
so missing amounts are defaulted to zero here, once, instead of at every use
site. Every other backend entity is passed through as a plain dict.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


DEDUCTION_AMOUNT_FIELDS = ('vendor_fee', 'traffic_fine', 'loan_fine', 'training_fee', 'others')


def to_decimal(value: Any) -> Decimal:
    """Convert a backend amount to Decimal, treating null/blank as zero."""
    if value is None or value == '':
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        logger.warning(f"Non-numeric amount {value!r} treated as 0")
        return Decimal('0')


@dataclass
class Deduction:
    deduction_id: Optional[int]
    employee_id: int
    monthstart_date: str = ''
    vendor_fee: Decimal = Decimal('0')
    traffic_fine: Decimal = Decimal('0')
    loan_fine: Decimal = Decimal('0')
    training_fee: Decimal = Decimal('0')
    others: Decimal = Decimal('0')
    remarks: str = ''

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'Deduction':
        amounts = {name: to_decimal(payload.get(name)) for name in DEDUCTION_AMOUNT_FIELDS}
        return cls(
            deduction_id=payload.get('deduction_id'),
            employee_id=payload.get('employee_id'),
            monthstart_date=payload.get('monthstart_date') or '',
            remarks=payload.get('remarks') or '',
            **amounts
        )

    @property
    def total(self) -> Decimal:
        return sum((getattr(self, name) for name in DEDUCTION_AMOUNT_FIELDS), Decimal('0'))

    def to_payload(self) -> Dict[str, Any]:
        data = {
            'deduction_id': self.deduction_id,
            'employee_id': self.employee_id,
            'monthstart_date': self.monthstart_date,
            'remarks': self.remarks,
        }
        for name in DEDUCTION_AMOUNT_FIELDS:
            data[name] = getattr(self, name)
        return data


@dataclass
class EmployeeDeductions:
    """Deductions of one employee with their running total."""
    employee_id: int
    employee_name: str
    deductions: List[Deduction] = field(default_factory=list)
    total_amount: Decimal = Decimal('0')

    def add(self, deduction: Deduction) -> None:
        self.deductions.append(deduction)
        self.total_amount += deduction.total
