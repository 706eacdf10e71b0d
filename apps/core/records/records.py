"""Typed records handed out by the access layer.

Rows coming back from storage are plain mappings (``QuerySet.values()``).
Each ``from_row`` maps one onto an explicit, immutable record, applying a
documented default for unknown enum values or raising ``MalformedRow`` when
the row cannot be trusted by the metrics code.
"""
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from apps.academics.attendance.models import AttendanceRecord as AttendanceModel
from apps.academics.leads.models import Lead
from apps.academics.students.models import COURSE_BASIC, COURSES, Student
from apps.finance.expenses.models import Expense
from apps.finance.payments.models import Payment
from apps.operations.communication.models import Notice

ZERO = Decimal('0')


class MalformedRow(ValueError):
    pass


def _decimal(value, *, field_name, required=True):
    if value is None or value == '':
        if required:
            raise MalformedRow(f"{field_name} is missing")
        return ZERO
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise MalformedRow(f"{field_name} is not a number: {value!r}")


def _date(value, *, field_name, required=False):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value in (None, ''):
        if required:
            raise MalformedRow(f"{field_name} is missing")
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise MalformedRow(f"{field_name} is not an ISO date: {value!r}")


def _int(value, *, field_name, default=None):
    if value in (None, ''):
        if default is None:
            raise MalformedRow(f"{field_name} is missing")
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise MalformedRow(f"{field_name} is not an integer: {value!r}")


def _text(value):
    return '' if value is None else str(value)


def normalize_lead_status(value):
    status = _text(value).strip().lower()
    status = Lead.STATUS_ALIASES.get(status, status)
    valid = {choice for choice, _ in Lead.STATUS_CHOICES}
    return status if status in valid else None


@dataclass(frozen=True)
class LeadRecord:
    id: int
    name: str
    phone: str = ''
    email: str = ''
    course: str = COURSE_BASIC
    status: str = Lead.STATUS_NEW
    source: str = ''
    follow_up_date: Optional[date] = None
    notes: str = ''
    created_at: Optional[datetime] = None

    kind = 'leads'

    @classmethod
    def from_row(cls, row):
        name = _text(row.get('name')).strip()
        if not name:
            raise MalformedRow('lead name is missing')
        course = _text(row.get('course'))
        return cls(
            id=row.get('id'),
            name=name,
            phone=_text(row.get('phone')),
            email=_text(row.get('email')),
            course=course if course in COURSES else COURSE_BASIC,
            status=normalize_lead_status(row.get('status')) or Lead.STATUS_NEW,
            source=_text(row.get('source')),
            follow_up_date=_date(row.get('follow_up_date'), field_name='follow_up_date'),
            notes=_text(row.get('notes')),
            created_at=row.get('created_at'),
        )


@dataclass(frozen=True)
class StudentRecord:
    id: int
    name: str
    total_sessions: int
    roll_number: str = ''
    dob: Optional[date] = None
    photo: str = ''
    course: str = COURSE_BASIC
    batch: str = ''
    enrollment_date: Optional[date] = None
    validity_start: Optional[date] = None
    validity_end: Optional[date] = None
    base_fee: Decimal = ZERO
    fee_amount: Decimal = ZERO
    discount_percent: Decimal = ZERO
    discount_amount: Decimal = ZERO
    payment_plan: str = ''
    status: str = Student.STATUS_ACTIVE
    whatsapp: str = ''
    email: str = ''
    father_name: str = ''
    father_contact: str = ''
    mother_name: str = ''
    mother_contact: str = ''
    guardian_name: str = ''
    emergency_contact: str = ''
    address: str = ''
    school_name: str = ''
    source: str = ''
    notes: str = ''
    created_at: Optional[datetime] = None

    kind = 'students'

    @property
    def is_active(self):
        return self.status == Student.STATUS_ACTIVE

    @property
    def contact_numbers(self):
        numbers = [self.whatsapp, self.father_contact, self.mother_contact]
        return [number for number in numbers if number]

    @classmethod
    def from_row(cls, row):
        name = _text(row.get('name')).strip()
        if not name:
            raise MalformedRow('student name is missing')
        total_sessions = _int(row.get('total_sessions'), field_name='total_sessions')
        if total_sessions < 0:
            raise MalformedRow('total_sessions cannot be negative')
        status = _text(row.get('status'))
        valid_statuses = {choice for choice, _ in Student.STATUS_CHOICES}
        course = _text(row.get('course'))
        return cls(
            id=row.get('id'),
            name=name,
            total_sessions=total_sessions,
            roll_number=_text(row.get('roll_number')),
            dob=_date(row.get('dob'), field_name='dob'),
            photo=_text(row.get('photo')),
            course=course if course in COURSES else COURSE_BASIC,
            batch=_text(row.get('batch')),
            enrollment_date=_date(row.get('enrollment_date'), field_name='enrollment_date'),
            validity_start=_date(row.get('validity_start'), field_name='validity_start'),
            validity_end=_date(row.get('validity_end'), field_name='validity_end'),
            base_fee=_decimal(row.get('base_fee'), field_name='base_fee', required=False),
            fee_amount=_decimal(row.get('fee_amount'), field_name='fee_amount', required=False),
            discount_percent=_decimal(row.get('discount_percent'), field_name='discount_percent', required=False),
            discount_amount=_decimal(row.get('discount_amount'), field_name='discount_amount', required=False),
            payment_plan=_text(row.get('payment_plan')),
            status=status if status in valid_statuses else Student.STATUS_INACTIVE,
            whatsapp=_text(row.get('whatsapp')),
            email=_text(row.get('email')),
            father_name=_text(row.get('father_name')),
            father_contact=_text(row.get('father_contact')),
            mother_name=_text(row.get('mother_name')),
            mother_contact=_text(row.get('mother_contact')),
            guardian_name=_text(row.get('guardian_name')),
            emergency_contact=_text(row.get('emergency_contact')),
            address=_text(row.get('address')),
            school_name=_text(row.get('school_name')),
            source=_text(row.get('source')),
            notes=_text(row.get('notes')),
            created_at=row.get('created_at'),
        )


@dataclass(frozen=True)
class AttendanceRecord:
    student_id: int
    date: date
    status: str
    batch: str = ''
    id: Optional[int] = None

    kind = 'attendance'

    @property
    def attended(self):
        return self.status in (AttendanceModel.STATUS_PRESENT, AttendanceModel.STATUS_LATE)

    @classmethod
    def from_row(cls, row):
        status = _text(row.get('status')).lower()
        if status not in {choice for choice, _ in AttendanceModel.STATUS_CHOICES}:
            raise MalformedRow(f"unknown attendance status {status!r}")
        return cls(
            id=row.get('id'),
            student_id=_int(row.get('student_id'), field_name='student_id'),
            date=_date(row.get('date'), field_name='date', required=True),
            status=status,
            batch=_text(row.get('batch')),
        )


@dataclass(frozen=True)
class PaymentRecord:
    student_id: int
    amount: Decimal
    date: date
    status: str
    id: Optional[int] = None
    method: str = ''
    installment_no: int = 1
    total_installments: int = 1
    notes: str = ''

    kind = 'payments'

    @property
    def is_paid(self):
        return self.status == Payment.STATUS_PAID

    @property
    def is_pending(self):
        return self.status == Payment.STATUS_PENDING

    @classmethod
    def from_row(cls, row):
        status = _text(row.get('status')).lower()
        if status not in {choice for choice, _ in Payment.STATUS_CHOICES}:
            raise MalformedRow(f"unknown payment status {status!r}")
        return cls(
            id=row.get('id'),
            student_id=_int(row.get('student_id'), field_name='student_id'),
            amount=_decimal(row.get('amount'), field_name='amount'),
            date=_date(row.get('date'), field_name='date', required=True),
            status=status,
            method=_text(row.get('method')),
            installment_no=_int(row.get('installment_no'), field_name='installment_no', default=1),
            total_installments=_int(row.get('total_installments'), field_name='total_installments', default=1),
            notes=_text(row.get('notes')),
        )


@dataclass(frozen=True)
class ExpenseRecord:
    category: str
    amount: Decimal
    date: date
    id: Optional[int] = None
    description: str = ''
    method: str = ''

    kind = 'expenses'

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row.get('id'),
            category=Expense.normalize_category(row.get('category')),
            amount=_decimal(row.get('amount'), field_name='amount'),
            date=_date(row.get('date'), field_name='date', required=True),
            description=_text(row.get('description')),
            method=_text(row.get('method')),
        )


@dataclass(frozen=True)
class NoticeRecord:
    title: str
    date: date
    id: Optional[int] = None
    body: str = ''
    audience: str = Notice.AUDIENCE_ALL

    kind = 'notices'

    @classmethod
    def from_row(cls, row):
        audience = _text(row.get('audience'))
        valid_audiences = {choice for choice, _ in Notice.AUDIENCE_CHOICES}
        return cls(
            id=row.get('id'),
            title=_text(row.get('title')),
            date=_date(row.get('date'), field_name='date', required=True),
            body=_text(row.get('body')),
            audience=audience if audience in valid_audiences else Notice.AUDIENCE_ALL,
        )


@dataclass(frozen=True)
class StudioConfig:
    studio_name: str
    admin_whatsapp: str
    lead_api_key: str
    webhook_url: str = ''
    email_notifications: bool = True
    whatsapp_alerts: bool = True
    auto_follow_up: bool = False
    birthday_reminders: bool = True
    fee_reminders: bool = True
    id: Optional[int] = None

    kind = 'settings'
    TOGGLES = (
        'email_notifications',
        'whatsapp_alerts',
        'auto_follow_up',
        'birthday_reminders',
        'fee_reminders',
    )

    @classmethod
    def from_row(cls, row):
        return cls(
            id=row.get('id'),
            studio_name=_text(row.get('studio_name')),
            admin_whatsapp=_text(row.get('admin_whatsapp')),
            lead_api_key=_text(row.get('lead_api_key')),
            webhook_url=_text(row.get('webhook_url')),
            **{toggle: bool(row.get(toggle)) for toggle in cls.TOGGLES},
        )

    def as_dict(self, *, reveal_key=False):
        data = {
            'studio_name': self.studio_name,
            'admin_whatsapp': self.admin_whatsapp,
            'webhook_url': self.webhook_url,
            'lead_api_key': self.lead_api_key if reveal_key else mask_secret(self.lead_api_key),
        }
        data.update({toggle: getattr(self, toggle) for toggle in self.TOGGLES})
        return data


def mask_secret(value, visible=4):
    if not value:
        return ''
    if len(value) <= visible:
        return '*' * len(value)
    return '*' * (len(value) - visible) + value[-visible:]
