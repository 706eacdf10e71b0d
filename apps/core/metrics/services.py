"""Derived metrics computed over already-fetched records.

Everything here is pure: inputs are sequences of records from
``apps.core.records.records`` (or anything with the same attributes) and
nothing touches storage, the clock or the network. Errors are never caught
here; callers only invoke these after their fetches succeeded.
"""
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from django.utils import timezone

STATUS_PRESENT = 'present'
STATUS_LATE = 'late'
STATUS_ABSENT = 'absent'
PAYMENT_PAID = 'paid'
PAYMENT_PENDING = 'pending'
STUDENT_ACTIVE = 'active'
LEAD_NEW = 'new'
EXPENSE_OTHER = 'Other'

ZERO = Decimal('0')
HUNDRED = Decimal('100')
SECONDS_PER_DAY = 86400


def round_half_up(value) -> int:
    return int(Decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def _as_date(value):
    if isinstance(value, datetime):
        # Aware datetimes are read in the studio's TIME_ZONE.
        return timezone.localtime(value).date() if timezone.is_aware(value) else value.date()
    return value


@dataclass(frozen=True)
class AttendanceSummary:
    present_count: int
    late_count: int
    absent_count: int
    percent: int

    @property
    def total_marked(self):
        return self.present_count + self.late_count + self.absent_count

    @property
    def sessions_attended(self):
        return self.present_count + self.late_count


def attendance_rate(records) -> AttendanceSummary:
    """Summarise one student's attendance.

    Only one mark per day counts; if the same date appears twice the later
    record wins. With no records the percentage is 0.
    """
    by_date = {}
    for record in records:
        by_date[record.date] = record.status

    statuses = list(by_date.values())
    present = statuses.count(STATUS_PRESENT)
    late = statuses.count(STATUS_LATE)
    absent = statuses.count(STATUS_ABSENT)
    total_marked = len(by_date)

    if total_marked == 0:
        percent = 0
    else:
        percent = round_half_up(Decimal(100 * (present + late)) / Decimal(total_marked))

    return AttendanceSummary(
        present_count=present,
        late_count=late,
        absent_count=absent,
        percent=percent,
    )


def sessions_attended(records) -> int:
    return attendance_rate(records).sessions_attended


def sessions_remaining(total_sessions, records) -> int:
    return max(0, int(total_sessions) - sessions_attended(records))


def records_for_student(student_id, attendance_records):
    return [record for record in attendance_records if record.student_id == student_id]


def certificate_eligible(student, attendance_records) -> bool:
    """True once attended sessions reach the course total.

    Reaching exactly ``total_sessions`` qualifies. A student with
    ``total_sessions == 0`` is always eligible.
    """
    attended = sessions_attended(records_for_student(student.id, attendance_records))
    return attended >= student.total_sessions


def payment_totals(payments):
    paid = sum((p.amount for p in payments if p.status == PAYMENT_PAID), ZERO)
    pending = sum((p.amount for p in payments if p.status == PAYMENT_PENDING), ZERO)
    return paid, pending


def fee_progress(payments, fee_amount) -> int:
    """Percentage of ``fee_amount`` covered by paid payments.

    Not clamped: overpayment yields more than 100. A zero fee yields 0.
    """
    fee_amount = Decimal(fee_amount or 0)
    if fee_amount <= ZERO:
        return 0
    paid, _ = payment_totals(payments)
    return round_half_up(HUNDRED * paid / fee_amount)


def progress_bar_width(progress) -> int:
    return max(0, min(100, int(progress)))


@dataclass(frozen=True)
class DiscountedFee:
    fee_amount: Decimal
    discount_value: Decimal
    final_fee: Decimal


def discounted_fee(fee_amount, discount_percent=0, discount_amount=0) -> DiscountedFee:
    """Apply either a percentage or a flat discount.

    A nonzero percentage takes precedence and the flat amount is ignored.
    The result never goes below zero.
    """
    fee_amount = Decimal(fee_amount or 0)
    discount_percent = Decimal(discount_percent or 0)
    discount_amount = Decimal(discount_amount or 0)

    if discount_percent > ZERO:
        discount_value = Decimal(round_half_up(fee_amount * discount_percent / HUNDRED))
    else:
        discount_value = max(ZERO, discount_amount)

    return DiscountedFee(
        fee_amount=fee_amount,
        discount_value=discount_value,
        final_fee=max(ZERO, fee_amount - discount_value),
    )


def derive_validity_end(validity_start, total_sessions):
    """Start plus ceil(total_sessions / 4) weeks."""
    weeks = math.ceil(int(total_sessions) / 4) if total_sessions else 0
    return validity_start + timedelta(weeks=weeks)


def validity_days_left(validity_end, now) -> int:
    if validity_end is None:
        return 0
    if not isinstance(validity_end, datetime):
        validity_end = datetime.combine(validity_end, time.min)
        if timezone.is_aware(now):
            validity_end = timezone.make_aware(validity_end, timezone.get_current_timezone())
    seconds = (validity_end - now).total_seconds()
    return max(0, math.ceil(seconds / SECONDS_PER_DAY))


def _occurrence_in_year(dob, year):
    try:
        return dob.replace(year=year)
    except ValueError:
        # 29 February in a non-leap year falls on 1 March.
        return date(year, 3, 1)


def upcoming_birthdays(students, now, window_days=30):
    """Students whose birthday this calendar year falls in [today, today + window].

    Birthdays that already passed this year are left out rather than rolled
    forward to next year, so a late-December window does not wrap into
    January.
    """
    today = _as_date(now)
    window_end = today + timedelta(days=window_days)
    upcoming = []
    for student in students:
        if not student.dob:
            continue
        occurrence = _occurrence_in_year(student.dob, today.year)
        if today <= occurrence <= window_end:
            upcoming.append((occurrence, student))
    upcoming.sort(key=lambda item: item[0])
    return [student for _, student in upcoming]


def days_until_birthday(dob, now) -> Optional[int]:
    """Days to the next birthday, rolling over to next year once passed."""
    if not dob:
        return None
    today = _as_date(now)
    occurrence = _occurrence_in_year(dob, today.year)
    if occurrence < today:
        occurrence = _occurrence_in_year(dob, today.year + 1)
    return (occurrence - today).days


@dataclass(frozen=True)
class AutomationCounters:
    fees_due_soon: int
    overdue_payments: int
    certificates_ready: int
    expired_validity: int


def automation_counters(payments, students, attendance, now, due_soon_days=3) -> AutomationCounters:
    today = _as_date(now)
    due_soon_end = today + timedelta(days=due_soon_days)
    pending = [p for p in payments if p.status == PAYMENT_PENDING]

    return AutomationCounters(
        fees_due_soon=sum(1 for p in pending if today <= p.date <= due_soon_end),
        overdue_payments=sum(1 for p in pending if p.date < today),
        certificates_ready=sum(1 for s in students if certificate_eligible(s, attendance)),
        expired_validity=sum(
            1
            for s in students
            if s.status == STUDENT_ACTIVE and s.validity_end and s.validity_end < today
        ),
    )


def next_due_payment(payments):
    pending = sorted(
        (p for p in payments if p.status == PAYMENT_PENDING),
        key=lambda p: p.date,
    )
    return pending[0] if pending else None


def monthly_total(rows, now, status=None):
    today = _as_date(now)
    return sum(
        (
            row.amount
            for row in rows
            if row.date.year == today.year
            and row.date.month == today.month
            and (status is None or row.status == status)
        ),
        ZERO,
    )


def category_totals(expenses, categories=()):
    totals = {category: ZERO for category in categories}
    for expense in expenses:
        category = expense.category if not categories or expense.category in categories else EXPENSE_OTHER
        totals[category] = totals.get(category, ZERO) + expense.amount
    return totals


@dataclass(frozen=True)
class DashboardStats:
    total_leads: int
    new_leads: int
    active_students: int
    total_students: int
    month_revenue: Decimal
    present_today: int


def dashboard_stats(leads, students, payments, attendance, now) -> DashboardStats:
    today = _as_date(now)
    return DashboardStats(
        total_leads=len(leads),
        new_leads=sum(1 for lead in leads if lead.status == LEAD_NEW),
        active_students=sum(1 for s in students if s.status == STUDENT_ACTIVE),
        total_students=len(students),
        month_revenue=monthly_total(payments, today, status=PAYMENT_PAID),
        present_today=sum(1 for a in attendance if a.date == today and a.status == STATUS_PRESENT),
    )
