from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.conf import settings

from apps.core.metrics import services as metrics
from apps.core.records import access
from apps.core.records.errors import AuthorizationError, ValidationError

from .models import StudentParentLink

logger = logging.getLogger(__name__)

STUDENTS_KIND = 'students'
FEE_FIELDS = ('base_fee', 'discount_percent', 'discount_amount')


def apply_discount(fields: dict) -> dict:
    """Derive ``fee_amount`` from the gross fee and whichever discount is set.

    Sending both a percentage and a flat amount is rejected rather than
    silently picking one.
    """
    fields = dict(fields)
    base_fee = Decimal(fields.get('base_fee') or 0)
    percent = Decimal(fields.get('discount_percent') or 0)
    amount = Decimal(fields.get('discount_amount') or 0)
    if percent and amount:
        raise ValidationError(
            'Use either a discount percentage or a flat discount amount, not both.',
            details={'discount_amount': ['Clear the percentage before setting a flat discount.']},
        )

    result = metrics.discounted_fee(base_fee, percent, amount)
    fields.update({
        'base_fee': base_fee,
        'discount_percent': percent,
        'discount_amount': amount,
        'fee_amount': result.final_fee,
    })
    return fields


def create_student(*, fields, actor=None):
    fields = apply_discount(fields)
    if not fields.get('validity_end'):
        fields.pop('validity_end', None)
    student = access.insert(STUDENTS_KIND, fields, actor=actor)
    logger.info('Enrolled student %s (%s)', student.id, student.roll_number)
    return student


def update_student(*, student_id, patch, actor=None):
    patch = dict(patch)
    if any(name in patch for name in FEE_FIELDS):
        current = access.fetch_one(STUDENTS_KIND, student_id, actor=actor)
        merged = {name: patch.get(name, getattr(current, name)) for name in FEE_FIELDS}
        patch.update(apply_discount(merged))
    return access.update(STUDENTS_KIND, student_id, patch, actor=actor)


def search_students(students, query='', *, status=None, batch=None):
    query = (query or '').strip().lower()
    results = []
    for student in students:
        if status and student.status != status:
            continue
        if batch and student.batch != batch:
            continue
        if query and query not in student.name.lower() and query not in student.roll_number.lower():
            continue
        results.append(student)
    return results


@dataclass(frozen=True)
class StudentProfile:
    student: object
    attendance: metrics.AttendanceSummary
    sessions_remaining: int
    certificate_eligible: bool
    fee_paid: Decimal
    fee_pending: Decimal
    fee_progress: int
    next_due: Optional[object]
    validity_days_left: int
    days_until_birthday: Optional[int]

    def as_dict(self):
        next_due = self.next_due
        return {
            'attendance': {
                'present': self.attendance.present_count,
                'late': self.attendance.late_count,
                'absent': self.attendance.absent_count,
                'percent': self.attendance.percent,
                'sessions_attended': self.attendance.sessions_attended,
                'sessions_remaining': self.sessions_remaining,
            },
            'certificate_eligible': self.certificate_eligible,
            'fees': {
                'paid': self.fee_paid,
                'pending': self.fee_pending,
                'progress': self.fee_progress,
                'bar_width': metrics.progress_bar_width(self.fee_progress),
                'next_due': (
                    {'id': next_due.id, 'amount': next_due.amount, 'date': next_due.date}
                    if next_due else None
                ),
            },
            'validity_days_left': self.validity_days_left,
            'days_until_birthday': self.days_until_birthday,
        }


def build_student_profile(student, attendance, payments, now) -> StudentProfile:
    """All derived numbers for one student; records must already be filtered to them."""
    summary = metrics.attendance_rate(attendance)
    paid, pending = metrics.payment_totals(payments)
    return StudentProfile(
        student=student,
        attendance=summary,
        sessions_remaining=max(0, student.total_sessions - summary.sessions_attended),
        certificate_eligible=metrics.certificate_eligible(student, attendance),
        fee_paid=paid,
        fee_pending=pending,
        fee_progress=metrics.fee_progress(payments, student.fee_amount),
        next_due=metrics.next_due_payment(payments),
        validity_days_left=metrics.validity_days_left(student.validity_end, now),
        days_until_birthday=metrics.days_until_birthday(student.dob, now),
    )


def load_student_profile(*, student_id, now, actor=None) -> StudentProfile:
    student = access.fetch_one(STUDENTS_KIND, student_id, actor=actor)
    attendance = access.fetch_all('attendance', filters={'student_id': student_id}, actor=actor)
    payments = access.fetch_all('payments', filters={'student_id': student_id}, actor=actor)
    return build_student_profile(student, attendance, payments, now)


@dataclass(frozen=True)
class CertificateCandidate:
    student: object
    sessions_attended: int
    eligible: bool


def certificate_candidates(students, attendance):
    """Active students with attended counts, eligible ones first."""
    candidates = []
    for student in students:
        if not student.is_active:
            continue
        records = metrics.records_for_student(student.id, attendance)
        candidates.append(CertificateCandidate(
            student=student,
            sessions_attended=metrics.sessions_attended(records),
            eligible=metrics.certificate_eligible(student, records),
        ))
    candidates.sort(key=lambda c: (not c.eligible, c.student.name.lower()))
    return candidates


def certificate_id(roll_number):
    prefix = f"{settings.STUDIO_ROLL_PREFIX}-"
    suffix = roll_number[len(prefix):] if roll_number.startswith(prefix) else roll_number
    return f"{settings.STUDIO_ROLL_PREFIX}-CERT-{suffix}"


def linked_student_ids(user):
    return set(StudentParentLink.objects.filter(parent_user=user).values_list('student_id', flat=True))


def ensure_can_view_student(user, student_id):
    if user.is_studio_admin:
        return
    if student_id not in linked_student_ids(user):
        raise AuthorizationError('This student is not linked to your account.')
