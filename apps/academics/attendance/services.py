import logging
from dataclasses import dataclass
from typing import Optional

from apps.core.records import access
from apps.core.records.errors import ValidationError

from .models import AttendanceRecord

logger = logging.getLogger(__name__)

ATTENDANCE_KIND = 'attendance'
VALID_STATUSES = tuple(choice for choice, _ in AttendanceRecord.STATUS_CHOICES)
ALL_BATCHES = 'All'


def _check_status(status):
    status = (status or '').strip().lower()
    if status not in VALID_STATUSES:
        raise ValidationError(
            f"'{status}' is not an attendance status.",
            details={'status': [f"Choose one of: {', '.join(VALID_STATUSES)}."]},
        )
    return status


def mark_attendance(*, student, on_date, status, actor=None):
    """Record one mark per student per day; marking again replaces the status."""
    status = _check_status(status)
    record, created = access.upsert(
        ATTENDANCE_KIND,
        {'student_id': student.id, 'date': on_date},
        {'status': status, 'batch': student.batch},
        actor=actor,
    )
    logger.info(
        '%s attendance for student %s on %s: %s',
        'Marked' if created else 'Updated',
        student.id,
        on_date,
        status,
    )
    return record


def mark_all(*, students, on_date, status, actor=None):
    return [mark_attendance(student=student, on_date=on_date, status=status, actor=actor) for student in students]


@dataclass(frozen=True)
class SheetRow:
    student: object
    status: Optional[str]


def batch_students(students, batch=ALL_BATCHES):
    active = [student for student in students if student.is_active]
    if batch and batch != ALL_BATCHES:
        active = [student for student in active if student.batch == batch]
    return active


def attendance_sheet(students, records, on_date, batch=ALL_BATCHES):
    """Active students in ``batch`` with their status for ``on_date`` (None if unmarked)."""
    marks = {record.student_id: record.status for record in records if record.date == on_date}
    return [SheetRow(student=student, status=marks.get(student.id)) for student in batch_students(students, batch)]


def sheet_counts(rows):
    counts = {status: 0 for status in VALID_STATUSES}
    counts['unmarked'] = 0
    for row in rows:
        counts[row.status or 'unmarked'] += 1
    return counts
