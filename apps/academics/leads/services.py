import logging
import re
from dataclasses import asdict, dataclass
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from apps.academics.students.models import COURSE_BASIC, COURSES
from apps.core.records import access
from apps.core.records.errors import DuplicateError, ValidationError
from apps.core.records.records import normalize_lead_status

from .models import Lead

logger = logging.getLogger(__name__)

LEADS_KIND = 'leads'
BOARD_COLUMNS = (
    Lead.STATUS_NEW,
    Lead.STATUS_CONTACTED,
    Lead.STATUS_DEMO,
    Lead.STATUS_CONVERTED,
    Lead.STATUS_NOT_INTERESTED,
)
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
NOTES_MAX_LENGTH = 500

PHONE_PATTERN = re.compile(r'^(\+91)?[6-9]\d{9}$')
EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
_PHONE_NOISE = re.compile(r'[\s\-()]')


def move_lead(*, lead_id, to_status, actor=None):
    """Move a lead to any board column.

    Every column is reachable from every other, including out of
    ``converted``; only the destination is checked.
    """
    status = normalize_lead_status(to_status)
    if status is None:
        raise ValidationError(
            f"'{to_status}' is not a lead status.",
            details={'status': [f"Choose one of: {', '.join(BOARD_COLUMNS)}."]},
        )
    lead = access.update(LEADS_KIND, lead_id, {'status': status}, actor=actor)
    logger.info('Lead %s moved to %s', lead_id, status)
    return lead


@dataclass(frozen=True)
class StudentDraft:
    name: str
    whatsapp: str
    email: str
    course: str
    notes: str
    source: str

    def as_dict(self):
        return asdict(self)


def convert_to_student(lead) -> StudentDraft:
    """Prefill for the student form. The lead itself is left untouched."""
    return StudentDraft(
        name=lead.name,
        whatsapp=lead.phone or '',
        email=lead.email or '',
        course=lead.course if lead.course in COURSES else COURSE_BASIC,
        notes=lead.notes or '',
        source=lead.source or '',
    )


def board_columns(leads):
    columns = {status: [] for status in BOARD_COLUMNS}
    for lead in leads:
        columns.setdefault(lead.status, []).append(lead)
    return columns


def clean_phone(phone):
    return _PHONE_NOISE.sub('', phone or '')


def is_valid_mobile(phone):
    return bool(PHONE_PATTERN.match(clean_phone(phone)))


def normalize_phone(phone):
    """Ten-digit mobile number without separators or the +91 prefix."""
    cleaned = clean_phone(phone)
    if cleaned.startswith('+91'):
        cleaned = cleaned[3:]
    return cleaned


def _text(value):
    return value.strip() if isinstance(value, str) else ''


def _registration_errors(data):
    errors = {}
    name = _text(data.get('name'))
    if not (NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH):
        errors['name'] = ['Valid name is required (2-100 chars).']

    phone = data.get('phone')
    if not isinstance(phone, str) or not is_valid_mobile(phone):
        errors['phone'] = ['Valid Indian phone number is required (10 digits starting with 6-9).']

    email = data.get('email')
    if email and (not isinstance(email, str) or not EMAIL_PATTERN.match(email.strip())):
        errors['email'] = ['Invalid email format.']
    return errors


def register_lead(data, *, now=None):
    """Public registration intake.

    Raises ``ValidationError`` for bad input and ``DuplicateError`` when the
    same number already registered inside the duplicate window.
    """
    errors = _registration_errors(data)
    if errors:
        first = next(iter(errors.values()))[0]
        raise ValidationError(first, details=errors)

    now = now or timezone.now()
    phone = normalize_phone(data['phone'])
    window_start = now - timedelta(hours=settings.REGISTRATION_DUPLICATE_WINDOW_HOURS)
    recent = access.fetch_all(LEADS_KIND, filters={'phone': phone, 'created_at__gte': window_start})
    if recent:
        logger.info('Rejected duplicate registration for a recently seen number')
        raise DuplicateError()

    course = data.get('course')
    notes = data.get('notes')
    lead = access.insert(
        LEADS_KIND,
        {
            'name': _text(data.get('name')),
            'phone': phone,
            'email': _text(data.get('email')),
            'course': course if course in COURSES else COURSE_BASIC,
            'source': Lead.SOURCE_REGISTRATION,
            'notes': notes[:NOTES_MAX_LENGTH] if isinstance(notes, str) else '',
            'status': Lead.STATUS_NEW,
        },
    )
    logger.info('Registered lead %s from public form', lead.id)
    return lead


def ingest_lead(data):
    """Server-to-server lead capture; the API key is checked by the caller."""
    name = _text(data.get('name'))
    if not name:
        raise ValidationError('Name is required.', details={'name': ['Name is required.']})

    course = data.get('course')
    lead = access.insert(
        LEADS_KIND,
        {
            'name': name,
            'phone': _text(data.get('phone')),
            'email': _text(data.get('email')),
            'course': course if course in COURSES else COURSE_BASIC,
            'source': _text(data.get('source')) or Lead.SOURCE_WEBSITE,
            'notes': _text(data.get('notes')),
            'status': Lead.STATUS_NEW,
        },
    )
    logger.info('Ingested lead %s from %s', lead.id, lead.source)
    return lead


def create_lead(*, fields, actor=None):
    fields = dict(fields)
    fields['course'] = fields.get('course') or COURSE_BASIC
    fields['source'] = fields.get('source') or Lead.SOURCE_WEBSITE
    fields.setdefault('status', Lead.STATUS_NEW)
    return access.insert(LEADS_KIND, fields, actor=actor)
