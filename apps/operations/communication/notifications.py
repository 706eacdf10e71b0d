"""WhatsApp message templates and composer links.

Nothing is delivered from the server: ``dispatch`` only builds the wa.me
composer URL that the admin opens. There is no delivery confirmation and no
retry, so a broadcast is simply one link per recipient.
"""
import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from urllib.parse import quote

from django.conf import settings

logger = logging.getLogger(__name__)

WA_BASE_URL = 'https://wa.me/'

FEE_REMINDER = 'fee_reminder'
WELCOME = 'welcome'
BIRTHDAY = 'birthday'
ATTENDANCE_ALERT = 'attendance_alert'
FOLLOW_UP = 'follow_up'
NOTICE = 'notice'
CUSTOM = 'custom'

_STRIP_CHARS = re.compile(r'[\s\-+]')


class TemplateError(ValueError):
    pass


def format_inr(amount) -> str:
    """Format a rupee amount with Indian digit grouping, e.g. 1,25,000."""
    value = Decimal(amount or 0)
    sign = '-' if value < 0 else ''
    value = abs(value)
    whole = int(value)
    fraction = value - whole

    digits = str(whole)
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ','.join(groups + [tail])

    if fraction:
        paise = f"{fraction:.2f}"[1:]
        return f"{sign}{digits}{paise}"
    return f"{sign}{digits}"


def format_long_date(value) -> str:
    return f"{value.day} {value.strftime('%B %Y')}"


def _batch_label(batch):
    return (batch or '').split(' (')[0]


def _fee_reminder(student_name, amount, due_date=None):
    due = f" on {format_long_date(due_date)}" if due_date else ' soon'
    return (
        f"Dear Parent,\n\nThis is a reminder that the fee of ₹{format_inr(amount)} for *{student_name}* "
        f"is due{due}.\n\nKindly complete the payment to continue uninterrupted classes at {settings.STUDIO_NAME}."
        f"\n\n- {settings.STUDIO_NAME}\nContact: {settings.STUDIO_CONTACT}"
    )


def _welcome(student_name, course, batch=''):
    return (
        f"Welcome to *{settings.STUDIO_NAME}*! \U0001f3a8\n\nDear Parent,\n\n"
        f"We're delighted to have *{student_name}* join our {course} course ({_batch_label(batch)} batch).\n\n"
        "Looking forward to a creative journey together! ✨"
    )


def _birthday(student_name):
    return (
        f"\U0001f382 *Happy Birthday, {student_name}!* \U0001f389\n\n"
        "Wishing you a wonderful day filled with colors and creativity!\n\n"
        f"From your {settings.STUDIO_NAME} family \U0001f3a8❤️"
    )


_ATTENDANCE_LABELS = {
    'absent': '❌ Absent',
    'late': '⏰ Late',
    'present': '✅ Present',
}


def _attendance_alert(student_name, date, status):
    label = _ATTENDANCE_LABELS.get(status, _ATTENDANCE_LABELS['present'])
    return (
        f"Attendance Update - *{settings.STUDIO_NAME}*\n\nStudent: *{student_name}*\nDate: {date}\n"
        f"Status: {label}\n\nPlease contact us for any queries."
    )


def _follow_up(lead_name, course=''):
    return (
        f"Hi *{lead_name}*! \U0001f44b\n\nThank you for your interest in our *{course}* course at "
        f"{settings.STUDIO_NAME}.\n\nWould you like to schedule a free demo class? "
        "We'd love to show you what we do! \U0001f3a8\n\nReply to this message or call us anytime."
    )


def _notice(title, body=''):
    return f"\U0001f4e2 *Notice - {settings.STUDIO_NAME}*\n\n*{title}*\n\n{body}\n\nThank you! \U0001f3a8"


def _custom(student_name):
    return f"Hi! Regarding *{student_name}* at {settings.STUDIO_NAME} -\n\n"


TEMPLATES = {
    FEE_REMINDER: _fee_reminder,
    WELCOME: _welcome,
    BIRTHDAY: _birthday,
    ATTENDANCE_ALERT: _attendance_alert,
    FOLLOW_UP: _follow_up,
    NOTICE: _notice,
    CUSTOM: _custom,
}


def render_template(kind, **params) -> str:
    try:
        template = TEMPLATES[kind]
    except KeyError:
        raise TemplateError(f"Unknown message template '{kind}'.")
    try:
        return template(**params)
    except TypeError as exc:
        raise TemplateError(f"Bad parameters for template '{kind}': {exc}")


def resolve_target(phone) -> str:
    """Strip spaces, hyphens and plus signs, then ensure the country code."""
    number = _STRIP_CHARS.sub('', phone or '')
    if not number:
        return ''
    country_code = settings.STUDIO_COUNTRY_CODE
    return number if number.startswith(country_code) else f"{country_code}{number}"


@dataclass(frozen=True)
class Dispatch:
    number: str
    message: str
    url: str

    def as_dict(self):
        return {'number': self.number, 'message': self.message, 'url': self.url}


def dispatch(phone, message='') -> Dispatch:
    number = resolve_target(phone)
    url = f"{WA_BASE_URL}{number}"
    if message:
        url = f"{url}?text={quote(message, safe='')}"
    logger.info('Prepared WhatsApp composer link for %s', number)
    return Dispatch(number=number, message=message, url=url)


def broadcast(phones, message):
    """One independent composer link per distinct, non-empty number."""
    seen = set()
    links = []
    for phone in phones:
        number = resolve_target(phone)
        if not number or number in seen:
            continue
        seen.add(number)
        links.append(dispatch(number, message))
    return links


def message_admin(message, admin_number=None):
    return dispatch(admin_number or settings.STUDIO_ADMIN_WHATSAPP, message)
