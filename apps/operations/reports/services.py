"""Read models for the admin dashboard and the parent portal.

Every resource is fetched on its own: a failure in one is reported under
``errors`` and the page is still built from whatever else loaded.
"""
import logging
from dataclasses import asdict

from django.conf import settings

from apps.academics.students.services import build_student_profile, linked_student_ids
from apps.core.metrics import services as metrics
from apps.core.records import access
from apps.core.records.errors import StudioError
from apps.operations.communication.notifications import BIRTHDAY, dispatch, render_template
from apps.operations.communication.services import visible_notices

logger = logging.getLogger(__name__)

RECENT_LEADS = 5
LATEST_NOTICES = 5


def load_resources(resources, *, actor=None):
    """Fetch each ``name -> (kind, filters)`` pair independently.

    Returns ``(data, errors)``; a resource that failed maps to an empty list
    in ``data`` and to its error message in ``errors``.
    """
    data, errors = {}, {}
    for name, (kind, filters) in resources.items():
        try:
            data[name] = access.fetch_all(kind, filters=filters, actor=actor)
        except StudioError as exc:
            logger.warning('Could not load %s for dashboard: %s', name, exc.message)
            data[name] = []
            errors[name] = exc.message
    return data, errors


def _newest_first(rows, key):
    return sorted(rows, key=lambda row: (getattr(row, key) is not None, getattr(row, key)), reverse=True)


def _birthday_entry(student, now):
    message = render_template(BIRTHDAY, student_name=student.name)
    return {
        'id': student.id,
        'name': student.name,
        'dob': student.dob,
        'days_until': metrics.days_until_birthday(student.dob, now),
        'whatsapp': dispatch(student.whatsapp, message).as_dict(),
    }


def build_dashboard(*, now, actor=None):
    data, errors = load_resources({
        'leads': ('leads', None),
        'students': ('students', None),
        'payments': ('payments', None),
        'attendance': ('attendance', None),
        'notices': ('notices', None),
    }, actor=actor)

    stats = metrics.dashboard_stats(data['leads'], data['students'], data['payments'], data['attendance'], now)
    counters = metrics.automation_counters(
        data['payments'],
        data['students'],
        data['attendance'],
        now,
        due_soon_days=settings.FEES_DUE_SOON_DAYS,
    )
    active_students = [student for student in data['students'] if student.is_active]
    birthdays = metrics.upcoming_birthdays(active_students, now, window_days=settings.BIRTHDAY_WINDOW_DAYS)

    return {
        'stats': asdict(stats),
        'automation': asdict(counters),
        'recent_leads': [asdict(lead) for lead in _newest_first(data['leads'], 'created_at')[:RECENT_LEADS]],
        'upcoming_birthdays': [_birthday_entry(student, now) for student in birthdays],
        'notices': [asdict(notice) for notice in _newest_first(data['notices'], 'date')[:LATEST_NOTICES]],
        'errors': errors,
    }


def build_portal(*, user, now):
    """Linked students with their derived numbers, plus notices for parents."""
    student_ids = sorted(linked_student_ids(user))
    if not student_ids:
        data, errors = load_resources({'notices': ('notices', None)}, actor=user)
        data.update(students=[], attendance=[], payments=[])
    else:
        data, errors = load_resources({
            'students': ('students', {'id__in': student_ids}),
            'attendance': ('attendance', {'student_id__in': student_ids}),
            'payments': ('payments', {'student_id__in': student_ids}),
            'notices': ('notices', None),
        }, actor=user)

    children = []
    for student in sorted(data['students'], key=lambda s: s.name.lower()):
        profile = build_student_profile(
            student,
            metrics.records_for_student(student.id, data['attendance']),
            [payment for payment in data['payments'] if payment.student_id == student.id],
            now,
        )
        children.append({'student': asdict(student), 'metrics': profile.as_dict()})

    notices = _newest_first(visible_notices(data['notices'], user), 'date')
    return {
        'students': children,
        'notices': [asdict(notice) for notice in notices],
        'errors': errors,
    }
