import logging

from apps.core.records import access

from .models import Notice
from .notifications import BIRTHDAY, CUSTOM, NOTICE, WELCOME, broadcast, render_template

logger = logging.getLogger(__name__)

NOTICES_KIND = 'notices'


def visible_notices(notices, user):
    if user.is_studio_admin:
        return list(notices)
    return [notice for notice in notices if notice.audience in Notice.PARENT_VISIBLE_AUDIENCES]


def create_notice(*, fields, created_by=None, actor=None):
    fields = dict(fields)
    if created_by is not None:
        fields['created_by_id'] = created_by.pk
    notice = access.insert(NOTICES_KIND, fields, actor=actor)
    logger.info('Published notice %s for %s', notice.id, notice.audience)
    return notice


def broadcast_notice(notice, students):
    """One composer link per active student's WhatsApp number."""
    message = render_template(NOTICE, title=notice.title, body=notice.body)
    return broadcast([student.whatsapp for student in students if student.is_active], message)


def student_message(template, student, text=''):
    if template == BIRTHDAY:
        return render_template(BIRTHDAY, student_name=student.name)
    if template == WELCOME:
        return render_template(WELCOME, student_name=student.name, course=student.course, batch=student.batch)
    return render_template(CUSTOM, student_name=student.name) + (text or '')
