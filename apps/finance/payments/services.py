import logging

from apps.core.metrics import services as metrics
from apps.core.records import access
from apps.core.records.errors import ValidationError
from apps.operations.communication.notifications import FEE_REMINDER, dispatch, render_template

logger = logging.getLogger(__name__)

PAYMENTS_KIND = 'payments'


def record_payment(*, fields, actor=None):
    payment = access.insert(PAYMENTS_KIND, fields, actor=actor)
    logger.info(
        'Recorded %s payment %s for student %s (installment %s/%s)',
        payment.status,
        payment.id,
        payment.student_id,
        payment.installment_no,
        payment.total_installments,
    )
    return payment


def mark_paid(*, payment_id, actor=None):
    return access.update(PAYMENTS_KIND, payment_id, {'status': 'paid'}, actor=actor)


def parent_phone(student):
    return student.father_contact or student.mother_contact or student.whatsapp


def fee_reminder(payment, student):
    """Composer link reminding the parent about one pending payment."""
    phone = parent_phone(student)
    if not phone:
        raise ValidationError('No parent contact found.')
    message = render_template(FEE_REMINDER, student_name=student.name, amount=payment.amount, due_date=payment.date)
    return dispatch(phone, message)


def payment_overview(payments, now):
    paid, pending = metrics.payment_totals(payments)
    return {
        'total_collected': paid,
        'total_pending': pending,
        'collected_this_month': metrics.monthly_total(payments, now, status='paid'),
        'count': len(payments),
    }
