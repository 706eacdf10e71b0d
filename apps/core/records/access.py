"""Generic read/insert/update/delete over the studio's record kinds.

This is the only module that talks to the ORM on behalf of other apps'
business code. Storage exceptions are translated into the ``errors``
taxonomy here; nothing is retried, and callers re-fetch after a mutation
to observe the stored state.
"""
import logging
from contextlib import contextmanager

from django.apps import apps as django_apps
from django.core.exceptions import FieldError, ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError, transaction

from . import errors
from .records import (
    AttendanceRecord,
    ExpenseRecord,
    LeadRecord,
    MalformedRow,
    NoticeRecord,
    PaymentRecord,
    StudentRecord,
    StudioConfig,
)

logger = logging.getLogger(__name__)

KINDS = {
    'leads': ('leads.Lead', LeadRecord),
    'students': ('students.Student', StudentRecord),
    'attendance': ('attendance.AttendanceRecord', AttendanceRecord),
    'payments': ('payments.Payment', PaymentRecord),
    'expenses': ('expenses.Expense', ExpenseRecord),
    'notices': ('communication.Notice', NoticeRecord),
    'settings': ('studio.StudioSettings', StudioConfig),
}
PARENT_READABLE_KINDS = {'students', 'attendance', 'payments', 'notices'}


def _resolve(kind):
    try:
        model_label, record_cls = KINDS[kind]
    except KeyError:
        raise errors.ValidationError(f"Unknown record kind '{kind}'.")
    return django_apps.get_model(model_label), record_cls


def _authorize(actor, kind, write):
    if actor is None:
        return
    if not getattr(actor, 'is_authenticated', False):
        raise errors.AuthorizationError('Unauthorized', authenticated=False)
    if actor.role == 'admin':
        return
    if actor.role == 'parent' and not write and kind in PARENT_READABLE_KINDS:
        return
    raise errors.AuthorizationError(f"Role '{actor.role}' cannot {'modify' if write else 'read'} {kind}.")


def _validation_details(exc):
    if hasattr(exc, 'error_dict'):
        return {key: [str(message) for message in messages] for key, messages in exc.message_dict.items()}
    return {'__all__': [str(message) for message in exc.messages]}


def _validation_message(exc):
    details = _validation_details(exc)
    for messages in details.values():
        if messages:
            return messages[0]
    return errors.ValidationError.default_message


@contextmanager
def _storage_errors(kind):
    try:
        yield
    except DjangoValidationError as exc:
        raise errors.ValidationError(_validation_message(exc), details=_validation_details(exc))
    except ObjectDoesNotExist:
        raise errors.NotFoundError(f"No such record in {kind}.")
    except IntegrityError:
        logger.warning('Integrity error writing %s', kind)
        raise errors.ValidationError('Record conflicts with existing data.')
    except FieldError as exc:
        raise errors.ValidationError(str(exc))
    except DatabaseError:
        logger.exception('Storage failure while accessing %s', kind)
        raise errors.NetworkError()


def _row_of(instance):
    return {field.attname: getattr(instance, field.attname) for field in instance._meta.concrete_fields}


def _to_record(record_cls, row):
    try:
        return record_cls.from_row(row)
    except MalformedRow as exc:
        raise errors.ValidationError(f"Stored row is malformed: {exc}")


def _check_fields(model, fields):
    known = set()
    for field in model._meta.concrete_fields:
        known.add(field.name)
        known.add(field.attname)
    unknown = sorted(set(fields) - known)
    if unknown:
        raise errors.ValidationError(f"Unknown field(s): {', '.join(unknown)}.")


def fetch_all(kind, filters=None, order_by=None, actor=None):
    model, record_cls = _resolve(kind)
    _authorize(actor, kind, write=False)

    with _storage_errors(kind):
        queryset = model.objects.filter(**(filters or {}))
        if order_by:
            queryset = queryset.order_by(*order_by)
        rows = list(queryset.values())

    records = []
    for row in rows:
        try:
            records.append(record_cls.from_row(row))
        except MalformedRow as exc:
            logger.warning('Skipping malformed %s row id=%s: %s', kind, row.get('id'), exc)
    return records


def fetch_one(kind, pk, actor=None):
    model, record_cls = _resolve(kind)
    _authorize(actor, kind, write=False)

    with _storage_errors(kind):
        row = model.objects.filter(pk=pk).values().first()
    if row is None:
        raise errors.NotFoundError(f"No such record in {kind}.")
    return _to_record(record_cls, row)


def insert(kind, fields, actor=None):
    model, record_cls = _resolve(kind)
    _authorize(actor, kind, write=True)
    _check_fields(model, fields)

    with _storage_errors(kind), transaction.atomic():
        instance = model(**fields)
        instance.full_clean()
        instance.save()
    logger.info('Inserted %s id=%s', kind, instance.pk)
    return _to_record(record_cls, _row_of(instance))


def update(kind, pk, patch, actor=None):
    model, record_cls = _resolve(kind)
    _authorize(actor, kind, write=True)
    _check_fields(model, patch)

    with _storage_errors(kind), transaction.atomic():
        instance = model.objects.select_for_update().get(pk=pk)
        for name, value in patch.items():
            setattr(instance, name, value)
        instance.full_clean()
        instance.save()
    logger.info('Updated %s id=%s fields=%s', kind, pk, sorted(patch))
    return _to_record(record_cls, _row_of(instance))


def upsert(kind, lookup, fields, actor=None):
    """Update the single row matching ``lookup`` or create it."""
    model, record_cls = _resolve(kind)
    _authorize(actor, kind, write=True)
    _check_fields(model, {**lookup, **fields})

    with _storage_errors(kind), transaction.atomic():
        instance = model.objects.select_for_update().filter(**lookup).first()
        created = instance is None
        if created:
            instance = model(**lookup)
        for name, value in fields.items():
            setattr(instance, name, value)
        instance.full_clean()
        instance.save()
    return _to_record(record_cls, _row_of(instance)), created


def delete(kind, pk, actor=None):
    model, _ = _resolve(kind)
    _authorize(actor, kind, write=True)

    with _storage_errors(kind), transaction.atomic():
        instance = model.objects.get(pk=pk)
        instance.delete()
    logger.info('Deleted %s id=%s', kind, pk)
    return True
