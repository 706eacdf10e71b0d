from datetime import date, datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.test import SimpleTestCase, override_settings

from apps.core.metrics import services
from apps.core.records.records import AttendanceRecord, PaymentRecord, StudentRecord


def _student(pk=1, total_sessions=48, **overrides):
    fields = {'id': pk, 'name': f'Student {pk}', 'total_sessions': total_sessions}
    fields.update(overrides)
    return StudentRecord(**fields)


def _marks(student_id, statuses, start=date(2026, 1, 1)):
    return [
        AttendanceRecord(student_id=student_id, date=start + timedelta(days=offset), status=status)
        for offset, status in enumerate(statuses)
    ]


def _payment(amount, status, when=date(2026, 6, 1), student_id=1):
    return PaymentRecord(student_id=student_id, amount=Decimal(amount), date=when, status=status)


class AttendanceRateTests(SimpleTestCase):
    def test_no_records_gives_zero_percent(self):
        summary = services.attendance_rate([])

        self.assertEqual(summary.percent, 0)
        self.assertEqual(summary.total_marked, 0)
        self.assertEqual(services.sessions_attended([]), 0)

    def test_late_counts_as_attended(self):
        summary = services.attendance_rate(_marks(1, ['present', 'late', 'absent']))

        self.assertEqual(summary.present_count, 1)
        self.assertEqual(summary.late_count, 1)
        self.assertEqual(summary.absent_count, 1)
        self.assertEqual(summary.percent, 67)

    def test_duplicate_day_counts_once(self):
        day = date(2026, 2, 2)
        records = [
            AttendanceRecord(student_id=1, date=day, status='absent'),
            AttendanceRecord(student_id=1, date=day, status='present'),
        ]

        summary = services.attendance_rate(records)

        self.assertEqual(summary.total_marked, 1)
        self.assertEqual(summary.percent, 100)

    def test_sessions_remaining_never_negative(self):
        records = _marks(1, ['present'] * 5)

        self.assertEqual(services.sessions_remaining(3, records), 0)
        self.assertEqual(services.sessions_remaining(8, records), 3)


class CertificateEligibilityTests(SimpleTestCase):
    def test_full_course_attended_with_extra_sessions(self):
        student = _student(total_sessions=48)
        attendance = _marks(student.id, ['present'] * 50 + ['absent'] * 2)

        self.assertEqual(services.sessions_attended(attendance), 50)
        self.assertEqual(services.sessions_remaining(student.total_sessions, attendance), 0)
        self.assertTrue(services.certificate_eligible(student, attendance))

    def test_exact_count_is_eligible_and_one_short_is_not(self):
        student = _student(total_sessions=4)

        self.assertTrue(services.certificate_eligible(student, _marks(1, ['present'] * 4)))
        self.assertFalse(services.certificate_eligible(student, _marks(1, ['present'] * 3)))

    def test_zero_sessions_is_always_eligible(self):
        self.assertTrue(services.certificate_eligible(_student(total_sessions=0), []))

    def test_other_students_attendance_is_ignored(self):
        student = _student(pk=1, total_sessions=2)
        attendance = _marks(2, ['present', 'present'])

        self.assertFalse(services.certificate_eligible(student, attendance))


class FeeTests(SimpleTestCase):
    def test_progress_counts_only_paid(self):
        payments = [_payment('4000', 'paid'), _payment('4000', 'pending')]

        self.assertEqual(services.fee_progress(payments, Decimal('12000')), 33)

    def test_zero_fee_gives_zero_progress(self):
        self.assertEqual(services.fee_progress([_payment('500', 'paid')], 0), 0)

    def test_overpayment_is_not_clamped_but_bar_width_is(self):
        progress = services.fee_progress([_payment('15000', 'paid')], Decimal('12000'))

        self.assertEqual(progress, 125)
        self.assertEqual(services.progress_bar_width(progress), 100)

    def test_percent_discount(self):
        result = services.discounted_fee(Decimal('12000'), discount_percent=10)

        self.assertEqual(result.discount_value, Decimal('1200'))
        self.assertEqual(result.final_fee, Decimal('10800'))

    def test_percent_discount_rounds_half_up(self):
        result = services.discounted_fee(Decimal('1005'), discount_percent=10)

        self.assertEqual(result.discount_value, Decimal('101'))

    def test_flat_discount_larger_than_fee_clamps_to_zero(self):
        result = services.discounted_fee(Decimal('1000'), discount_amount=Decimal('1500'))

        self.assertEqual(result.final_fee, Decimal('0'))

    def test_percent_wins_when_both_are_given(self):
        result = services.discounted_fee(Decimal('1000'), discount_percent=50, discount_amount=900)

        self.assertEqual(result.final_fee, Decimal('500'))

    def test_next_due_payment_is_earliest_pending(self):
        payments = [
            _payment('100', 'pending', date(2026, 7, 1)),
            _payment('100', 'paid', date(2026, 5, 1)),
            _payment('100', 'pending', date(2026, 6, 15)),
        ]

        self.assertEqual(services.next_due_payment(payments).date, date(2026, 6, 15))
        self.assertIsNone(services.next_due_payment([_payment('100', 'paid')]))


class ValidityTests(SimpleTestCase):
    def test_validity_end_rounds_weeks_up(self):
        start = date(2026, 1, 1)

        self.assertEqual(services.derive_validity_end(start, 48), start + timedelta(weeks=12))
        self.assertEqual(services.derive_validity_end(start, 5), start + timedelta(weeks=2))

    def test_end_equal_to_now_gives_zero(self):
        now = datetime(2026, 3, 10, tzinfo=dt_timezone.utc)

        self.assertEqual(services.validity_days_left(date(2026, 3, 10), now), 0)

    def test_partial_day_rounds_up(self):
        now = datetime(2026, 3, 10, 18, 0, tzinfo=dt_timezone.utc)

        self.assertEqual(services.validity_days_left(date(2026, 3, 12), now), 2)

    def test_past_end_never_negative(self):
        now = datetime(2026, 3, 10, tzinfo=dt_timezone.utc)

        self.assertEqual(services.validity_days_left(date(2026, 1, 1), now), 0)


class BirthdayTests(SimpleTestCase):
    now = datetime(2026, 6, 15, 9, 0, tzinfo=dt_timezone.utc)

    def test_birthday_five_days_ago_is_not_upcoming(self):
        students = [_student(pk=1, dob=date(2012, 6, 10))]

        self.assertEqual(services.upcoming_birthdays(students, self.now), [])

    def test_window_includes_today_and_last_day(self):
        today = _student(pk=1, dob=date(2012, 6, 15))
        last_day = _student(pk=2, dob=date(2013, 7, 15))
        too_late = _student(pk=3, dob=date(2013, 7, 16))

        upcoming = services.upcoming_birthdays([too_late, last_day, today], self.now)

        self.assertEqual([s.id for s in upcoming], [1, 2])

    def test_students_without_dob_are_skipped(self):
        self.assertEqual(services.upcoming_birthdays([_student(dob=None)], self.now), [])

    def test_days_until_birthday_rolls_to_next_year(self):
        self.assertEqual(services.days_until_birthday(date(2012, 6, 20), self.now), 5)
        self.assertEqual(services.days_until_birthday(date(2012, 6, 14), self.now), 364)


class AutomationCounterTests(SimpleTestCase):
    def test_counters(self):
        now = datetime(2026, 6, 15, 10, 0, tzinfo=dt_timezone.utc)
        payments = [
            _payment('100', 'pending', date(2026, 6, 15)),
            _payment('100', 'pending', date(2026, 6, 18)),
            _payment('100', 'pending', date(2026, 6, 19)),
            _payment('100', 'pending', date(2026, 6, 1)),
            _payment('100', 'paid', date(2026, 6, 16)),
        ]
        students = [
            _student(pk=1, total_sessions=2, validity_end=date(2026, 6, 1)),
            _student(pk=2, total_sessions=10, validity_end=date(2026, 6, 1), status='inactive'),
            _student(pk=3, total_sessions=10, validity_end=date(2026, 9, 1)),
        ]
        attendance = _marks(1, ['present', 'late'])

        counters = services.automation_counters(payments, students, attendance, now)

        self.assertEqual(counters.fees_due_soon, 2)
        self.assertEqual(counters.overdue_payments, 1)
        self.assertEqual(counters.certificates_ready, 1)
        self.assertEqual(counters.expired_validity, 1)

    def test_monthly_revenue_counts_paid_in_current_month(self):
        payments = [
            _payment('500', 'paid', date(2026, 6, 2)),
            _payment('700', 'pending', date(2026, 6, 3)),
            _payment('900', 'paid', date(2026, 5, 30)),
        ]

        self.assertEqual(
            services.monthly_total(payments, date(2026, 6, 20), status='paid'),
            Decimal('500'),
        )


@override_settings(TIME_ZONE='Asia/Kolkata', USE_TZ=True)
class StudioTimeZoneTests(SimpleTestCase):
    # 20:00 UTC on 19 October is already 01:30 on 20 October in the studio.
    now = datetime(2026, 10, 19, 20, 0, tzinfo=dt_timezone.utc)

    def test_counters_use_studio_date(self):
        payments = [_payment('100', 'pending', date(2026, 10, 19))]

        counters = services.automation_counters(payments, [], [], self.now)

        self.assertEqual(counters.overdue_payments, 1)
        self.assertEqual(counters.fees_due_soon, 0)

    def test_present_today_uses_studio_date(self):
        attendance = [AttendanceRecord(student_id=1, date=date(2026, 10, 20), status='present')]

        stats = services.dashboard_stats([], [_student()], [], attendance, self.now)

        self.assertEqual(stats.present_today, 1)

    def test_validity_ends_at_studio_midnight(self):
        self.assertEqual(services.validity_days_left(date(2026, 10, 21), self.now), 1)
        self.assertEqual(services.validity_days_left(date(2026, 10, 20), self.now), 0)

    def test_birthday_countdown_uses_studio_date(self):
        self.assertEqual(services.days_until_birthday(date(2012, 10, 20), self.now), 0)
        self.assertEqual(
            [s.id for s in services.upcoming_birthdays([_student(dob=date(2012, 10, 19))], self.now)],
            [],
        )
