import json
from datetime import date

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from apps.academics.students.models import BATCHES, Student
from apps.core.records import access

from .models import AttendanceRecord
from .services import mark_attendance


class AttendanceServiceTests(TestCase):
    def setUp(self):
        self.student = Student.objects.create(name='Asha', whatsapp='9876543210', batch=BATCHES[2])

    def test_marking_twice_keeps_one_record_per_day(self):
        record = access.fetch_one('students', self.student.id)

        mark_attendance(student=record, on_date=date(2026, 4, 1), status='absent')
        updated = mark_attendance(student=record, on_date=date(2026, 4, 1), status='late')

        self.assertEqual(AttendanceRecord.objects.filter(student=self.student).count(), 1)
        self.assertEqual(updated.status, 'late')
        self.assertEqual(updated.batch, BATCHES[2])


class AttendanceViewTests(TestCase):
    def setUp(self):
        get_user_model().objects.create_user(username='studio_admin', password='pass12345', role='admin')
        self.basic = Student.objects.create(name='Basic Kid', whatsapp='9876543210', batch=BATCHES[2])
        self.pro = Student.objects.create(name='Pro Kid', whatsapp='9876500000', batch=BATCHES[0])
        Student.objects.create(name='Left Kid', whatsapp='9876511111', batch=BATCHES[2], status='inactive')
        self.client.login(username='studio_admin', password='pass12345')

    def test_mark_returns_alert_link(self):
        response = self.client.post(
            reverse('attendance_mark'),
            data=json.dumps({'student': self.basic.id, 'date': '2026-04-01', 'status': 'absent'}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['record']['status'], 'absent')
        self.assertTrue(response.json()['whatsapp']['url'].startswith('https://wa.me/919876543210'))

    def test_mark_unknown_student_is_404(self):
        response = self.client.post(
            reverse('attendance_mark'),
            data=json.dumps({'student': 9999, 'date': '2026-04-01', 'status': 'present'}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 404)

    def test_mark_all_only_touches_selected_batch(self):
        response = self.client.post(
            reverse('attendance_mark_all'),
            data=json.dumps({'date': '2026-04-02', 'status': 'present', 'batch': BATCHES[2]}),
            content_type='application/json',
        )

        self.assertEqual(response.json()['marked'], 1)
        self.assertTrue(AttendanceRecord.objects.filter(student=self.basic, date=date(2026, 4, 2)).exists())
        self.assertFalse(AttendanceRecord.objects.filter(student=self.pro).exists())

    def test_sheet_lists_active_students_with_marks(self):
        AttendanceRecord.objects.create(student=self.pro, date=date(2026, 4, 3), status='late')

        response = self.client.get(reverse('attendance_sheet'), {'date': '2026-04-03'})

        body = response.json()
        self.assertEqual(len(body['rows']), 2)
        self.assertEqual(body['counts']['late'], 1)
        self.assertEqual(body['counts']['unmarked'], 1)
