import random
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from faker import Faker

from apps.academics.attendance.models import AttendanceRecord
from apps.academics.leads.models import Lead
from apps.academics.students.models import BATCHES, COURSES, Student, StudentParentLink
from apps.core.users.models import User
from apps.finance.expenses.models import Expense
from apps.finance.payments.models import Payment
from apps.operations.communication.models import Notice

COURSE_FEES = {'Basic': Decimal('12000'), 'Advanced': Decimal('18000'), 'Professional': Decimal('30000')}
LEAD_SOURCES = ('Website', 'Instagram', 'Referral', 'Walk-in')


class Command(BaseCommand):
    help = 'Seeds the database with demo studio data.'

    def add_arguments(self, parser):
        parser.add_argument('--students', type=int, default=20)
        parser.add_argument('--leads', type=int, default=15)

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding database...')

        fake = Faker('en_IN')
        today = timezone.localdate()

        admin, created = User.objects.get_or_create(username='studioadmin', defaults={'role': User.ROLE_ADMIN})
        if created:
            admin.set_password('password')
            admin.save()
            self.stdout.write(self.style.SUCCESS('Successfully created studioadmin user.'))

        parent, created = User.objects.get_or_create(username='parent', defaults={'role': User.ROLE_PARENT})
        if created:
            parent.set_password('password')
            parent.save()
            self.stdout.write(self.style.SUCCESS('Successfully created parent user.'))

        for _ in range(options['leads']):
            lead = Lead.objects.create(
                name=fake.name(),
                phone=fake.numerify('9#########'),
                email=fake.email(),
                course=random.choice(COURSES),
                status=random.choice([value for value, _ in Lead.STATUS_CHOICES]),
                source=random.choice(LEAD_SOURCES),
                notes=fake.sentence(),
            )
            self.stdout.write(self.style.SUCCESS(f'Successfully created lead: {lead.name}'))

        for index in range(options['students']):
            course = random.choice(COURSES)
            student = Student.objects.create(
                name=fake.name(),
                dob=fake.date_of_birth(minimum_age=6, maximum_age=16),
                course=course,
                batch=random.choice(BATCHES),
                validity_start=today - timedelta(days=random.randint(0, 90)),
                total_sessions=random.choice([12, 24, 48]),
                base_fee=COURSE_FEES[course],
                fee_amount=COURSE_FEES[course],
                whatsapp=fake.numerify('9#########'),
                father_name=fake.name_male(),
                father_contact=fake.numerify('9#########'),
                address=fake.address(),
            )
            if index == 0:
                StudentParentLink.objects.get_or_create(parent_user=parent, student=student)

            for offset in range(0, 28, 7):
                AttendanceRecord.objects.get_or_create(
                    student=student,
                    date=today - timedelta(days=offset),
                    defaults={'status': random.choice(['present', 'present', 'late', 'absent']), 'batch': student.batch},
                )

            Payment.objects.create(student=student, amount=COURSE_FEES[course] / 2, status=Payment.STATUS_PAID)
            Payment.objects.create(
                student=student,
                amount=COURSE_FEES[course] / 2,
                status=Payment.STATUS_PENDING,
                date=today + timedelta(days=random.randint(-5, 20)),
                installment_no=2,
                total_installments=2,
            )
            self.stdout.write(self.style.SUCCESS(f'Successfully created student: {student.name} ({student.roll_number})'))

        for category in Expense.CATEGORIES[:4]:
            Expense.objects.create(
                category=category,
                description=fake.sentence(nb_words=4),
                amount=Decimal(random.randint(500, 5000)),
                date=today - timedelta(days=random.randint(0, 20)),
            )

        Notice.objects.get_or_create(
            title='Annual exhibition',
            defaults={'body': 'Bring your best artwork to the studio this Sunday.', 'created_by': admin},
        )

        self.stdout.write(self.style.SUCCESS('Database seeding complete!'))
