from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from apps.core.metrics.services import derive_validity_end


COURSE_BASIC = 'Basic'
COURSE_ADVANCED = 'Advanced'
COURSE_PROFESSIONAL = 'Professional'
COURSE_CHOICES = (
    (COURSE_BASIC, 'Basic'),
    (COURSE_ADVANCED, 'Advanced'),
    (COURSE_PROFESSIONAL, 'Professional'),
)
COURSES = tuple(value for value, _ in COURSE_CHOICES)

BATCHES = (
    'Professional (10:00 AM - 11:30 AM)',
    'Advance + Basic (11:30 AM - 1:00 PM)',
    'Basic 1 (1:00 PM - 2:30 PM)',
    'Basic 2 (2:30 PM - 4:00 PM)',
)
BATCH_CHOICES = tuple((batch, batch) for batch in BATCHES)


def validity_end_for(start, total_sessions):
    if not start or not total_sessions or total_sessions < 0:
        return start
    return derive_validity_end(start, total_sessions)


class Student(models.Model):
    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_CHOICES = (
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
    )

    PLAN_MONTHLY = 'Monthly'
    PLAN_QUARTERLY = 'Quarterly'
    PLAN_FULL = 'Full Payment'
    PAYMENT_PLAN_CHOICES = (
        (PLAN_MONTHLY, 'Monthly'),
        (PLAN_QUARTERLY, 'Quarterly'),
        (PLAN_FULL, 'Full Payment'),
    )

    roll_number = models.CharField(max_length=20, unique=True, blank=True, editable=False)
    name = models.CharField(max_length=120)
    dob = models.DateField(null=True, blank=True)
    photo = models.ImageField(upload_to='students/photos/', null=True, blank=True)

    course = models.CharField(max_length=20, choices=COURSE_CHOICES, default=COURSE_BASIC)
    batch = models.CharField(max_length=60, choices=BATCH_CHOICES, default=BATCHES[0])
    enrollment_date = models.DateField(default=timezone.localdate)
    validity_start = models.DateField(null=True, blank=True, default=timezone.localdate)
    validity_end = models.DateField(null=True, blank=True)
    total_sessions = models.PositiveIntegerField(default=48)

    base_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    discount_percent = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    fee_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    payment_plan = models.CharField(max_length=20, choices=PAYMENT_PLAN_CHOICES, default=PLAN_MONTHLY)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    whatsapp = models.CharField(max_length=20)
    email = models.EmailField(blank=True)
    father_name = models.CharField(max_length=120, blank=True)
    father_contact = models.CharField(max_length=20, blank=True)
    mother_name = models.CharField(max_length=120, blank=True)
    mother_contact = models.CharField(max_length=20, blank=True)
    guardian_name = models.CharField(max_length=120, blank=True)
    emergency_contact = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    school_name = models.CharField(max_length=150, blank=True)
    source = models.CharField(max_length=60, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status', 'batch'], name='students_status_batch_idx'),
        ]

    def clean(self):
        super().clean()
        if self.name:
            self.name = self.name.strip()
        if not self.name:
            raise ValidationError({'name': 'Student name is required.'})

        if self.total_sessions is None or self.total_sessions < 1:
            raise ValidationError({'total_sessions': 'Total sessions must be at least 1.'})

        if self.discount_percent and self.discount_amount:
            raise ValidationError(
                'Use either a discount percentage or a flat discount amount, not both.'
            )
        if self.discount_percent and not (Decimal('0') <= self.discount_percent <= Decimal('100')):
            raise ValidationError({'discount_percent': 'Discount percentage must be between 0 and 100.'})

        for field in ('base_fee', 'fee_amount', 'discount_amount'):
            if getattr(self, field) is not None and getattr(self, field) < 0:
                raise ValidationError({field: 'Amount cannot be negative.'})

        if self.validity_start and self.validity_end and self.validity_end < self.validity_start:
            raise ValidationError({'validity_end': 'Validity end cannot be before validity start.'})

    def save(self, *args, **kwargs):
        if not self.validity_end and self.validity_start:
            self.validity_end = validity_end_for(self.validity_start, self.total_sessions)
        if not self.roll_number:
            self.roll_number = next_roll_number(self.enrollment_date)
        super().save(*args, **kwargs)

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE

    def __str__(self):
        return f"{self.roll_number} - {self.name}"


def next_roll_number(enrollment_date=None):
    year = (enrollment_date or timezone.localdate()).year
    prefix = f"{settings.STUDIO_ROLL_PREFIX}-{year}-"
    taken = set(
        Student.objects.filter(roll_number__startswith=prefix).values_list('roll_number', flat=True)
    )
    sequence = len(taken) + 1
    while f"{prefix}{sequence:03d}" in taken:
        sequence += 1
    return f"{prefix}{sequence:03d}"


class StudentParentLink(models.Model):
    parent_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='student_links',
    )
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='parent_links')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['parent_user', 'student'],
                name='unique_parent_student_link',
            ),
        ]

    def clean(self):
        super().clean()
        if self.parent_user_id and self.parent_user.role != 'parent':
            raise ValidationError({'parent_user': 'Only parent accounts can be linked to students.'})

    def __str__(self):
        return f"StudentParentLink<{self.parent_user_id},{self.student_id}>"
