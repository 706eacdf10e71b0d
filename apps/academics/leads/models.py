from django.core.exceptions import ValidationError
from django.db import models

from apps.academics.students.models import COURSE_BASIC, COURSE_CHOICES


class Lead(models.Model):
    STATUS_NEW = 'new'
    STATUS_CONTACTED = 'contacted'
    STATUS_DEMO = 'demo'
    STATUS_CONVERTED = 'converted'
    STATUS_NOT_INTERESTED = 'not-interested'
    STATUS_CHOICES = (
        (STATUS_NEW, 'New'),
        (STATUS_CONTACTED, 'Contacted'),
        (STATUS_DEMO, 'Demo'),
        (STATUS_CONVERTED, 'Converted'),
        (STATUS_NOT_INTERESTED, 'Not Interested'),
    )
    # Names used by the scoring prompt and older board columns.
    STATUS_ALIASES = {
        'follow-up': STATUS_CONTACTED,
        'followup': STATUS_CONTACTED,
        'lost': STATUS_NOT_INTERESTED,
        'not_interested': STATUS_NOT_INTERESTED,
    }

    SOURCE_WEBSITE = 'Website'
    SOURCE_REGISTRATION = 'Registration Form'

    name = models.CharField(max_length=100)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    course = models.CharField(max_length=20, choices=COURSE_CHOICES, default=COURSE_BASIC)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_NEW)
    source = models.CharField(max_length=60, default=SOURCE_WEBSITE)
    follow_up_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['phone', 'created_at'], name='leads_phone_created_idx'),
            models.Index(fields=['status'], name='leads_status_idx'),
        ]

    def clean(self):
        super().clean()
        if self.name:
            self.name = self.name.strip()
        if not self.name:
            raise ValidationError({'name': 'Lead name is required.'})

    def __str__(self):
        return f"{self.name} ({self.status})"
