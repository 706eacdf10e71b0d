from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from apps.finance.payments.models import Payment


class Expense(models.Model):
    CATEGORY_OTHER = 'Other'
    CATEGORIES = (
        'Art Supplies',
        'Utilities',
        'Rent',
        'Marketing',
        'Maintenance',
        'Salaries',
        'Equipment',
        CATEGORY_OTHER,
    )
    CATEGORY_CHOICES = tuple((category, category) for category in CATEGORIES)

    category = models.CharField(max_length=40, choices=CATEGORY_CHOICES, default=CATEGORY_OTHER)
    description = models.CharField(max_length=255, blank=True)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    date = models.DateField(default=timezone.localdate)
    method = models.CharField(max_length=20, choices=Payment.METHOD_CHOICES, default=Payment.METHOD_UPI)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-date', '-id']
        indexes = [
            models.Index(fields=['category', 'date'], name='expenses_category_date_idx'),
        ]

    @classmethod
    def normalize_category(cls, value):
        value = (value or '').strip()
        return value if value in cls.CATEGORIES else cls.CATEGORY_OTHER

    def clean(self):
        super().clean()
        if self.amount is not None and self.amount <= Decimal('0'):
            raise ValidationError({'amount': 'Expense amount must be greater than zero.'})

    def __str__(self):
        return f"{self.category} - {self.amount}"
