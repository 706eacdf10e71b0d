from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from apps.academics.students.models import Student


class Payment(models.Model):
    STATUS_PAID = 'paid'
    STATUS_PENDING = 'pending'
    STATUS_PARTIAL = 'partial'
    STATUS_CHOICES = (
        (STATUS_PAID, 'Paid'),
        (STATUS_PENDING, 'Pending'),
        (STATUS_PARTIAL, 'Partial'),
    )

    METHOD_UPI = 'UPI'
    METHOD_CASH = 'Cash'
    METHOD_BANK_TRANSFER = 'Bank Transfer'
    METHOD_CARD = 'Card'
    METHOD_CHEQUE = 'Cheque'
    METHOD_CHOICES = (
        (METHOD_UPI, 'UPI'),
        (METHOD_CASH, 'Cash'),
        (METHOD_BANK_TRANSFER, 'Bank Transfer'),
        (METHOD_CARD, 'Card'),
        (METHOD_CHEQUE, 'Cheque'),
    )

    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    method = models.CharField(max_length=20, choices=METHOD_CHOICES, default=METHOD_UPI)
    # For pending rows this is the due date.
    date = models.DateField(default=timezone.localdate)
    installment_no = models.PositiveIntegerField(default=1)
    total_installments = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PAID)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-date', '-id']
        indexes = [
            models.Index(fields=['student', 'status'], name='payments_student_status_idx'),
            models.Index(fields=['status', 'date'], name='payments_status_date_idx'),
        ]

    def clean(self):
        super().clean()
        if self.amount is not None and self.amount <= Decimal('0'):
            raise ValidationError({'amount': 'Payment amount must be greater than zero.'})
        if self.installment_no is not None and self.installment_no < 1:
            raise ValidationError({'installment_no': 'Installment number starts at 1.'})
        if (
            self.installment_no is not None
            and self.total_installments is not None
            and self.installment_no > self.total_installments
        ):
            raise ValidationError(
                {'installment_no': 'Installment number cannot exceed total installments.'}
            )

    def __str__(self):
        return f"{self.student_id} - {self.amount} ({self.status})"
