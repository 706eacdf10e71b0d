from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('student', 'amount', 'method', 'date', 'installment_no', 'total_installments', 'status')
    list_filter = ('status', 'method')
    search_fields = ('student__name', 'student__roll_number')
