from django.contrib import admin

from .models import Student, StudentParentLink


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ('roll_number', 'name', 'course', 'batch', 'status', 'fee_amount', 'validity_end')
    list_filter = ('status', 'course', 'batch')
    search_fields = ('roll_number', 'name', 'whatsapp')
    readonly_fields = ('roll_number',)


admin.site.register(StudentParentLink)
