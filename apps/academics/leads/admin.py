from django.contrib import admin

from .models import Lead


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    list_display = ('name', 'phone', 'course', 'status', 'source', 'follow_up_date', 'created_at')
    list_filter = ('status', 'course', 'source')
    search_fields = ('name', 'phone', 'email')
