from django import forms

from apps.academics.students.models import BATCHES

from .models import AttendanceRecord
from .services import ALL_BATCHES


class AttendanceMarkForm(forms.Form):
    student = forms.IntegerField(min_value=1)
    date = forms.DateField()
    status = forms.ChoiceField(choices=AttendanceRecord.STATUS_CHOICES)


class AttendanceBulkMarkForm(forms.Form):
    date = forms.DateField()
    status = forms.ChoiceField(choices=AttendanceRecord.STATUS_CHOICES)
    batch = forms.ChoiceField(
        choices=[(ALL_BATCHES, ALL_BATCHES)] + [(batch, batch) for batch in BATCHES],
        required=False,
    )


class AttendanceSheetForm(forms.Form):
    date = forms.DateField(required=False)
    batch = forms.ChoiceField(
        choices=[(ALL_BATCHES, ALL_BATCHES)] + [(batch, batch) for batch in BATCHES],
        required=False,
    )
