from django import forms

from .models import Student

OPTIONAL_WITH_DEFAULT = (
    'course',
    'batch',
    'enrollment_date',
    'validity_start',
    'total_sessions',
    'base_fee',
    'discount_percent',
    'discount_amount',
    'payment_plan',
    'status',
)


class StudentForm(forms.ModelForm):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in OPTIONAL_WITH_DEFAULT:
            self.fields[name].required = False

    class Meta:
        model = Student
        fields = [
            'name',
            'dob',
            'course',
            'batch',
            'enrollment_date',
            'validity_start',
            'validity_end',
            'total_sessions',
            'base_fee',
            'discount_percent',
            'discount_amount',
            'payment_plan',
            'status',
            'whatsapp',
            'email',
            'father_name',
            'father_contact',
            'mother_name',
            'mother_contact',
            'guardian_name',
            'emergency_contact',
            'address',
            'school_name',
            'source',
            'notes',
        ]
        widgets = {
            'dob': forms.DateInput(attrs={'type': 'date'}),
            'enrollment_date': forms.DateInput(attrs={'type': 'date'}),
            'validity_start': forms.DateInput(attrs={'type': 'date'}),
            'validity_end': forms.DateInput(attrs={'type': 'date'}),
            'address': forms.Textarea(attrs={'rows': 2}),
            'notes': forms.Textarea(attrs={'rows': 3}),
        }
        labels = {
            'dob': 'Date of Birth',
            'whatsapp': 'WhatsApp Number',
            'validity_end': 'Valid Till',
        }

    def submitted_fields(self):
        """Cleaned values, leaving out empty optional fields so model defaults apply."""
        return {
            name: value
            for name, value in self.cleaned_data.items()
            if not (name in OPTIONAL_WITH_DEFAULT and value in (None, ''))
        }
