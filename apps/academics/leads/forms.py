from django import forms

from .models import Lead


class LeadForm(forms.ModelForm):
    class Meta:
        model = Lead
        fields = ['name', 'phone', 'email', 'course', 'source', 'notes', 'follow_up_date']
        widgets = {
            'notes': forms.Textarea(attrs={'rows': 3}),
            'follow_up_date': forms.DateInput(attrs={'type': 'date'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['course'].required = False
        self.fields['source'].required = False


class LeadMoveForm(forms.Form):
    status = forms.CharField(max_length=20)
