from django import forms

from .models import Notice
from .notifications import BIRTHDAY, CUSTOM, WELCOME


class NoticeForm(forms.ModelForm):
    class Meta:
        model = Notice
        fields = ['title', 'body', 'date', 'audience']
        widgets = {
            'body': forms.Textarea(attrs={'rows': 4}),
            'date': forms.DateInput(attrs={'type': 'date'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['date'].required = False
        self.fields['audience'].required = False

    def notice_fields(self):
        return {name: value for name, value in self.cleaned_data.items() if value not in (None, '')}


class StudentMessageForm(forms.Form):
    TEMPLATE_CHOICES = (
        (BIRTHDAY, 'Birthday wish'),
        (WELCOME, 'Welcome'),
        (CUSTOM, 'Custom message'),
    )

    student = forms.IntegerField(min_value=1)
    template = forms.ChoiceField(choices=TEMPLATE_CHOICES)
    text = forms.CharField(required=False, max_length=1000)


class AdminMessageForm(forms.Form):
    message = forms.CharField(max_length=1000)
