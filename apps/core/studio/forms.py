from django import forms

from .services import EDITABLE_FIELDS


class StudioSettingsForm(forms.Form):
    studio_name = forms.CharField(max_length=150, required=False)
    admin_whatsapp = forms.RegexField(regex=r'^\+?\d{10,15}$', max_length=20, required=False)
    webhook_url = forms.URLField(required=False)
    email_notifications = forms.BooleanField(required=False)
    whatsapp_alerts = forms.BooleanField(required=False)
    auto_follow_up = forms.BooleanField(required=False)
    birthday_reminders = forms.BooleanField(required=False)
    fee_reminders = forms.BooleanField(required=False)

    def __init__(self, data=None, *args, **kwargs):
        self.submitted = set(data or {})
        super().__init__(data, *args, **kwargs)

    def clean_studio_name(self):
        value = (self.cleaned_data.get('studio_name') or '').strip()
        if 'studio_name' in self.submitted and not value:
            raise forms.ValidationError('Studio name cannot be blank.')
        return value

    def changes(self):
        """Only the fields that were actually submitted."""
        return {
            name: self.cleaned_data[name]
            for name in EDITABLE_FIELDS
            if name in self.submitted
        }
