from django import forms

from .models import Payment


class PaymentForm(forms.ModelForm):
    class Meta:
        model = Payment
        fields = ['student', 'amount', 'method', 'date', 'installment_no', 'total_installments', 'status', 'notes']
        widgets = {
            'date': forms.DateInput(attrs={'type': 'date'}),
            'notes': forms.Textarea(attrs={'rows': 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in ('method', 'date', 'installment_no', 'total_installments', 'status'):
            self.fields[name].required = False

    def payment_fields(self):
        data = {
            name: value
            for name, value in self.cleaned_data.items()
            if value not in (None, '')
        }
        data['student_id'] = data.pop('student').pk
        return data
