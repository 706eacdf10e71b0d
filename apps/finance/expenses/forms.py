from decimal import Decimal

from django import forms

from apps.finance.payments.models import Payment

from .models import Expense


class ExpenseForm(forms.Form):
    category = forms.CharField(max_length=40, required=False)
    description = forms.CharField(max_length=255, required=False)
    amount = forms.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    date = forms.DateField(required=False)
    method = forms.ChoiceField(choices=Payment.METHOD_CHOICES, required=False)

    def clean_category(self):
        return Expense.normalize_category(self.cleaned_data.get('category'))

    def expense_fields(self):
        data = dict(self.cleaned_data)
        if not data.get('date'):
            data.pop('date', None)
        if not data.get('method'):
            data.pop('method', None)
        return data
