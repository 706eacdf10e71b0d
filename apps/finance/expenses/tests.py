import json
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from .models import Expense


class ExpenseViewTests(TestCase):
    def setUp(self):
        get_user_model().objects.create_user(username='studio_admin', password='pass12345', role='admin')
        self.client.login(username='studio_admin', password='pass12345')

    def _post(self, payload):
        return self.client.post(reverse('expense_list'), data=json.dumps(payload), content_type='application/json')

    def test_unknown_category_falls_back_to_other(self):
        response = self._post({'category': 'Snacks', 'amount': '250'})

        self.assertEqual(response.status_code, 201)
        self.assertEqual(Expense.objects.get().category, 'Other')

    def test_amount_must_be_positive(self):
        self.assertEqual(self._post({'category': 'Rent', 'amount': '0'}).status_code, 400)

    def test_summary_by_category(self):
        today = timezone.localdate()
        Expense.objects.create(category='Rent', amount=Decimal('3000'), date=today)
        Expense.objects.create(category='Art Supplies', amount=Decimal('1000'), date=today)
        Expense.objects.create(category='Rent', amount=Decimal('1000'), date=today - timedelta(days=400))

        response = self.client.get(reverse('expense_list'), {'category': 'Rent'})

        body = response.json()
        self.assertEqual(len(body['expenses']), 2)
        self.assertEqual(Decimal(body['summary']['total']), Decimal('5000'))
        self.assertEqual(Decimal(body['summary']['month_total']), Decimal('4000'))
        shares = {row['category']: row['share'] for row in body['summary']['categories']}
        self.assertEqual(shares, {'Art Supplies': 20, 'Rent': 80})
