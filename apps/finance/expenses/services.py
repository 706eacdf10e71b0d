import logging
from decimal import Decimal

from apps.core.metrics import services as metrics
from apps.core.records import access

from .models import Expense

logger = logging.getLogger(__name__)

EXPENSES_KIND = 'expenses'


def record_expense(*, fields, actor=None):
    expense = access.insert(EXPENSES_KIND, fields, actor=actor)
    logger.info('Recorded expense %s: %s %s', expense.id, expense.category, expense.amount)
    return expense


def expense_summary(expenses, now):
    total = sum((expense.amount for expense in expenses), Decimal('0'))
    by_category = metrics.category_totals(expenses, Expense.CATEGORIES)
    categories = [
        {
            'category': category,
            'total': amount,
            'share': metrics.round_half_up(100 * amount / total) if total else 0,
        }
        for category, amount in by_category.items()
        if amount > 0
    ]
    return {
        'total': total,
        'month_total': metrics.monthly_total(expenses, now),
        'categories': categories,
    }
