from django.urls import path

from .views import payment_list, payment_mark_paid, payment_reminder

urlpatterns = [
    path('', payment_list, name='payment_list'),
    path('<int:payment_id>/mark-paid/', payment_mark_paid, name='payment_mark_paid'),
    path('<int:payment_id>/reminder/', payment_reminder, name='payment_reminder'),
]
