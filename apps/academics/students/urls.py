from django.urls import path

from .views import (
    certificate_list,
    student_certificate,
    student_id_card,
    student_id_card_bulk,
    student_list,
    student_profile,
    student_update,
)

urlpatterns = [
    path('', student_list, name='student_list'),
    path('certificates/', certificate_list, name='certificate_list'),
    path('id-cards/', student_id_card_bulk, name='student_id_card_bulk'),
    path('<int:student_id>/', student_profile, name='student_profile'),
    path('<int:student_id>/edit/', student_update, name='student_update'),
    path('<int:student_id>/id-card/', student_id_card, name='student_id_card'),
    path('<int:student_id>/certificate/', student_certificate, name='student_certificate'),
]
