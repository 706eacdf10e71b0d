from django.urls import path

from .views import lead_board, lead_convert, lead_follow_up, lead_move, lead_receive, registration_submit

urlpatterns = [
    path('leads/', lead_board, name='lead_board'),
    path('leads/<int:lead_id>/move/', lead_move, name='lead_move'),
    path('leads/<int:lead_id>/convert/', lead_convert, name='lead_convert'),
    path('leads/<int:lead_id>/follow-up/', lead_follow_up, name='lead_follow_up'),
    path('register/', registration_submit, name='registration_submit'),
    path('api/leads/', lead_receive, name='lead_receive'),
]
