from django.urls import path

from .views import lead_scores

urlpatterns = [
    path('api/score-leads/', lead_scores, name='lead_scores'),
]
