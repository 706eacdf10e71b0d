from django.urls import path

from .views import dashboard, parent_portal

urlpatterns = [
    path('dashboard/', dashboard, name='dashboard'),
    path('portal/', parent_portal, name='parent_portal'),
]
