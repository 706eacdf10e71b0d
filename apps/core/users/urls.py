from django.urls import path

from .views import token_obtain

urlpatterns = [
    path('api/token/', token_obtain, name='token_obtain'),
]
