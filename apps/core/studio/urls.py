from django.urls import path

from .views import studio_rotate_api_key, studio_settings

urlpatterns = [
    path('', studio_settings, name='studio_settings'),
    path('api-key/rotate/', studio_rotate_api_key, name='studio_rotate_api_key'),
]
